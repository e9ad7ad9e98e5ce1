# hr_round/services/chat.py
from typing import Any, Dict, List

from hr_round.db import models as m


def chat_history(interview: m.HRInterview) -> List[Dict[str, Any]]:
    """Main questions in order with whatever the candidate answered so far."""
    out = []
    for q in interview.questions:
        ans = q.user_answer
        out.append({
            "id": q.id,
            "text": q.text,
            "user_answer": ans.user_answer if ans else None,
            "score": ans.score if ans else None,
            "feedback": ans.evaluation_feedback if ans else None,
        })
    return out
