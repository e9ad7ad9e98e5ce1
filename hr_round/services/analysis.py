# hr_round/services/analysis.py
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from hr_round.ai import llm_client
from hr_round.ai.llm_client import LLMError
from hr_round.services import prompts

log = logging.getLogger(__name__)

DEFAULT_MAX_SCORE = 10

# labels may come wrapped in markdown emphasis, e.g. "**Score:** 7/10"
_LABEL = r"(?:^|\n)[ \t>*_#-]*{name}[ \t*_]*:[ \t*_]*"

_SCORE_RE = re.compile(_LABEL.format(name="Score") + r"(\d+)", re.I)
_FEEDBACK_RE = re.compile(_LABEL.format(name="Feedback") + r"([^\n]+(?:\n(?![ \t>*_#-]*[A-Za-z ]+[ \t*_]*:)[^\n]+)*)", re.I)
_KEY_POINTS_RE = re.compile(_LABEL.format(name=r"Key Points(?: Covered)?") + r"([^\n]+)", re.I)
_VOICE_TONE_RE = re.compile(_LABEL.format(name="Voice Tone") + r"([^\n]+)", re.I)
_CONFIDENCE_RE = re.compile(_LABEL.format(name="Confidence") + r"([^\n]+)", re.I)


@dataclass
class AnswerAnalysis:
    score: int
    evaluation_feedback: str
    matched_key_points: List[str] = field(default_factory=list)
    voice_tone: Optional[str] = None
    confidence: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


def _clean(value: str) -> str:
    return value.strip().strip("*_").strip()


def parse_analysis_response(analysis_text: Optional[str], max_score: int = DEFAULT_MAX_SCORE) -> AnswerAnalysis:
    """
    Pull score, feedback, key points, tone and confidence out of free-form
    model output. Any field that cannot be found keeps its default; the score
    defaults to half of `max_score` and is clamped to [0, max_score].
    """
    max_score = max_score or DEFAULT_MAX_SCORE
    if not analysis_text:
        return AnswerAnalysis(
            score=max_score // 2,
            evaluation_feedback="Unable to generate detailed analysis.",
        )

    result = AnswerAnalysis(
        score=max_score // 2,
        evaluation_feedback="No specific feedback provided.",
    )

    m = _SCORE_RE.search(analysis_text)
    if m:
        result.score = max(0, min(int(m.group(1)), max_score))

    m = _FEEDBACK_RE.search(analysis_text)
    if m and _clean(m.group(1)):
        result.evaluation_feedback = " ".join(_clean(m.group(1)).split())

    m = _KEY_POINTS_RE.search(analysis_text)
    if m:
        result.matched_key_points = [
            _clean(p) for p in re.split(r",|\n", m.group(1)) if _clean(p)
        ]

    m = _VOICE_TONE_RE.search(analysis_text)
    if m and _clean(m.group(1)):
        result.voice_tone = _clean(m.group(1))

    m = _CONFIDENCE_RE.search(analysis_text)
    if m and _clean(m.group(1)):
        result.confidence = _clean(m.group(1))

    return result


def analyze_answer(question: str, answer: str, max_score: int, context: Optional[str] = None) -> AnswerAnalysis:
    """
    Score an answer with the model. A failed model call degrades to the
    default analysis instead of failing the request.
    """
    max_score = max_score or DEFAULT_MAX_SCORE
    prompt = prompts.analysis_prompt(question, answer, max_score, context)
    try:
        text = llm_client.generate_text(prompt, purpose="analysis")
    except LLMError:
        log.exception("AI analysis failed; using default score")
        text = None
    return parse_analysis_response(text, max_score)
