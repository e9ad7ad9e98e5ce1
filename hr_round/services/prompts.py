# hr_round/services/prompts.py
"""Prompt templates sent to the generative model.

Templates use str.format(); literal JSON braces are doubled.
"""
from typing import Iterable, Optional

QUESTIONS_TPL = """Generate {n} professional HR interview questions for a {job_position} role.

Format STRICTLY as JSON with the following structure and nothing else:
{{
  "questions": [
    {{
      "text": "Main question text",
      "category": "Behavioral|Technical|Situational|Cultural Fit",
      "expectedKeyPoints": [
        "Key point 1 to evaluate in the answer",
        "Key point 2 to evaluate in the answer"
      ],
      "maxScore": 10,
      "timeLimit": 120,
      "followUpQuestions": [
        {{
          "text": "Follow-up question 1",
          "expectedKeyPoints": ["Key point for follow-up"],
          "maxScore": 5,
          "timeLimit": 90
        }}
      ]
    }}
  ]
}}

Context Details:
- Job Position: {job_position}
- Experience Level: {job_experience} years
- Resume: {resume}
- Job Description: {job_description}
- Required Skills: {skills}
- Difficulty Level: {difficulty_level}

Guidelines:
1. Generate exactly {n} questions
2. Questions should be relevant to the job position and experience level
3. Include a mix of technical, behavioral, and situational questions
4. Each main question should have 2-3 expected key points
5. Include at most {max_follow_ups} follow-up questions per main question, only where meaningful
6. Ensure questions are professional and job-specific
7. About 30% of the questions should be drawn from the resume (if one is provided)
"""

FOLLOW_UP_TPL = """Generate a follow-up question based on the candidate's answer:

Original Question: {question}
Candidate's Answer: {answer}

Create a probing question that helps the candidate elaborate on their previous response or clarify any points.
The question should be specific to the content of their answer and address areas that could benefit from more detail.
Keep the follow-up question concise and focused. Reply with the question text only."""

GUIDED_FOLLOW_UP_TPL = """Generate an insightful follow-up question based on the provided details:

Original Question: {question}
Candidate's Answer: {answer}
{context_line}
Guidelines:
- Ensure the question is specific and thought-provoking.
- Encourage a deeper understanding of the topic.
- Prompt the candidate to provide a more detailed or nuanced explanation.
- Reply with the question text only, no preamble."""

STRONG_ANSWER_CONTEXT = (
    "This candidate gave a strong answer. Generate a follow-up question that explores "
    "the topic more deeply or tests their knowledge further."
)
WEAK_ANSWER_CONTEXT = (
    "This candidate's answer needs improvement. Generate a follow-up question that gives "
    "them a chance to clarify or expand on their answer."
)

ANALYSIS_TPL = """Analyze this interview answer:
Question: {question}
{context_line}Candidate's Answer: {answer}

Provide a concise evaluation using exactly these labelled lines:
Score: <integer out of {max_score}>
Feedback: <concise, constructive feedback in one paragraph>
Key Points: <comma-separated key points the answer covered>
Voice Tone: <one or two words>
Confidence: <low, moderate or high>"""


def questions_prompt(
    *,
    n: int,
    job_position: str,
    job_description: str,
    job_experience: str,
    difficulty_level: str,
    skills: Optional[Iterable[str]] = None,
    resume: Optional[str] = None,
    max_follow_ups: int = 2,
) -> str:
    skills = [s for s in (skills or []) if s]
    return QUESTIONS_TPL.format(
        n=n,
        job_position=job_position,
        job_description=job_description,
        job_experience=job_experience,
        difficulty_level=difficulty_level,
        skills=", ".join(skills) if skills else "Not specified",
        resume=(resume or "").strip() or "Not provided",
        max_follow_ups=max_follow_ups,
    )


def follow_up_prompt(question: str, answer: str, context: Optional[str] = None) -> str:
    if context is None:
        return FOLLOW_UP_TPL.format(question=question, answer=answer)
    context_line = f"Additional Context: {context}\n" if context else ""
    return GUIDED_FOLLOW_UP_TPL.format(question=question, answer=answer, context_line=context_line)


def analysis_prompt(question: str, answer: str, max_score: int, context: Optional[str] = None) -> str:
    context_line = f"Context: {context}\n" if context else ""
    return ANALYSIS_TPL.format(
        question=question,
        answer=answer,
        max_score=max_score,
        context_line=context_line,
    )
