# hr_round/ai/llm_client.py
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

import httpx

from hr_round.core.config import settings

log = logging.getLogger(__name__)

PROVIDERS = ("gemini", "openai", "ollama", "stub")

SYS_PROMPT = (
    "You are an experienced HR interviewer. Follow the requested output format exactly."
)


class LLMError(Exception):
    pass


# ------------------------------
# Provider calls
# ------------------------------
def _gemini_call(prompt: str, model: str, timeout: float) -> str:
    url = f"{settings.gemini_url.rstrip('/')}/models/{model}:generateContent"
    payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
    with httpx.Client(timeout=timeout) as client:
        r = client.post(url, params={"key": settings.gemini_api_key}, json=payload)
        r.raise_for_status()
        data = r.json()
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise LLMError(f"Unexpected Gemini response shape: {str(data)[:300]}")
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


def _openai_call(prompt: str, model: str, timeout: float) -> str:
    headers = {"Authorization": f"Bearer {settings.openai_api_key}"}
    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": SYS_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "temperature": 0.4,
    }
    with httpx.Client(timeout=timeout) as client:
        r = client.post("https://api.openai.com/v1/chat/completions", headers=headers, json=payload)
        r.raise_for_status()
        data = r.json()
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise LLMError(f"Unexpected OpenAI response shape: {str(data)[:300]}")


def _ollama_call(prompt: str, model: str, timeout: float) -> str:
    url = f"{settings.ollama_url.rstrip('/')}/api/generate"
    payload = {"model": model, "prompt": prompt, "stream": False}
    with httpx.Client(timeout=timeout) as client:
        r = client.post(url, json=payload)
        r.raise_for_status()
        raw = r.content.decode(errors="ignore")
    # Ollama may still answer NDJSON; the generated text is spread over the "response" fields
    chunks = []
    for line in raw.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            body = json.loads(line)
        except ValueError:
            continue
        if isinstance(body, dict) and isinstance(body.get("response"), str):
            chunks.append(body["response"])
    if not chunks:
        raise LLMError(f"Could not read Ollama response: {raw[:300]}")
    return "".join(chunks)


# ------------------------------
# Stub (dev / offline)
# ------------------------------
def _stub_response(prompt: str, purpose: str) -> str:
    if purpose == "questions":
        m = re.search(r"Generate (\d+) ", prompt)
        n = int(m.group(1)) if m else 3
        pos = re.search(r"- Job Position: (.+)", prompt)
        role = pos.group(1).strip() if pos else "this role"
        pool = [
            ("Tell me about yourself and why you are interested in the {role} position.", "Behavioral"),
            ("Describe a time you disagreed with a teammate. How did you resolve it?", "Behavioral"),
            ("Walk me through a project on your resume that you are most proud of.", "Technical"),
            ("How would you handle a deadline you realise you cannot meet?", "Situational"),
            ("What kind of team culture helps you do your best work?", "Cultural Fit"),
        ]
        questions = []
        for i in range(n):
            text, category = pool[i % len(pool)]
            questions.append({
                "text": text.format(role=role),
                "category": category,
                "expectedKeyPoints": ["Clear structure", "Concrete example"],
                "maxScore": 10,
                "timeLimit": 120,
                "followUpQuestions": [],
            })
        return json.dumps({"questions": questions})
    if purpose == "analysis":
        m = re.search(r"out of (\d+)", prompt)
        max_score = int(m.group(1)) if m else 10
        return (
            f"Score: {max(1, (max_score * 7) // 10)}\n"
            "Feedback: Clear answer with a relevant example; add measurable outcomes.\n"
            "Key Points: Clear structure, Concrete example\n"
            "Voice Tone: Neutral\n"
            "Confidence: Moderate\n"
        )
    return "Can you give a specific example that illustrates your previous answer?"


# ------------------------------
# Public API
# ------------------------------
def _resolve_provider() -> str:
    provider = (settings.ai_provider or "stub").lower()
    if provider not in PROVIDERS:
        log.warning("Unknown AI_PROVIDER=%s, using stub", provider)
        return "stub"
    if provider == "gemini" and not settings.gemini_api_key:
        log.warning("GEMINI_API_KEY not set, using stub")
        return "stub"
    if provider == "openai" and not settings.openai_api_key:
        log.warning("OPENAI_API_KEY not set, using stub")
        return "stub"
    return provider


def generate_text(prompt: str, purpose: str = "text", model: Optional[str] = None, timeout: Optional[float] = None) -> str:
    """
    Send one prompt to the configured provider and return the generated text.

    `purpose` ("questions", "analysis", "follow_up") is used for logging and to
    shape stub output. No retries: transport errors surface as LLMError.
    """
    provider = _resolve_provider()
    timeout = timeout or settings.llm_timeout_seconds
    log.info("llm call", extra={"provider": provider, "purpose": purpose, "prompt_chars": len(prompt)})

    if provider == "stub":
        return _stub_response(prompt, purpose)

    try:
        if provider == "gemini":
            text = _gemini_call(prompt, model or settings.gemini_model, timeout)
        elif provider == "openai":
            text = _openai_call(prompt, model or settings.openai_model, timeout)
        else:
            text = _ollama_call(prompt, model or settings.ollama_model, timeout)
    except httpx.HTTPError as e:
        raise LLMError(f"Request to {provider} failed: {e}") from e
    except ValueError as e:
        # 200 with a body that is not JSON (proxy error pages and the like)
        raise LLMError(f"Unreadable response from {provider}: {e}") from e

    text = (text or "").strip()
    if not text:
        raise LLMError(f"{provider} returned an empty response")
    return text


def extract_json(text: str) -> Dict[str, Any]:
    """
    Pull the outermost {...} block out of model output (models like to wrap JSON
    in prose or markdown fences) and parse it.
    """
    m = re.search(r"\{[\s\S]*\}", text or "")
    if not m:
        raise LLMError("No valid JSON found in response")
    try:
        parsed = json.loads(m.group(0))
    except ValueError as e:
        raise LLMError(f"Failed to parse JSON response: {e}") from e
    if not isinstance(parsed, dict):
        raise LLMError("JSON response is not an object")
    return parsed
