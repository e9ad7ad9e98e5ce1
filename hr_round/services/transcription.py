# hr_round/services/transcription.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict

from faster_whisper import WhisperModel

from hr_round.core.config import settings

log = logging.getLogger(__name__)


@lru_cache()
def get_whisper_model() -> WhisperModel:
    # loaded on first use; CPU-friendly defaults
    log.info("loading whisper model %s", settings.whisper_model)
    return WhisperModel(settings.whisper_model, device="cpu", compute_type="int8")


def transcribe_audio_file(path: str) -> Dict[str, Any]:
    """Run faster-whisper over an audio file (webm/wav/mp3...) and join the segments."""
    segments, info = get_whisper_model().transcribe(path, vad_filter=True)
    transcript = " ".join((seg.text or "").strip() for seg in segments).strip()
    return {
        "transcript": transcript,
        "language": getattr(info, "language", None),
        "duration": getattr(info, "duration", None),
    }
