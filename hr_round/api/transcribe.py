# hr_round/api/transcribe.py
import logging
import os
import tempfile

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from hr_round.api.deps import get_current_user
from hr_round.services import transcription

log = logging.getLogger(__name__)

router = APIRouter(prefix="/transcribe", tags=["transcription"])


@router.post("")
def transcribe_audio(audio: UploadFile = File(...), user=Depends(get_current_user)):
    """
    Synchronous speech-to-text for a recorded answer.
    The upload is spooled to a temp file and run through Faster-Whisper.
    """
    suffix = os.path.splitext(audio.filename or "")[1] or ".webm"
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
        tmp_path = tmp.name
        try:
            audio.file.seek(0)
            tmp.write(audio.file.read())
        except Exception as e:
            raise HTTPException(status_code=400, detail=f"Could not read audio upload: {e}")

    try:
        result = transcription.transcribe_audio_file(tmp_path)
    except Exception as e:
        log.exception("transcription failed")
        raise HTTPException(status_code=500, detail=f"Transcription failed: {e}")
    finally:
        try:
            os.remove(tmp_path)
        except OSError:
            pass

    if not result["transcript"]:
        raise HTTPException(status_code=400, detail="No speech detected in the recording")
    return result
