# hr_round/api/media.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from hr_round.api.deps import get_current_user
from hr_round.core.config import settings
from hr_round.core.s3_client import get_s3_client

log = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["media"])


def _user_prefix(user) -> str:
    return f"recordings/{user.id}/"


@router.post("/upload")
def upload_recording(file: UploadFile = File(...), user=Depends(get_current_user)):
    """
    Store an answer recording in S3/MinIO under the caller's prefix and
    return the object key (to be sent back as `video_url`) and a short-lived URL.
    """
    s3 = get_s3_client()
    bucket = settings.s3_bucket
    if not bucket:
        raise HTTPException(status_code=500, detail="S3 bucket not configured")

    safe_name = (file.filename or "recording.webm").replace(" ", "_")
    key = f"{_user_prefix(user)}{datetime.now(timezone.utc).strftime('%Y%m%d')}/{uuid.uuid4().hex}_{safe_name}"

    try:
        file.file.seek(0)
        s3.upload_fileobj(
            Fileobj=file.file,
            Bucket=bucket,
            Key=key,
            ExtraArgs={"ContentType": file.content_type or "application/octet-stream"},
        )
        url = s3.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=settings.presigned_url_expires,
        )
    except Exception as exc:
        log.exception("recording upload failed")
        raise HTTPException(status_code=500, detail=f"upload failed: {exc}")
    finally:
        try:
            file.file.close()
        except Exception:
            pass

    log.info("recording stored", extra={"key": key})
    return {"key": key, "url": url, "content_type": file.content_type}


@router.get("/url")
def recording_url(key: str = Query(...), user=Depends(get_current_user)):
    if not key.startswith(_user_prefix(user)):
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        url = get_s3_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": settings.s3_bucket, "Key": key},
            ExpiresIn=settings.presigned_url_expires,
        )
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"could not sign url: {exc}")
    return {"key": key, "url": url, "expires_in": settings.presigned_url_expires}
