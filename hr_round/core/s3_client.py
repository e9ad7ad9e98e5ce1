import boto3
from functools import lru_cache
from botocore.client import Config
from hr_round.core.config import settings


@lru_cache()
def get_s3_client():
    """
    MinIO/S3 client with explicit credentials and path-style addressing.
    Recordings of interview answers live here.
    """
    return boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint,
        region_name=settings.s3_region or "us-east-1",
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        config=Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"}  # MinIO-friendly
        ),
    )
