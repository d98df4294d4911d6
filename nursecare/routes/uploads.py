import logging
import re
import secrets
import time

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from ..auth import get_current_user
from ..config import (
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_PUBLIC_URL,
    R2_SECRET_ACCESS_KEY,
)
from ..models import User
from ..security_utils import sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])

# Presigned URL expiration time (1 hour)
PRESIGNED_URL_EXPIRATION = 3600

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB

IMAGE_TYPES = [
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
]

DOCUMENT_TYPES = IMAGE_TYPES + [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
]

# Logical buckets, stored as key prefixes inside the one R2 bucket
BUCKET_CONFIG = {
    "profile-images": {"max_size": DEFAULT_MAX_FILE_SIZE, "types": IMAGE_TYPES, "public": True},
    "care-logs": {"max_size": 10 * 1024 * 1024, "types": DOCUMENT_TYPES, "public": False},
    "documents": {"max_size": 10 * 1024 * 1024, "types": DOCUMENT_TYPES, "public": False},
    "appointment-files": {"max_size": 10 * 1024 * 1024, "types": DOCUMENT_TYPES, "public": False},
}

FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(/[A-Za-z0-9_-]+)*$")


def get_r2_client():
    """Create and return an R2 client."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def generate_presigned_url(key: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> str:
    """Generate a presigned URL for accessing a private object in R2."""
    params = {"Bucket": R2_BUCKET_NAME, "Key": key}
    if any(key.lower().endswith(ext) for ext in [".jpg", ".jpeg", ".png", ".webp", ".gif", ".pdf"]):
        params["ResponseContentDisposition"] = "inline"

    url = get_r2_client().generate_presigned_url("get_object", Params=params, ExpiresIn=expiration)
    logger.info(f"✅ Generated presigned URL for key: {key}")
    return url


def public_url_for(key: str) -> str:
    return f"{R2_PUBLIC_URL.rstrip('/')}/{key}"


def build_object_key(bucket: str, user_id: int, filename: str, folder: str | None = None) -> str:
    """<bucket>/<user_id>/[<folder>/]<epoch-ms>-<random>.<ext>"""
    safe_name = sanitize_filename(filename)
    ext = safe_name.rsplit(".", 1)[-1].lower() if "." in safe_name else "bin"
    name = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"
    parts = [bucket, str(user_id)]
    if folder:
        parts.append(folder.strip("/"))
    parts.append(name)
    return "/".join(parts)


def check_key_ownership(key: str, user: User) -> None:
    """Users may only touch keys under their own <bucket>/<user_id>/ prefix"""
    parts = key.split("/")
    if ".." in parts or len(parts) < 3 or parts[0] not in BUCKET_CONFIG or parts[1] != str(user.id):
        raise HTTPException(status_code=403, detail="You do not have access to this file")


@router.post("/{bucket}")
async def upload_file(
    bucket: str,
    file: UploadFile = File(...),
    folder: str | None = Form(None),
    current_user: User = Depends(get_current_user),
):
    """Upload a file into one of the storage buckets."""
    config = BUCKET_CONFIG.get(bucket)
    if not config:
        raise HTTPException(
            status_code=400, detail=f"Invalid bucket. Use one of: {', '.join(BUCKET_CONFIG)}"
        )

    if folder and not FOLDER_PATTERN.match(folder.strip("/")):
        raise HTTPException(status_code=400, detail="Invalid folder name")

    if file.content_type not in config["types"]:
        raise HTTPException(status_code=400, detail=f"File type {file.content_type} is not allowed")

    contents = await file.read()
    if len(contents) > config["max_size"]:
        limit_mb = config["max_size"] // (1024 * 1024)
        raise HTTPException(
            status_code=400,
            detail=f"File size exceeds {limit_mb}MB limit. Your file is {len(contents) / (1024 * 1024):.2f}MB.",
        )

    key = build_object_key(bucket, current_user.id, file.filename or "", folder)
    logger.info(f"📤 Uploading {key} ({len(contents)} bytes)")

    try:
        get_r2_client().put_object(
            Bucket=R2_BUCKET_NAME,
            Key=key,
            Body=contents,
            ContentType=file.content_type,
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Upload failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Upload failed")

    result = {"key": key, "bucket": bucket, "size": len(contents), "content_type": file.content_type}
    if config["public"]:
        result["url"] = public_url_for(key)
    return result


@router.get("/signed-url")
async def get_signed_url(
    key: str = Query(...),
    expires_in: int = Query(PRESIGNED_URL_EXPIRATION, ge=60, le=7 * 24 * 3600),
    current_user: User = Depends(get_current_user),
):
    check_key_ownership(key, current_user)
    try:
        return {"url": generate_presigned_url(key, expires_in), "expires_in": expires_in}
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate URL")


@router.delete("")
async def delete_file(
    key: str = Query(...),
    current_user: User = Depends(get_current_user),
):
    check_key_ownership(key, current_user)
    try:
        get_r2_client().delete_object(Bucket=R2_BUCKET_NAME, Key=key)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Delete failed for {key}: {e}")
        raise HTTPException(status_code=500, detail="Delete failed")

    logger.info(f"🗑️ Deleted {key}")
    return {"message": "File deleted", "key": key}
