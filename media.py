"""
Media hosting (Cloudinary)

Images and video files live on Cloudinary; documents only keep the returned
URL. Uploads and deletes go through the Cloudinary SDK. Deleting a document
removes its assets on a best-effort basis, with the asset id parsed back out
of the stored URL.
"""

import logging
import os
import re
from typing import Iterable, Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from auth import get_current_admin

logger = logging.getLogger(__name__)

CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")

MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "video/mp4",
    "video/webm",
}

router = APIRouter(prefix="/api/admin", tags=["media"])


def is_configured() -> bool:
    return bool(CLOUDINARY_CLOUD_NAME and CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET)


def configure():
    cloudinary.config(
        cloud_name=CLOUDINARY_CLOUD_NAME,
        api_key=CLOUDINARY_API_KEY,
        api_secret=CLOUDINARY_API_SECRET,
        secure=True,
    )


if is_configured():
    configure()

def extract_public_id(url: Optional[str]) -> Optional[str]:
    """
    Turn a delivery URL such as
    https://res.cloudinary.com/demo/image/upload/v1712/pesantren/news/abc.jpg
    into its public id ("pesantren/news/abc"). Returns None for URLs that do
    not carry an upload/<version>/ segment.
    """
    if not url:
        return None
    parts = url.split("/")
    if "upload" not in parts:
        return None
    upload_index = parts.index("upload")
    if upload_index + 2 >= len(parts):
        return None
    full_path = "/".join(parts[upload_index + 2:])
    return re.sub(r'\.[^/.]+$', '', full_path)


def upload_file(content: bytes, folder: str, tags: Iterable[str]) -> dict:
    return cloudinary.uploader.upload(content, folder=folder, tags=list(tags), resource_type="auto")


def delete_asset(url: Optional[str], resource_type: str = "image"):
    """Best-effort removal of the asset behind `url`; never raises."""
    public_id = extract_public_id(url)
    if not public_id:
        return
    if not is_configured():
        logger.debug("Media host not configured, skipping delete of %s", public_id)
        return
    try:
        result = cloudinary.uploader.destroy(public_id, resource_type=resource_type)
    except cloudinary.exceptions.Error as e:
        logger.warning("Failed to delete media asset %s: %s", public_id, e)
        return
    if result.get("result") == "ok":
        logger.info("Deleted media asset %s", public_id)
    else:
        logger.warning("Media host did not delete %s: %s", public_id, result.get("result"))


def delete_assets(urls: Iterable[Optional[str]]):
    for url in urls:
        delete_asset(url)


@router.post("/upload")
async def upload_media(type: str = "general", file: UploadFile = File(...), admin=Depends(get_current_admin)):
    if not is_configured():
        raise HTTPException(status_code=503, detail="Media storage not configured")
    if file.content_type not in ALLOWED_TYPES:
        raise HTTPException(status_code=400, detail=f"File type {file.content_type} is not allowed")
    content = await file.read()
    if len(content) > MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=400, detail="File too large (max 10MB)")
    folder = f"pesantren/{type}"
    try:
        result = await run_in_threadpool(upload_file, content, folder, [type, "admin-upload"])
    except cloudinary.exceptions.Error as e:
        logger.error("Upload of %s failed: %s", file.filename, e)
        raise HTTPException(status_code=502, detail="Upload to media storage failed")
    logger.info("Uploaded %s to %s", file.filename, result.get("public_id"))
    return {
        "success": True,
        "data": {
            "url": result.get("secure_url"),
            "public_id": result.get("public_id"),
            "width": result.get("width"),
            "height": result.get("height"),
            "format": result.get("format"),
            "resource_type": result.get("resource_type"),
            "bytes": result.get("bytes"),
        },
    }
