import logging
import os
import uuid

from fastapi import HTTPException, UploadFile, status

from app import config

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MiB


async def read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read the upload in chunks, stopping with a 400 as soon as it passes max_bytes."""
    buf = bytearray()
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File too large (max {config.MAX_UPLOAD_SIZE_MB}MB)",
            )
    return bytes(buf)


async def save_image_upload(file: UploadFile) -> tuple[str, bytes]:
    """
    Validate an uploaded image and write it under UPLOAD_DIR.
    Returns (public path "/uploads/<name>", raw bytes).
    """
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")

    content = await read_limited(file, config.MAX_UPLOAD_SIZE_BYTES)
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    ext = os.path.splitext(file.filename or "")[1].lower()
    if not ext[1:].isalnum():
        ext = ""
    filename = f"{uuid.uuid4().hex}{ext}"
    os.makedirs(config.UPLOAD_DIR, exist_ok=True)
    with open(os.path.join(config.UPLOAD_DIR, filename), "wb") as f:
        f.write(content)

    logger.info("Stored upload %s (%d bytes)", filename, len(content))
    return f"/uploads/{filename}", content


def discard_upload(public_path: str) -> None:
    """Remove a file saved by save_image_upload (e.g. when its DB row could not be written)."""
    path = os.path.join(config.UPLOAD_DIR, os.path.basename(public_path))
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    logger.info("Discarded upload %s", os.path.basename(public_path))
