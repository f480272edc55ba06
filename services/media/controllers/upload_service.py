# services/media/controllers/upload_service.py
import logging
import os
import random
import time
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status

from services.media.schemas.uploads import UploadOut
from shared.config import UPLOAD_DIR

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["Upload"])

MAX_UPLOAD_MB = 5
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024


def build_filename(original_name: str) -> str:
    """file-<ms timestamp>-<random><original extension>"""
    extension = os.path.splitext(original_name or "")[1].lower()
    return f"file-{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}{extension}"


@router.post("", response_model=UploadOut)
async def upload_file(request: Request, file: Optional[UploadFile] = File(None)):
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please upload a file")

    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")

    # read one byte past the limit so oversized files are detected without loading all of them
    contents = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(contents) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Limit is {MAX_UPLOAD_MB}MB"
        )

    os.makedirs(UPLOAD_DIR, exist_ok=True)
    file_name = build_filename(file.filename)
    with open(os.path.join(UPLOAD_DIR, file_name), "wb") as out:
        out.write(contents)

    logger.info("Stored upload %s (%d bytes)", file_name, len(contents))
    return UploadOut(
        message="File uploaded successfully",
        url=f"{str(request.base_url).rstrip('/')}/uploads/{file_name}",
    )
