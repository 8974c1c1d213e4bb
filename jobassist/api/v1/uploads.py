# jobassist/api/v1/uploads.py
"""
File intake.
- POST /upload             multipart `file` + form `userId`; streams to UPLOAD_DIR, records metadata
- GET  /uploads/{userId}   the user's uploads, newest first
- GET  /uploads/{fileName} the stored file itself
If the metadata insert fails the just-written file is removed again.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from jobassist.api.v1.deps import db_failed
from jobassist.core.config import settings
from jobassist.core.errors import BadRequest, NotFound, UpstreamFailure, envelope
from jobassist.db.session import get_db
from jobassist.repositories import uploads as uploads_repo
from jobassist.services import storage

logger = logging.getLogger(__name__)

router = APIRouter()


def check_upload_type(file: UploadFile) -> None:
    if not storage.is_allowed_type(file.content_type):
        raise BadRequest("Invalid file type. Only PDF, DOC, DOCX and TXT files are allowed", "INVALID_FILE_TYPE")


def too_large() -> BadRequest:
    limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
    return BadRequest(f"File too large. Maximum size is {limit_mb}MB", "FILE_TOO_LARGE")


@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    user_id: int = Form(..., alias="userId"),
    db: Session = Depends(get_db),
):
    check_upload_type(file)
    try:
        stored = await storage.store_upload(file)
    except storage.FileTooLarge:
        raise too_large()
    except OSError:
        logger.exception("Failed to write upload %s", file.filename)
        raise UpstreamFailure("Failed to store file", "STORAGE_ERROR")

    try:
        file_id = await run_in_threadpool(uploads_repo.record_upload, db, stored, user_id)
    except SQLAlchemyError:
        storage.delete_stored(stored.disk_path)
        raise db_failed("Failed to save file metadata")

    logger.info("stored upload %s (%d bytes) for user %s", stored.file_name, stored.size, user_id)
    return envelope("File uploaded successfully", {
        "fileId": file_id,
        "fileName": stored.file_name,
        "filePath": stored.public_path,
        "fileSize": stored.size,
    })


@router.get("/uploads/{user_id:int}")
def list_user_uploads(user_id: int, db: Session = Depends(get_db)):
    try:
        return envelope("Files fetched", uploads_repo.list_uploads(db, user_id))
    except SQLAlchemyError:
        raise db_failed("Failed to fetch files")


@router.get("/uploads/{file_name}")
async def get_uploaded_file(file_name: str):
    path = storage.resolve_stored(file_name)
    if path is None:
        raise NotFound("File not found", "FILE_NOT_FOUND")
    return FileResponse(path)
