# jobassist/repositories/uploads.py
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from jobassist.db.models import FileUpload
from jobassist.repositories.generic import insert_row
from jobassist.services.storage import StoredFile

UPLOADS_TABLE = "file_uploads"


def record_upload(db: Session, stored: StoredFile, user_id: int) -> int:
    return insert_row(db, UPLOADS_TABLE, {
        "file_name": stored.file_name,
        "original_file_name": stored.original_file_name,
        "file_size": stored.size,
        "mime_type": stored.mime_type,
        "file_path": stored.public_path,
        "created_by": user_id,
    })


def list_uploads(db: Session, user_id: int) -> List[Dict[str, Any]]:
    stmt = (
        select(FileUpload)
        .where(FileUpload.created_by == user_id)
        .order_by(FileUpload.created_at.desc(), FileUpload.id.desc())
    )
    return [
        {
            "id": f.id,
            "fileName": f.file_name,
            "originalFileName": f.original_file_name,
            "fileSize": f.file_size,
            "mimeType": f.mime_type,
            "filePath": f.file_path,
            "createdBy": f.created_by,
            "createdAt": f.created_at,
        }
        for f in db.execute(stmt).scalars()
    ]
