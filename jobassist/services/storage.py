# jobassist/services/storage.py
import logging
import random
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import UploadFile

from jobassist.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}

CHUNK_SIZE = 1024 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class FileTooLarge(Exception):
    pass


@dataclass
class StoredFile:
    file_name: str           # generated name on disk
    original_file_name: str
    size: int
    mime_type: str
    disk_path: Path
    public_path: str         # "/uploads/<file_name>"


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_file_name(original: str) -> str:
    """<stem>-<ms timestamp>-<random><ext>; only the basename of the client name is used."""
    base = Path(original or "upload").name
    ext = _UNSAFE_CHARS.sub("", Path(base).suffix)
    stem = _UNSAFE_CHARS.sub("_", Path(base).stem).strip("._") or "upload"
    return f"{stem}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


def is_allowed_type(mime_type: Optional[str]) -> bool:
    return mime_type in ALLOWED_MIME_TYPES


async def store_upload(file: UploadFile, directory: Optional[Path] = None, max_bytes: Optional[int] = None) -> StoredFile:
    """
    Stream an upload to disk in chunks. Raises FileTooLarge (and removes the
    partial file) as soon as more than max_bytes have been received.
    """
    directory = directory or upload_dir()
    limit = settings.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    name = generate_file_name(file.filename)
    path = directory / name
    size = 0
    try:
        async with aiofiles.open(path, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > limit:
                    raise FileTooLarge(f"File exceeds {limit} bytes")
                await out.write(chunk)
    except BaseException:
        delete_stored(path)
        raise
    return StoredFile(
        file_name=name,
        original_file_name=file.filename or name,
        size=size,
        mime_type=file.content_type,
        disk_path=path,
        public_path=f"/uploads/{name}",
    )


async def read_limited(file: UploadFile, max_bytes: Optional[int] = None) -> bytes:
    """Read an upload fully into memory, enforcing the same size cap."""
    limit = settings.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    buf = bytearray()
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > limit:
            raise FileTooLarge(f"File exceeds {limit} bytes")
    return bytes(buf)


def resolve_stored(file_name: str, directory: Optional[Path] = None) -> Optional[Path]:
    """Path of a stored upload, None when missing or outside the upload dir."""
    directory = (directory or upload_dir()).resolve()
    candidate = (directory / file_name).resolve()
    if candidate.parent != directory or not candidate.is_file():
        return None
    return candidate


def delete_stored(path: Path) -> bool:
    """
    Best-effort delete of a stored file. Returns True on success.
    """
    try:
        Path(path).unlink(missing_ok=True)
        return True
    except OSError as exc:
        logger.error("Error deleting file %s: %s", path, exc)
        return False
