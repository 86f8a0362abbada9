import logging
import os
import random
import re
import tempfile
import time
from pathlib import Path

from fastapi import UploadFile

from config import ALLOWED_UPLOAD_TYPES, MAX_UPLOAD_BYTES
from exceptions import FileRejectedException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)

DOCUMENT_PATH_PREFIX = "Uploads"
CHUNK_SIZE = 64 * 1024

_allowed_types = re.compile("|".join(ALLOWED_UPLOAD_TYPES))
_safe_filename = re.compile(r"^[A-Za-z0-9_-]+(\.[A-Za-z0-9]+)?$")


def has_document(upload: UploadFile) -> bool:
    return upload is not None and bool(upload.filename)


def validate_document_type(filename: str, content_type: str):
    extension = os.path.splitext(filename)[1].lower()
    if not (
        extension[1:] in ALLOWED_UPLOAD_TYPES
        and content_type
        and _allowed_types.search(content_type.lower())
    ):
        raise FileRejectedException(
            "File upload error",
            details="Only PDF, JPG, JPEG, and PNG files are allowed",
        )
    return extension


def generate_filename(extension: str) -> str:
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"


def staging_dir(upload_dir) -> Path:
    directory = Path(upload_dir)
    return directory.with_name(f".{directory.name}-incoming")


def save_document(upload: UploadFile, upload_dir, max_bytes: int = MAX_UPLOAD_BYTES) -> str:
    """Store an uploaded document and return its ``Uploads/<name>`` path.

    The content is streamed into a temporary file in a staging directory next
    to ``upload_dir`` (never under the served folder) and only moved into
    place once the whole upload is within ``max_bytes``.
    """
    extension = validate_document_type(upload.filename, upload.content_type)

    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stored_name = generate_filename(extension)
    target = directory / stored_name
    staging = staging_dir(directory)
    staging.mkdir(parents=True, exist_ok=True)

    written = 0
    with tempfile.NamedTemporaryFile(dir=staging, suffix=extension, delete=False) as out:
        partial = Path(out.name)
        try:
            while True:
                chunk = upload.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise FileRejectedException(
                        "File upload error", details="File too large"
                    )
                out.write(chunk)
        except Exception:
            out.close()
            partial.unlink()
            raise
    partial.replace(target)

    logger.info(f"Stored document {stored_name} ({written} bytes)")
    return f"{DOCUMENT_PATH_PREFIX}/{stored_name}"


def remove_document(document_path: str, upload_dir):
    path = Path(upload_dir) / os.path.basename(document_path)
    if path.is_file():
        path.unlink()
        logger.info(f"Removed document {path.name}")


def resolve_download(filename: str, upload_dir) -> Path:
    if not _safe_filename.fullmatch(filename):
        raise ValidationException("Invalid filename")
    path = Path(upload_dir) / os.path.basename(filename)
    if not path.is_file():
        raise NotFoundException("File not found")
    return path
