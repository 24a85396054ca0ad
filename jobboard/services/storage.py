"""
Local filesystem storage for uploaded CVs.

Files are stored under UPLOAD_DIR/<first two chars of key>/<key>; the
database keeps only the key plus the original filename, content type and
size.
"""

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from jobboard.core.config import settings
from jobboard.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class StoredFile:
    key: str
    filename: str
    content_type: str
    byte_size: int


class LocalFileStorage:
    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / key[:2] / key

    async def save(self, upload: UploadFile) -> StoredFile:
        """Write an uploaded file under a fresh key."""
        data = await upload.read()
        key = uuid.uuid4().hex
        await run_in_threadpool(self._write, self.path_for(key), data)

        stored = StoredFile(
            key=key,
            filename=Path(upload.filename or key).name,
            content_type=upload.content_type or DEFAULT_CONTENT_TYPE,
            byte_size=len(data),
        )
        logger.info("Attachment stored", key=key, filename=stored.filename, byte_size=stored.byte_size)
        return stored

    async def delete(self, key: str) -> None:
        await run_in_threadpool(self._unlink, self.path_for(key))
        logger.info("Attachment purged", key=key)

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    @staticmethod
    def _unlink(path: Path) -> None:
        path.unlink(missing_ok=True)


def get_storage(root: Optional[str] = None) -> LocalFileStorage:
    return LocalFileStorage(Path(root or settings.UPLOAD_DIR))


def is_upload_present(upload: Optional[UploadFile]) -> bool:
    """Browsers send an empty, nameless part when no file was picked."""
    return upload is not None and bool(upload.filename)
