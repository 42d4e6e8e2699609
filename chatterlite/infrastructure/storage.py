# chatterlite/infrastructure/storage.py
"""Object storage for chat attachments."""

from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Final

from fastapi import UploadFile

from chatterlite.domain.errors import UpstreamError, ValidationError


UPLOAD_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB


async def read_upload(
    upload: UploadFile, max_size: int, chunk_size: int = UPLOAD_CHUNK_SIZE
) -> bytes:
    """Read an uploaded file, giving up as soon as it grows past ``max_size``."""
    chunks = []
    total_size = 0
    try:
        while True:
            chunk = await upload.read(chunk_size)
            if not chunk:
                break
            total_size += len(chunk)
            if total_size > max_size:
                raise ValidationError("Attachment exceeds allowed size")
            chunks.append(chunk)
    finally:
        await upload.close()
    return b"".join(chunks)


class ObjectStorage(ABC):
    max_size: int

    @abstractmethod
    async def upload(self, path: str, data: bytes, content_type: str | None = None) -> None:
        pass

    @abstractmethod
    async def remove(self, path: str) -> None:
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def get_public_url(self, path: str) -> str:
        pass


class LocalObjectStorage(ObjectStorage):
    """Path-addressed object store on the local filesystem.

    Objects land in ``<root>/<bucket>/<path>`` and are served by the static
    mount at ``<public_url>/<bucket>/<path>``.
    """

    def __init__(self, root: str | Path, bucket: str, public_url: str, max_size: int):
        self.root = Path(root)
        self.bucket = bucket
        self.public_url = public_url.rstrip("/")
        self.max_size = max_size

    @property
    def bucket_root(self) -> Path:
        return self.root / self.bucket

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValidationError(f"Invalid object path: {path}")
        return self.bucket_root.joinpath(*relative.parts)

    async def upload(self, path: str, data: bytes, content_type: str | None = None) -> None:
        if len(data) > self.max_size:
            raise ValidationError("Attachment exceeds allowed size")
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.exists():
                raise ValidationError(f"Object already exists: {path}")
            target.write_bytes(data)
        except OSError as e:
            raise UpstreamError("File upload failed") from e

    async def remove(self, path: str) -> None:
        try:
            self._resolve(path).unlink(missing_ok=True)
        except OSError as e:
            raise UpstreamError("File removal failed") from e

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def get_public_url(self, path: str) -> str:
        return f"{self.public_url}/{self.bucket}/{path}"
