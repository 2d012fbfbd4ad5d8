from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from folio.config import settings


class StorageBackend(ABC):
    """Object store for uploaded images.

    ``save`` returns the public URL path the file will be served from.
    """

    def __init__(self, url_prefix: str):
        self.url_prefix = url_prefix.rstrip("/")

    @abstractmethod
    async def save(self, data: bytes, filename: str, content_type: str) -> str: ...

    def get_url(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"


class LocalStorage(StorageBackend):
    def __init__(self, base_path: Path, url_prefix: str):
        super().__init__(url_prefix)
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)

    async def save(self, data: bytes, filename: str, content_type: str) -> str:
        path = self.base_path / filename
        await run_in_threadpool(path.write_bytes, data)
        return self.get_url(filename)


class S3Storage(StorageBackend):
    """S3 backend; objects are written under ``prefix/`` in the bucket."""

    def __init__(
        self,
        bucket_name: str,
        *,
        prefix: str = "uploads",
        url_prefix: str = "/uploads",
        region: str = "us-east-1",
    ):
        import boto3

        super().__init__(url_prefix)
        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")
        self.client = boto3.client("s3", region_name=region)

    def _key(self, filename: str) -> str:
        return f"{self.prefix}/{filename}" if self.prefix else filename

    async def save(self, data: bytes, filename: str, content_type: str) -> str:
        await run_in_threadpool(
            self.client.put_object,
            Bucket=self.bucket_name,
            Key=self._key(filename),
            Body=data,
            ContentType=content_type,
        )
        return self.get_url(filename)


@lru_cache(maxsize=1)
def _configured_storage() -> StorageBackend:
    if settings.storage_backend == "s3":
        if not settings.s3_bucket:
            raise RuntimeError("STORAGE_BACKEND=s3 requires S3_BUCKET")
        return S3Storage(
            settings.s3_bucket,
            prefix=settings.s3_prefix,
            url_prefix=settings.upload_url_prefix,
            region=settings.s3_region,
        )
    return LocalStorage(Path(settings.upload_dir), settings.upload_url_prefix)


def get_storage() -> StorageBackend:
    """FastAPI dependency returning the configured storage backend."""
    return _configured_storage()
