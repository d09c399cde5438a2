"""
Filesystem blob storage - one directory per bucket.
"""
import logging
from pathlib import Path
from typing import Iterable

from clientdesk.infrastructure.store.base import StoreError

logger = logging.getLogger(__name__)


class LocalBlobStorage:
    """
    Stores blobs under <root>/<bucket>/<key> and serves them from
    <base_url>/<bucket>/<key>.
    """

    def __init__(self, root_dir: str | Path, base_url: str, buckets: Iterable[str]):
        self.root = Path(root_dir).resolve()
        self.base_url = base_url.rstrip("/")
        self.buckets = frozenset(buckets)

    def _path(self, bucket: str, key: str) -> Path:
        if bucket not in self.buckets:
            raise StoreError(f"Bucket not found: {bucket}")
        if not key:
            raise StoreError("Empty storage key")
        bucket_dir = self.root / bucket
        path = (bucket_dir / key).resolve()
        if not path.is_relative_to(bucket_dir):
            raise StoreError(f"Invalid storage key: {key}")
        return path

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/{bucket}/{key}"

    def put(self, bucket: str, key: str, data: bytes) -> str:
        path = self._path(bucket, key)
        if path.exists():
            raise StoreError("The resource already exists")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            logger.warning("Blob write failed for %s/%s: %s", bucket, key, exc)
            raise StoreError(f"Could not store file: {exc.strerror or exc}") from exc
        logger.info("Stored blob %s/%s (%d bytes)", bucket, key, len(data))
        return self.public_url(bucket, key)

    def delete(self, bucket: str, key: str) -> None:
        path = self._path(bucket, key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Blob delete failed for %s/%s: %s", bucket, key, exc)
            raise StoreError(f"Could not delete file: {exc.strerror or exc}") from exc
        logger.info("Deleted blob %s/%s", bucket, key)
