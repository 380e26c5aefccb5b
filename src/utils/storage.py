"""File blob storage.

Blobs are grouped in buckets; each bucket is a directory under STORAGE_DIR
and each blob path is relative to its bucket.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

import config
from core.exceptions import RecordNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class BlobStorage:
    """Local filesystem blob namespace."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else config.STORAGE_DIR

    def _resolve(self, bucket: str, path: str) -> Path:
        bucket_dir = (self.root / bucket).resolve()
        target = (bucket_dir / path).resolve()
        # Paths must stay inside their bucket
        if bucket_dir not in target.parents:
            raise ValidationError(f"Invalid storage path: {path}")
        return target

    def upload(self, bucket: str, path: str, data: bytes, upsert: bool = False) -> str:
        """Store bytes at bucket/path and return the path.

        Raises:
            ValidationError: If the blob exists and upsert is False, or the
                path escapes the bucket.
        """
        target = self._resolve(bucket, path)
        if target.exists() and not upsert:
            raise ValidationError(f"File already exists: {path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored %d bytes at %s/%s", len(data), bucket, path)
        return path

    def download(self, bucket: str, path: str) -> bytes:
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise RecordNotFoundError("File", path)
        return target.read_bytes()

    def remove(self, bucket: str, paths: Iterable[str]) -> int:
        """Delete blobs; missing ones are skipped. Returns how many were deleted."""
        removed = 0
        for path in paths:
            target = self._resolve(bucket, path)
            if target.is_file():
                target.unlink()
                removed += 1
        return removed
