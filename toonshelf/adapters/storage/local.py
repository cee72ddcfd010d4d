import logging
import os
from pathlib import Path

from toonshelf.config.models import StorageConfig
from toonshelf.domain.assets import public_url
from toonshelf.domain.errors import StorageFailure

logger = logging.getLogger(__name__)


class LocalStorageGateway:
    """
    Filesystem-backed storage for development.

    Objects live under ``<local_root>/<bucket>/<path>`` and are reported with
    the same public URL layout as the hosted backend.
    """

    def __init__(self, config: StorageConfig):
        self.base_url = config.base_url
        self.base_path = Path(config.local_root).resolve()
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, bucket: str, path: str) -> Path:
        # Prevent traversal
        target = (self.base_path / bucket / path).resolve()
        if not target.is_relative_to(self.base_path / bucket):
            raise StorageFailure(f"Path traversal attempt detected: {path}")
        return target

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        target = self._safe_path(bucket, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as f:
                f.write(data)
        except OSError as exc:
            raise StorageFailure(f"storage provider rejected upload: {exc}") from exc
        return public_url(self.base_url, bucket, path)

    def move(self, bucket: str, src_path: str, dest_path: str) -> None:
        source = self._safe_path(bucket, src_path)
        dest = self._safe_path(bucket, dest_path)
        if not source.exists():
            raise StorageFailure(f"storage provider rejected move: {src_path} not found")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            os.replace(source, dest)
        except OSError as exc:
            raise StorageFailure(f"storage provider rejected move: {exc}") from exc
        logger.debug("Moved %s/%s to %s", bucket, src_path, dest_path)

    def get(self, bucket: str, path: str) -> bytes:
        """Read an object back. Raises FileNotFoundError."""
        target = self._safe_path(bucket, path)
        if not target.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(target, "rb") as f:
            return f.read()
