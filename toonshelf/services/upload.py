import logging
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID, uuid4

from toonshelf.config.models import StorageConfig, UploadsConfig
from toonshelf.domain.assets import AssetTier, object_path
from toonshelf.domain.errors import FileTooLarge, InvalidFileType, InvalidInput
from toonshelf.ports.storage import StorageGatewayPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    url: str
    path: str
    size_bytes: int


class UploadService:
    def __init__(
        self,
        storage: StorageGatewayPort,
        storage_config: StorageConfig,
        rules: UploadsConfig,
    ):
        self.storage = storage
        self.bucket = storage_config.bucket
        self.rules = rules

    def upload_file(
        self,
        user_id: UUID | str,
        filename: str,
        data: bytes,
        content_type: str,
    ) -> UploadResult:
        """
        Validate an image and store it in the uploader's draft area.

        The bucket comes from server config; clients cannot choose it.
        """
        # 1. Validation
        if not filename:
            raise InvalidInput("filename required")

        ext = Path(filename).suffix.lower()
        if ext not in self.rules.allowlist_extensions:
            raise InvalidFileType("invalid file type. Only images are allowed")

        if len(data) > self.rules.max_upload_bytes:
            raise FileTooLarge(
                f"file too large. Max {self.rules.max_upload_bytes // (1024 * 1024)}MB"
            )

        # 2. Draft path: drafts/{user_id}/{uuid}{ext}
        path = object_path(AssetTier.DRAFT, user_id, f"{uuid4()}{ext}")

        # 3. Store
        url = self.storage.upload(self.bucket, path, data, content_type)
        logger.info("Uploaded %s (%d bytes) for user %s", path, len(data), user_id)

        return UploadResult(url=url, path=path, size_bytes=len(data))
