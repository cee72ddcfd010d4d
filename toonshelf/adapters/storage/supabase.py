"""Supabase Storage REST gateway."""

import logging

import requests

from toonshelf.config.models import StorageConfig
from toonshelf.domain.assets import public_url
from toonshelf.domain.errors import StorageFailure

logger = logging.getLogger(__name__)


class SupabaseStorageGateway:
    def __init__(self, config: StorageConfig):
        self.base_url = config.base_url.rstrip("/")
        self.service_key = config.service_key
        self.timeout = config.timeout_seconds

    def _headers(self, content_type: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": content_type,
        }

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        url = f"{self.base_url}/storage/v1/object/{bucket}/{path}"
        try:
            resp = requests.post(
                url, data=data, headers=self._headers(content_type), timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error("Storage upload to %s/%s failed: %s", bucket, path, exc)
            raise StorageFailure(f"storage provider unreachable: {exc}") from exc

        if resp.status_code != 200:
            logger.error(
                "Storage rejected upload %s/%s status=%s", bucket, path, resp.status_code
            )
            raise StorageFailure(f"storage provider rejected upload: {resp.text}")

        return public_url(self.base_url, bucket, path)

    def move(self, bucket: str, src_path: str, dest_path: str) -> None:
        body = {"bucketId": bucket, "sourceKey": src_path, "destinationKey": dest_path}
        try:
            resp = requests.post(
                f"{self.base_url}/storage/v1/object/move",
                json=body,
                headers=self._headers("application/json"),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Storage move %s -> %s failed: %s", src_path, dest_path, exc)
            raise StorageFailure(f"storage provider unreachable: {exc}") from exc

        if resp.status_code != 200:
            logger.error(
                "Storage rejected move %s -> %s status=%s", src_path, dest_path, resp.status_code
            )
            raise StorageFailure(f"storage provider rejected move: {resp.text}")
