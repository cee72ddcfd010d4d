from typing import Literal

from pydantic import BaseModel, Field

MIB = 1024 * 1024


class StorageConfig(BaseModel):
    backend: Literal["supabase", "local"] = "supabase"
    base_url: str = ""
    service_key: str = ""
    bucket: str = "media"
    timeout_seconds: float = 30.0
    # Only used by the local backend.
    local_root: str = "./data/storage"


class UploadsConfig(BaseModel):
    max_upload_bytes: int = 5 * MIB
    allowlist_extensions: list[str] = Field(
        default_factory=lambda: [".jpg", ".jpeg", ".png", ".webp", ".gif"]
    )


class AuthConfig(BaseModel):
    secret_key: str = "dev-secret-unsafe"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 72
    min_password_length: int = 8


class AppConfig(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    uploads: UploadsConfig = Field(default_factory=UploadsConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
