import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from toonshelf.adapters.auth.crypto import JWTAuthAdapter
from toonshelf.adapters.clock import SystemClock
from toonshelf.adapters.sqlite.repos import (
    SQLiteChapterRepo,
    SQLiteComicRepo,
    SQLiteLibraryRepo,
    SQLiteTagRepo,
    SQLiteUserRepo,
)
from toonshelf.adapters.storage.local import LocalStorageGateway
from toonshelf.adapters.storage.supabase import SupabaseStorageGateway
from toonshelf.config.loader import load_config
from toonshelf.config.models import AppConfig
from toonshelf.domain.entities import User
from toonshelf.ports.storage import StorageGatewayPort
from toonshelf.services.auth import AuthService
from toonshelf.services.comic import ComicService
from toonshelf.services.library import LibraryService
from toonshelf.services.upload import UploadService
from toonshelf.services.user import UserService


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("TOONSHELF_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "toonshelf.db")
        self.config_path = Path(
            os.environ.get("TOONSHELF_CONFIG", str(self.base_dir / "config.yaml"))
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Config ---
@lru_cache
def get_config() -> AppConfig:
    return load_config(get_settings().config_path)


# --- Repos ---
def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


def get_comic_repo(settings: Settings = Depends(get_settings)) -> SQLiteComicRepo:
    return SQLiteComicRepo(settings.db_path)


def get_chapter_repo(settings: Settings = Depends(get_settings)) -> SQLiteChapterRepo:
    return SQLiteChapterRepo(settings.db_path)


def get_tag_repo(settings: Settings = Depends(get_settings)) -> SQLiteTagRepo:
    return SQLiteTagRepo(settings.db_path)


def get_library_repo(settings: Settings = Depends(get_settings)) -> SQLiteLibraryRepo:
    return SQLiteLibraryRepo(settings.db_path)


# --- Adapters ---
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_storage(config: AppConfig = Depends(get_config)) -> StorageGatewayPort:
    if config.storage.backend == "local":
        return LocalStorageGateway(config.storage)
    return SupabaseStorageGateway(config.storage)


def get_auth_adapter(config: AppConfig = Depends(get_config)) -> JWTAuthAdapter:
    return JWTAuthAdapter(config.auth)


# --- Services ---
def get_comic_service(
    comic_repo: SQLiteComicRepo = Depends(get_comic_repo),
    chapter_repo: SQLiteChapterRepo = Depends(get_chapter_repo),
    tag_repo: SQLiteTagRepo = Depends(get_tag_repo),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    storage: StorageGatewayPort = Depends(get_storage),
    clock: SystemClock = Depends(get_clock),
    config: AppConfig = Depends(get_config),
) -> ComicService:
    return ComicService(
        comic_repo=comic_repo,
        chapter_repo=chapter_repo,
        tag_repo=tag_repo,
        user_repo=user_repo,
        storage=storage,
        clock=clock,
        bucket=config.storage.bucket,
    )


def get_upload_service(
    storage: StorageGatewayPort = Depends(get_storage),
    config: AppConfig = Depends(get_config),
) -> UploadService:
    return UploadService(storage=storage, storage_config=config.storage, rules=config.uploads)


def get_library_service(
    repo: SQLiteLibraryRepo = Depends(get_library_repo),
    comic_repo: SQLiteComicRepo = Depends(get_comic_repo),
    clock: SystemClock = Depends(get_clock),
) -> LibraryService:
    return LibraryService(repo=repo, comic_repo=comic_repo, clock=clock)


def get_auth_service(
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    config: AppConfig = Depends(get_config),
) -> AuthService:
    return AuthService(
        user_repo=user_repo,
        auth_adapter=auth_adapter,
        clock=clock,
        min_password_length=config.auth.min_password_length,
    )


def get_user_service(
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    clock: SystemClock = Depends(get_clock),
) -> UserService:
    return UserService(user_repo=user_repo, clock=clock)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_optional_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> User | None:
    """Resolve the bearer token to a user, or None for anonymous requests."""
    if not token:
        return None

    payload = auth_adapter.validate_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None or not isinstance(user_id, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        subject = UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        ) from None

    # Role is read from the store, not the token, so promotions apply immediately.
    user = user_repo.get_by_id(subject)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return current_user
