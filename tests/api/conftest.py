from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from toonshelf.api import deps
from toonshelf.api.routes import admin, auth, chapters, comics, library, tags, uploads, users
from toonshelf.services.auth import AuthService
from toonshelf.services.library import LibraryService
from toonshelf.services.upload import UploadService
from toonshelf.services.user import UserService


class Caller:
    """Holds the user the test client acts as; None means anonymous."""

    def __init__(self) -> None:
        self.user = None


@pytest.fixture
def caller() -> Caller:
    return Caller()


@pytest.fixture
def auth_adapter():
    adapter = Mock()
    adapter.hash_password.side_effect = lambda p: f"hashed:{p}"
    adapter.verify_password.side_effect = lambda plain, hashed: hashed == f"hashed:{plain}"
    adapter.create_token.return_value = "signed.jwt"
    return adapter


@pytest.fixture
def app(
    caller,
    comic_service,
    user_repo,
    library_repo,
    comic_repo,
    tag_repo,
    storage,
    storage_config,
    uploads_config,
    auth_adapter,
    clock,
) -> FastAPI:
    """Test FastAPI app with every router and in-memory services."""
    app = FastAPI()
    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(users.router, prefix="/api/users")
    app.include_router(comics.router, prefix="/api/comics")
    app.include_router(chapters.router, prefix="/api/chapters")
    app.include_router(admin.router, prefix="/api/admin")
    app.include_router(uploads.router, prefix="/api/uploads")
    app.include_router(library.router, prefix="/api/library")
    app.include_router(tags.router, prefix="/api/tags")

    app.dependency_overrides[deps.get_optional_user] = lambda: caller.user
    app.dependency_overrides[deps.get_comic_service] = lambda: comic_service
    app.dependency_overrides[deps.get_upload_service] = lambda: UploadService(
        storage, storage_config, uploads_config
    )
    app.dependency_overrides[deps.get_library_service] = lambda: LibraryService(
        library_repo, comic_repo, clock
    )
    app.dependency_overrides[deps.get_auth_service] = lambda: AuthService(
        user_repo, auth_adapter, clock
    )
    app.dependency_overrides[deps.get_user_service] = lambda: UserService(user_repo, clock)
    app.dependency_overrides[deps.get_tag_repo] = lambda: tag_repo

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
