"""
End-to-end moderation flow against SQLite and the local storage backend:
upload drafts, create, submit, approve, then take down.
"""

import pytest

from toonshelf.adapters.sqlite.migrator import SQLiteMigrator
from toonshelf.adapters.sqlite.repos import (
    SQLiteChapterRepo,
    SQLiteComicRepo,
    SQLiteTagRepo,
    SQLiteUserRepo,
)
from toonshelf.adapters.storage.local import LocalStorageGateway
from toonshelf.config.models import StorageConfig, UploadsConfig
from toonshelf.domain.entities import User
from toonshelf.domain.errors import StorageFailure
from toonshelf.services.comic import ComicService
from toonshelf.services.models import (
    ChapterTranslationInput,
    CreateChapterInput,
    CreateComicInput,
    TranslationInput,
)
from toonshelf.services.upload import UploadService


@pytest.fixture
def env(tmp_path, clock):
    db_path = str(tmp_path / "flow.db")
    SQLiteMigrator(db_path).run_migrations()

    storage_config = StorageConfig(
        backend="local", base_url="http://localhost:8000", local_root=str(tmp_path / "objects")
    )
    storage = LocalStorageGateway(storage_config)
    user_repo = SQLiteUserRepo(db_path)

    comics = ComicService(
        comic_repo=SQLiteComicRepo(db_path),
        chapter_repo=SQLiteChapterRepo(db_path),
        tag_repo=SQLiteTagRepo(db_path),
        user_repo=user_repo,
        storage=storage,
        clock=clock,
        bucket=storage_config.bucket,
    )
    uploads = UploadService(storage, storage_config, UploadsConfig())

    user = User(username="artist", email="artist@example.com", password_hash="h")
    user_repo.save(user)

    return {
        "comics": comics,
        "uploads": uploads,
        "storage": storage,
        "user_repo": user_repo,
        "user": user,
    }


def _create_pending_comic(env):
    comics, uploads, user = env["comics"], env["uploads"], env["user"]

    cover = uploads.upload_file(user.id, "cover.png", b"cover", "image/png")
    page = uploads.upload_file(user.id, "page.jpg", b"page", "image/jpeg")

    comic = comics.create_comic(
        user.id,
        CreateComicInput(
            translations=[TranslationInput("en", "Lantern Street")],
            cover_image_url=cover.url,
        ),
    )
    comics.create_chapter(
        comic.id,
        user.id,
        CreateChapterInput(
            chapter_number=1,
            translations=[ChapterTranslationInput("en", "Lights")],
            image_urls=[page.url],
        ),
    )
    comics.request_publish(comic.id, user.id)
    return comic, cover, page


def test_full_moderation_flow(env):
    comics, storage, user = env["comics"], env["storage"], env["user"]

    comic, cover, page = _create_pending_comic(env)

    # Creating a comic promoted the plain user.
    assert env["user_repo"].get_by_id(user.id).role == "creator"
    assert cover.path.startswith(f"drafts/{user.id}/")

    approved = comics.approve_comic(comic.id)
    assert approved.status == "published"
    assert approved.visibility == "public"

    public_cover = cover.path.replace("drafts/", "public/", 1)
    public_page = page.path.replace("drafts/", "public/", 1)
    assert approved.cover_image_url.endswith(f"/media/{public_cover}")
    assert storage.get("media", public_cover) == b"cover"
    assert storage.get("media", public_page) == b"page"
    with pytest.raises(FileNotFoundError):
        storage.get("media", cover.path)

    stored = comics.get_comic(comic.id)
    assert stored.chapters[0].images[0].image_url.endswith(f"/media/{public_page}")
    assert [c.id for c in comics.list_public_comics()] == [comic.id]

    # Approving again finds nothing left in the draft tier.
    again = comics.approve_comic(comic.id)
    assert again.status == "published"
    assert again.cover_image_url == approved.cover_image_url
    assert storage.get("media", public_cover) == b"cover"

    taken_down = comics.reject_comic(comic.id, "reported")
    assert taken_down.status == "rejected"
    assert comics.list_public_comics() == []


def test_partial_failure_then_retry(env):
    comics, storage = env["comics"], env["storage"]
    comic, cover, page = _create_pending_comic(env)

    # Lose the page object so its move fails after the cover has moved.
    storage.move("media", page.path, "lost/page.jpg")

    with pytest.raises(StorageFailure):
        comics.approve_comic(comic.id)

    stored = comics.get_comic(comic.id)
    assert stored.status == "pending_review"
    assert stored.cover_image_url == cover.url

    # Restore the page; the retry fails on the cover, whose object already moved.
    storage.move("media", "lost/page.jpg", page.path)
    with pytest.raises(StorageFailure):
        comics.approve_comic(comic.id)
