from datetime import datetime, timedelta
from uuid import UUID

import pytest

from toonshelf.config.models import StorageConfig, UploadsConfig
from toonshelf.domain.entities import Chapter, Comic, ComicStatus, LibraryFolder, Tag, User
from toonshelf.domain.errors import StorageFailure
from toonshelf.services.comic import ComicService
from toonshelf.services.models import CreateComicInput, TranslationInput

BASE_URL = "https://proj.supabase.co"
BUCKET = "media"


# --- Fakes ---


class FixedClock:
    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2025, 1, 1, 12, 0, 0)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: int) -> None:
        self._now += timedelta(seconds=seconds)


class InMemoryDB:
    """Shared tables for the in-memory repositories. Stores deep copies."""

    def __init__(self) -> None:
        self.users: dict[UUID, User] = {}
        self.comics: dict[UUID, Comic] = {}
        self.chapters: dict[UUID, Chapter] = {}
        self.tags: dict[str, Tag] = {}
        self.folders: dict[UUID, LibraryFolder] = {}


class InMemoryUserRepo:
    def __init__(self, db: InMemoryDB) -> None:
        self.db = db
        self.save_count = 0

    def get_by_id(self, user_id: UUID) -> User | None:
        user = self.db.users.get(user_id)
        return user.model_copy(deep=True) if user else None

    def get_by_email(self, email: str) -> User | None:
        for user in self.db.users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None

    def get_by_username(self, username: str) -> User | None:
        for user in self.db.users.values():
            if user.username == username:
                return user.model_copy(deep=True)
        return None

    def save(self, user: User) -> None:
        self.save_count += 1
        self.db.users[user.id] = user.model_copy(deep=True)


class InMemoryComicRepo:
    def __init__(self, db: InMemoryDB) -> None:
        self.db = db
        self.save_count = 0

    def save(self, comic: Comic) -> Comic:
        self.save_count += 1
        for tag in comic.tags:
            self.db.tags[tag.slug] = tag.model_copy(deep=True)
        for chapter in comic.chapters:
            self.db.chapters[chapter.id] = chapter.model_copy(deep=True)
        self.db.comics[comic.id] = comic.model_copy(deep=True, update={"chapters": []})
        return comic

    def get_by_id(self, comic_id: UUID) -> Comic | None:
        comic = self.db.comics.get(comic_id)
        if not comic:
            return None
        chapters = sorted(
            (c.model_copy(deep=True) for c in self.db.chapters.values() if c.comic_id == comic_id),
            key=lambda c: c.chapter_number,
        )
        return comic.model_copy(deep=True, update={"chapters": chapters})

    def _list(self, predicate) -> list[Comic]:
        return [
            self.get_by_id(c.id)  # type: ignore[misc]
            for c in self.db.comics.values()
            if predicate(c)
        ]

    def list_by_status(self, status: ComicStatus) -> list[Comic]:
        return self._list(lambda c: c.status == status)

    def list_by_creator(self, creator_id: UUID) -> list[Comic]:
        return self._list(lambda c: c.creator_id == creator_id)

    def list_public(self) -> list[Comic]:
        return self._list(lambda c: c.status == "published" and c.visibility == "public")

    def delete(self, comic_id: UUID) -> None:
        self.db.comics.pop(comic_id, None)
        for chapter_id in [c.id for c in self.db.chapters.values() if c.comic_id == comic_id]:
            del self.db.chapters[chapter_id]


class InMemoryChapterRepo:
    def __init__(self, db: InMemoryDB) -> None:
        self.db = db
        self.save_count = 0

    def save(self, chapter: Chapter) -> Chapter:
        self.save_count += 1
        self.db.chapters[chapter.id] = chapter.model_copy(deep=True)
        return chapter

    def get_by_id(self, chapter_id: UUID) -> Chapter | None:
        chapter = self.db.chapters.get(chapter_id)
        return chapter.model_copy(deep=True) if chapter else None


class InMemoryTagRepo:
    def __init__(self, db: InMemoryDB) -> None:
        self.db = db

    def get_by_slug(self, slug: str) -> Tag | None:
        tag = self.db.tags.get(slug)
        return tag.model_copy(deep=True) if tag else None

    def list_all(self) -> list[Tag]:
        return [t.model_copy(deep=True) for t in self.db.tags.values()]


class InMemoryLibraryRepo:
    def __init__(self, db: InMemoryDB) -> None:
        self.db = db

    def save_folder(self, folder: LibraryFolder) -> LibraryFolder:
        self.db.folders[folder.id] = folder.model_copy(deep=True)
        return folder

    def get_folder(self, folder_id: UUID) -> LibraryFolder | None:
        folder = self.db.folders.get(folder_id)
        return folder.model_copy(deep=True) if folder else None

    def get_folder_by_slug(self, slug: str) -> LibraryFolder | None:
        for folder in self.db.folders.values():
            if folder.slug == slug:
                return folder.model_copy(deep=True)
        return None

    def get_default_folder(self, user_id: UUID) -> LibraryFolder | None:
        for folder in self.db.folders.values():
            if folder.user_id == user_id and folder.is_default:
                return folder.model_copy(deep=True)
        return None

    def list_folders(self, user_id: UUID) -> list[LibraryFolder]:
        return [f.model_copy(deep=True) for f in self.db.folders.values() if f.user_id == user_id]

    def delete_folder(self, folder_id: UUID) -> None:
        self.db.folders.pop(folder_id, None)


class RecordingStorage:
    """Storage gateway fake that records calls and can fail the Nth move."""

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url
        self.uploads: list[tuple[str, str, bytes, str]] = []
        self.moves: list[tuple[str, str, str]] = []
        self.fail_on_move: int | None = None

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        self.uploads.append((bucket, path, data, content_type))
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    def move(self, bucket: str, src_path: str, dest_path: str) -> None:
        if self.fail_on_move is not None and len(self.moves) + 1 == self.fail_on_move:
            raise StorageFailure("storage provider rejected move: boom")
        self.moves.append((bucket, src_path, dest_path))


# --- Helpers ---


def _draft_url(owner_id: UUID | str, name: str) -> str:
    return f"{BASE_URL}/storage/v1/object/public/{BUCKET}/drafts/{owner_id}/{name}"


def _public_asset_url(owner_id: UUID | str, name: str) -> str:
    return f"{BASE_URL}/storage/v1/object/public/{BUCKET}/public/{owner_id}/{name}"


# --- Fixtures ---


@pytest.fixture
def draft_url():
    return _draft_url


@pytest.fixture
def public_asset_url():
    return _public_asset_url


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def db() -> InMemoryDB:
    return InMemoryDB()


@pytest.fixture
def user_repo(db: InMemoryDB) -> InMemoryUserRepo:
    return InMemoryUserRepo(db)


@pytest.fixture
def comic_repo(db: InMemoryDB) -> InMemoryComicRepo:
    return InMemoryComicRepo(db)


@pytest.fixture
def chapter_repo(db: InMemoryDB) -> InMemoryChapterRepo:
    return InMemoryChapterRepo(db)


@pytest.fixture
def tag_repo(db: InMemoryDB) -> InMemoryTagRepo:
    return InMemoryTagRepo(db)


@pytest.fixture
def library_repo(db: InMemoryDB) -> InMemoryLibraryRepo:
    return InMemoryLibraryRepo(db)


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig(backend="supabase", base_url=BASE_URL, service_key="svc", bucket=BUCKET)


@pytest.fixture
def uploads_config() -> UploadsConfig:
    return UploadsConfig()


@pytest.fixture
def comic_service(comic_repo, chapter_repo, tag_repo, user_repo, storage, clock) -> ComicService:
    return ComicService(
        comic_repo=comic_repo,
        chapter_repo=chapter_repo,
        tag_repo=tag_repo,
        user_repo=user_repo,
        storage=storage,
        clock=clock,
        bucket=BUCKET,
    )


@pytest.fixture
def creator(user_repo: InMemoryUserRepo) -> User:
    user = User(username="inkwell", email="ink@example.com", password_hash="h", role="creator")
    user_repo.save(user)
    return user


@pytest.fixture
def reader(user_repo: InMemoryUserRepo) -> User:
    user = User(username="reader", email="reader@example.com", password_hash="h", role="user")
    user_repo.save(user)
    return user


@pytest.fixture
def admin(user_repo: InMemoryUserRepo) -> User:
    user = User(username="mod", email="mod@example.com", password_hash="h", role="admin")
    user_repo.save(user)
    return user


@pytest.fixture
def make_comic(comic_service: ComicService, creator: User):
    """Factory: create a draft comic owned by `creator`."""

    def _make(title: str = "Moonlit Alley", **kwargs) -> Comic:
        fields = CreateComicInput(
            translations=[TranslationInput(language="en", title=title)], **kwargs
        )
        return comic_service.create_comic(creator.id, fields)

    return _make
