from datetime import datetime
from uuid import uuid4

import pytest

from toonshelf.adapters.sqlite.migrator import SQLiteMigrator
from toonshelf.adapters.sqlite.repos import (
    SQLiteChapterRepo,
    SQLiteComicRepo,
    SQLiteLibraryRepo,
    SQLiteTagRepo,
    SQLiteUserRepo,
)
from toonshelf.domain.entities import (
    Chapter,
    ChapterImage,
    ChapterTranslation,
    Comic,
    ComicTranslation,
    LibraryFolder,
    LibraryFolderItem,
    Tag,
    TagTranslation,
    User,
)
from toonshelf.domain.errors import PersistenceFailure

NOW = datetime(2025, 2, 14, 8, 0, 0)


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "test.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def user_repo(db_path):
    return SQLiteUserRepo(db_path)


@pytest.fixture
def comic_repo(db_path):
    return SQLiteComicRepo(db_path)


@pytest.fixture
def owner(user_repo):
    user = User(username="ink", email="ink@example.com", password_hash="h", role="creator")
    user_repo.save(user)
    return user


def _comic(owner: User, **kwargs) -> Comic:
    comic_id = uuid4()
    tag_id = uuid4()
    return Comic(
        id=comic_id,
        creator_id=owner.id,
        author="Ink",
        translations=[
            ComicTranslation(comic_id=comic_id, language="en", title="Night Market"),
            ComicTranslation(comic_id=comic_id, language="th", title="ตลาดกลางคืน"),
        ],
        tags=[
            Tag(
                id=tag_id,
                slug="drama",
                translations=[TagTranslation(tag_id=tag_id, language="en", name="Drama")],
            )
        ],
        created_at=NOW,
        updated_at=NOW,
        **kwargs,
    )


def _chapter(comic: Comic, number: int = 1) -> Chapter:
    chapter_id = uuid4()
    return Chapter(
        id=chapter_id,
        comic_id=comic.id,
        chapter_number=number,
        status="published",
        published_at=NOW,
        translations=[ChapterTranslation(chapter_id=chapter_id, language="en", title="Start")],
        images=[
            ChapterImage(chapter_id=chapter_id, image_url=f"https://x/{i}.png", order=i)
            for i in (1, 2, 3)
        ],
        created_at=NOW,
    )


# --- Users ---


def test_user_save_and_lookup(user_repo, owner):
    assert user_repo.get_by_id(owner.id).username == "ink"
    assert user_repo.get_by_email("ink@example.com").id == owner.id
    assert user_repo.get_by_username("ink").id == owner.id
    assert user_repo.get_by_id(uuid4()) is None


def test_user_update_role(user_repo, owner):
    owner.role = "admin"
    user_repo.save(owner)
    assert user_repo.get_by_id(owner.id).role == "admin"


def test_duplicate_email_is_persistence_failure(user_repo, owner):
    clash = User(username="other", email="ink@example.com", password_hash="h")
    with pytest.raises(PersistenceFailure):
        user_repo.save(clash)


# --- Comics ---


def test_comic_aggregate_roundtrip(comic_repo, owner):
    comic = _comic(owner, nsfw=True, cover_image_url="https://x/cover.png")
    comic_repo.save(comic)

    fetched = comic_repo.get_by_id(comic.id)
    assert fetched is not None
    assert fetched.nsfw is True
    assert fetched.cover_image_url == "https://x/cover.png"
    assert fetched.translation_for("th").title == "ตลาดกลางคืน"
    assert [t.slug for t in fetched.tags] == ["drama"]
    assert fetched.tags[0].translations[0].name == "Drama"
    assert fetched.created_at == NOW


def test_comic_update_replaces_children(comic_repo, owner):
    comic = _comic(owner)
    comic_repo.save(comic)

    comic.translations = comic.translations[:1]
    comic.tags = []
    comic.status = "pending_review"
    comic_repo.save(comic)

    fetched = comic_repo.get_by_id(comic.id)
    assert fetched.status == "pending_review"
    assert len(fetched.translations) == 1
    assert fetched.tags == []


def test_chapters_load_with_comic(comic_repo, db_path, owner):
    chapter_repo = SQLiteChapterRepo(db_path)
    comic = _comic(owner)
    comic_repo.save(comic)
    chapter_repo.save(_chapter(comic, 2))
    chapter_repo.save(_chapter(comic, 1))

    fetched = comic_repo.get_by_id(comic.id)
    assert [c.chapter_number for c in fetched.chapters] == [1, 2]
    assert [i.order for i in fetched.chapters[0].images] == [1, 2, 3]


def test_comic_save_persists_chapter_image_urls(comic_repo, db_path, owner):
    chapter_repo = SQLiteChapterRepo(db_path)
    comic = _comic(owner)
    comic_repo.save(comic)
    chapter = _chapter(comic)
    chapter_repo.save(chapter)

    loaded = comic_repo.get_by_id(comic.id)
    loaded.chapters[0].images[0].image_url = "https://x/moved.png"
    comic_repo.save(loaded)

    assert chapter_repo.get_by_id(chapter.id).images[0].image_url == "https://x/moved.png"


def test_list_queries(comic_repo, owner):
    draft = _comic(owner)
    published = _comic(owner, status="published", visibility="public")
    hidden = _comic(owner, status="published", visibility="unlisted")
    for c in (draft, published, hidden):
        # Tag slugs are unique; give each comic its own tag row.
        c.tags = []
        comic_repo.save(c)

    assert {c.id for c in comic_repo.list_by_status("published")} == {published.id, hidden.id}
    assert [c.id for c in comic_repo.list_public()] == [published.id]
    assert len(comic_repo.list_by_creator(owner.id)) == 3


def test_delete_cascades(comic_repo, db_path, owner):
    chapter_repo = SQLiteChapterRepo(db_path)
    comic = _comic(owner)
    comic_repo.save(comic)
    chapter = _chapter(comic)
    chapter_repo.save(chapter)

    comic_repo.delete(comic.id)

    assert comic_repo.get_by_id(comic.id) is None
    assert chapter_repo.get_by_id(chapter.id) is None


# --- Tags ---


def test_tags_saved_with_comic_are_reusable(comic_repo, db_path, owner):
    tag_repo = SQLiteTagRepo(db_path)
    comic = _comic(owner)
    comic_repo.save(comic)

    tag = tag_repo.get_by_slug("drama")
    assert tag.id == comic.tags[0].id

    second = _comic(owner)
    second.tags = [tag]
    comic_repo.save(second)
    assert len(tag_repo.list_all()) == 1
    assert tag_repo.get_by_slug("nope") is None


# --- Library ---


def test_library_folder_roundtrip(comic_repo, db_path, owner):
    repo = SQLiteLibraryRepo(db_path)
    comic = _comic(owner)
    comic_repo.save(comic)

    folder = LibraryFolder(user_id=owner.id, name="Faves", slug="faves-1234abcd", is_default=True)
    folder.items.append(LibraryFolderItem(folder_id=folder.id, comic_id=comic.id, order=0))
    repo.save_folder(folder)

    fetched = repo.get_folder(folder.id)
    assert fetched.is_default
    assert [i.comic_id for i in fetched.items] == [comic.id]
    assert repo.get_folder_by_slug("faves-1234abcd").id == folder.id
    assert repo.get_default_folder(owner.id).id == folder.id
    assert len(repo.list_folders(owner.id)) == 1

    repo.delete_folder(folder.id)
    assert repo.get_folder(folder.id) is None


def test_missing_database_table_is_persistence_failure(tmp_path):
    repo = SQLiteUserRepo(str(tmp_path / "empty.db"))
    with pytest.raises(PersistenceFailure):
        repo.get_by_id(uuid4())
