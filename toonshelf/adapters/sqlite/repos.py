import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from toonshelf.domain.entities import (
    Chapter,
    ChapterImage,
    ChapterTranslation,
    Comic,
    ComicStatus,
    ComicTranslation,
    LibraryFolder,
    LibraryFolderItem,
    Tag,
    TagTranslation,
    User,
)
from toonshelf.domain.errors import PersistenceFailure


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def format_dt(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Connection scope: commit on success, PersistenceFailure on any driver error."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise PersistenceFailure(str(exc)) from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise PersistenceFailure(str(exc)) from exc
        finally:
            conn.close()


# --- Users ---


class SQLiteUserRepo(_SQLiteRepo):
    def _to_user(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=row["role"],
            created_at=parse_dt(row["created_at"]) or datetime.min,
            updated_at=parse_dt(row["updated_at"]) or datetime.min,
        )

    def _get_one(self, where: str, value: str) -> User | None:
        with self._session() as conn:
            row = conn.execute(f"SELECT * FROM users WHERE {where} = ?", (value,)).fetchone()
        return self._to_user(row) if row else None

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._get_one("id", str(user_id))

    def get_by_email(self, email: str) -> User | None:
        return self._get_one("email", email)

    def get_by_username(self, username: str) -> User | None:
        return self._get_one("username", username)

    def save(self, user: User) -> None:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO users (id, username, email, password_hash, role, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    username=excluded.username,
                    email=excluded.email,
                    password_hash=excluded.password_hash,
                    role=excluded.role,
                    updated_at=excluded.updated_at
            """,
                (
                    str(user.id),
                    user.username,
                    user.email,
                    user.password_hash,
                    user.role,
                    user.created_at.isoformat(),
                    user.updated_at.isoformat(),
                ),
            )


# --- Chapters ---
# Chapter rows are written both through SQLiteChapterRepo and as part of the
# comic aggregate, so the row mapping lives in module-level helpers.


def _save_chapter(conn: sqlite3.Connection, chapter: Chapter) -> None:
    conn.execute(
        """
        INSERT INTO chapters (id, comic_id, chapter_number, status, published_at, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            chapter_number=excluded.chapter_number,
            status=excluded.status,
            published_at=excluded.published_at
    """,
        (
            str(chapter.id),
            str(chapter.comic_id),
            chapter.chapter_number,
            chapter.status,
            format_dt(chapter.published_at),
            chapter.created_at.isoformat(),
        ),
    )

    cid = str(chapter.id)
    conn.execute("DELETE FROM chapter_translations WHERE chapter_id = ?", (cid,))
    for tr in chapter.translations:
        conn.execute(
            "INSERT INTO chapter_translations (id, chapter_id, language, title) VALUES (?, ?, ?, ?)",
            (str(tr.id), cid, tr.language, tr.title),
        )

    conn.execute("DELETE FROM chapter_images WHERE chapter_id = ?", (cid,))
    for image in chapter.images:
        conn.execute(
            "INSERT INTO chapter_images (id, chapter_id, image_url, position) VALUES (?, ?, ?, ?)",
            (str(image.id), cid, image.image_url, image.order),
        )


def _load_chapter(conn: sqlite3.Connection, row: dict[str, Any]) -> Chapter:
    cid = row["id"]
    tr_rows = conn.execute(
        "SELECT * FROM chapter_translations WHERE chapter_id = ?", (cid,)
    ).fetchall()
    img_rows = conn.execute(
        "SELECT * FROM chapter_images WHERE chapter_id = ? ORDER BY position ASC", (cid,)
    ).fetchall()

    return Chapter(
        id=UUID(cid),
        comic_id=UUID(row["comic_id"]),
        chapter_number=row["chapter_number"],
        status=row["status"],
        published_at=parse_dt(row["published_at"]),
        created_at=parse_dt(row["created_at"]) or datetime.min,
        translations=[
            ChapterTranslation(
                id=UUID(r["id"]), chapter_id=UUID(cid), language=r["language"], title=r["title"]
            )
            for r in tr_rows
        ],
        images=[
            ChapterImage(
                id=UUID(r["id"]), chapter_id=UUID(cid), image_url=r["image_url"], order=r["position"]
            )
            for r in img_rows
        ],
    )


class SQLiteChapterRepo(_SQLiteRepo):
    def save(self, chapter: Chapter) -> Chapter:
        with self._session() as conn:
            _save_chapter(conn, chapter)
        return chapter

    def get_by_id(self, chapter_id: UUID) -> Chapter | None:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM chapters WHERE id = ?", (str(chapter_id),)
            ).fetchone()
            if not row:
                return None
            return _load_chapter(conn, row)


# --- Tags ---


def _save_tag(conn: sqlite3.Connection, tag: Tag) -> None:
    conn.execute(
        """
        INSERT INTO tags (id, slug, type, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            slug=excluded.slug,
            type=excluded.type,
            updated_at=excluded.updated_at
    """,
        (str(tag.id), tag.slug, tag.type, tag.created_at.isoformat(), tag.updated_at.isoformat()),
    )
    conn.execute("DELETE FROM tag_translations WHERE tag_id = ?", (str(tag.id),))
    for tr in tag.translations:
        conn.execute(
            "INSERT INTO tag_translations (id, tag_id, language, name) VALUES (?, ?, ?, ?)",
            (str(tr.id), str(tag.id), tr.language, tr.name),
        )


def _load_tag(conn: sqlite3.Connection, row: dict[str, Any]) -> Tag:
    tr_rows = conn.execute(
        "SELECT * FROM tag_translations WHERE tag_id = ?", (row["id"],)
    ).fetchall()
    return Tag(
        id=UUID(row["id"]),
        slug=row["slug"],
        type=row["type"],
        translations=[
            TagTranslation(
                id=UUID(r["id"]), tag_id=UUID(row["id"]), language=r["language"], name=r["name"]
            )
            for r in tr_rows
        ],
        created_at=parse_dt(row["created_at"]) or datetime.min,
        updated_at=parse_dt(row["updated_at"]) or datetime.min,
    )


class SQLiteTagRepo(_SQLiteRepo):
    def get_by_slug(self, slug: str) -> Tag | None:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM tags WHERE slug = ?", (slug,)).fetchone()
            if not row:
                return None
            return _load_tag(conn, row)

    def list_all(self) -> list[Tag]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM tags ORDER BY slug ASC").fetchall()
            return [_load_tag(conn, row) for row in rows]


# --- Comics ---


class SQLiteComicRepo(_SQLiteRepo):
    def save(self, comic: Comic) -> Comic:
        with self._session() as conn:
            # 1. Upsert comic row
            conn.execute(
                """
                INSERT INTO comics (
                    id, creator_id, author, status, serialization_status,
                    visibility, nsfw, cover_image_url, banner_image_url,
                    schedule_publish_at, approved_at, rejection_reason,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    author=excluded.author,
                    status=excluded.status,
                    serialization_status=excluded.serialization_status,
                    visibility=excluded.visibility,
                    nsfw=excluded.nsfw,
                    cover_image_url=excluded.cover_image_url,
                    banner_image_url=excluded.banner_image_url,
                    schedule_publish_at=excluded.schedule_publish_at,
                    approved_at=excluded.approved_at,
                    rejection_reason=excluded.rejection_reason,
                    updated_at=excluded.updated_at
            """,
                (
                    str(comic.id),
                    str(comic.creator_id),
                    comic.author,
                    comic.status,
                    comic.serialization_status,
                    comic.visibility,
                    int(comic.nsfw),
                    comic.cover_image_url,
                    comic.banner_image_url,
                    format_dt(comic.schedule_publish_at),
                    format_dt(comic.approved_at),
                    comic.rejection_reason,
                    comic.created_at.isoformat(),
                    comic.updated_at.isoformat(),
                ),
            )

            cid = str(comic.id)

            # 2. Replace translations
            conn.execute("DELETE FROM comic_translations WHERE comic_id = ?", (cid,))
            for tr in comic.translations:
                conn.execute(
                    """
                    INSERT INTO comic_translations
                    (id, comic_id, language, title, synopsis, alt_title)
                    VALUES (?, ?, ?, ?, ?, ?)
                """,
                    (str(tr.id), cid, tr.language, tr.title, tr.synopsis, tr.alt_title),
                )

            # 3. Upsert tags and replace links
            conn.execute("DELETE FROM comic_tags WHERE comic_id = ?", (cid,))
            for i, tag in enumerate(comic.tags):
                _save_tag(conn, tag)
                conn.execute(
                    "INSERT INTO comic_tags (comic_id, tag_id, position) VALUES (?, ?, ?)",
                    (cid, str(tag.id), i),
                )

            # 4. Chapters carried on the aggregate
            for chapter in comic.chapters:
                _save_chapter(conn, chapter)

        return comic

    def _load(self, conn: sqlite3.Connection, row: dict[str, Any]) -> Comic:
        cid = row["id"]
        tr_rows = conn.execute(
            "SELECT * FROM comic_translations WHERE comic_id = ?", (cid,)
        ).fetchall()
        tag_rows = conn.execute(
            """
            SELECT t.* FROM tags t
            JOIN comic_tags ct ON ct.tag_id = t.id
            WHERE ct.comic_id = ?
            ORDER BY ct.position ASC
        """,
            (cid,),
        ).fetchall()
        chapter_rows = conn.execute(
            "SELECT * FROM chapters WHERE comic_id = ? ORDER BY chapter_number ASC", (cid,)
        ).fetchall()

        return Comic(
            id=UUID(cid),
            creator_id=UUID(row["creator_id"]),
            author=row["author"],
            status=row["status"],
            serialization_status=row["serialization_status"],
            visibility=row["visibility"],
            nsfw=bool(row["nsfw"]),
            cover_image_url=row["cover_image_url"],
            banner_image_url=row["banner_image_url"],
            schedule_publish_at=parse_dt(row["schedule_publish_at"]),
            approved_at=parse_dt(row["approved_at"]),
            rejection_reason=row["rejection_reason"],
            translations=[
                ComicTranslation(
                    id=UUID(r["id"]),
                    comic_id=UUID(cid),
                    language=r["language"],
                    title=r["title"],
                    synopsis=r["synopsis"],
                    alt_title=r["alt_title"],
                )
                for r in tr_rows
            ],
            tags=[_load_tag(conn, r) for r in tag_rows],
            chapters=[_load_chapter(conn, r) for r in chapter_rows],
            created_at=parse_dt(row["created_at"]) or datetime.min,
            updated_at=parse_dt(row["updated_at"]) or datetime.min,
        )

    def _list(self, where: str, params: tuple[Any, ...]) -> list[Comic]:
        with self._session() as conn:
            rows = conn.execute(
                f"SELECT * FROM comics WHERE {where} ORDER BY created_at DESC", params
            ).fetchall()
            return [self._load(conn, row) for row in rows]

    def get_by_id(self, comic_id: UUID) -> Comic | None:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM comics WHERE id = ?", (str(comic_id),)).fetchone()
            if not row:
                return None
            return self._load(conn, row)

    def list_by_status(self, status: ComicStatus) -> list[Comic]:
        return self._list("status = ?", (status,))

    def list_by_creator(self, creator_id: UUID) -> list[Comic]:
        return self._list("creator_id = ?", (str(creator_id),))

    def list_public(self) -> list[Comic]:
        return self._list("status = ? AND visibility = ?", ("published", "public"))

    def delete(self, comic_id: UUID) -> None:
        with self._session() as conn:
            # Children go with ON DELETE CASCADE.
            conn.execute("DELETE FROM comics WHERE id = ?", (str(comic_id),))


# --- Library ---


class SQLiteLibraryRepo(_SQLiteRepo):
    def save_folder(self, folder: LibraryFolder) -> LibraryFolder:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO library_folders (
                    id, user_id, name, description, slug,
                    is_default, is_public, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    description=excluded.description,
                    slug=excluded.slug,
                    is_public=excluded.is_public,
                    updated_at=excluded.updated_at
            """,
                (
                    str(folder.id),
                    str(folder.user_id),
                    folder.name,
                    folder.description,
                    folder.slug,
                    int(folder.is_default),
                    int(folder.is_public),
                    folder.created_at.isoformat(),
                    folder.updated_at.isoformat(),
                ),
            )

            fid = str(folder.id)
            conn.execute("DELETE FROM library_folder_items WHERE folder_id = ?", (fid,))
            for item in folder.items:
                conn.execute(
                    """
                    INSERT INTO library_folder_items (id, folder_id, comic_id, position, added_at)
                    VALUES (?, ?, ?, ?, ?)
                """,
                    (str(item.id), fid, str(item.comic_id), item.order, item.added_at.isoformat()),
                )
        return folder

    def _load(self, conn: sqlite3.Connection, row: dict[str, Any]) -> LibraryFolder:
        fid = row["id"]
        item_rows = conn.execute(
            "SELECT * FROM library_folder_items WHERE folder_id = ? ORDER BY position ASC",
            (fid,),
        ).fetchall()
        return LibraryFolder(
            id=UUID(fid),
            user_id=UUID(row["user_id"]),
            name=row["name"],
            description=row["description"],
            slug=row["slug"],
            is_default=bool(row["is_default"]),
            is_public=bool(row["is_public"]),
            items=[
                LibraryFolderItem(
                    id=UUID(r["id"]),
                    folder_id=UUID(fid),
                    comic_id=UUID(r["comic_id"]),
                    order=r["position"],
                    added_at=parse_dt(r["added_at"]) or datetime.min,
                )
                for r in item_rows
            ],
            created_at=parse_dt(row["created_at"]) or datetime.min,
            updated_at=parse_dt(row["updated_at"]) or datetime.min,
        )

    def _get_one(self, where: str, params: tuple[Any, ...]) -> LibraryFolder | None:
        with self._session() as conn:
            row = conn.execute(f"SELECT * FROM library_folders WHERE {where}", params).fetchone()
            if not row:
                return None
            return self._load(conn, row)

    def get_folder(self, folder_id: UUID) -> LibraryFolder | None:
        return self._get_one("id = ?", (str(folder_id),))

    def get_folder_by_slug(self, slug: str) -> LibraryFolder | None:
        return self._get_one("slug = ?", (slug,))

    def get_default_folder(self, user_id: UUID) -> LibraryFolder | None:
        return self._get_one("user_id = ? AND is_default = 1", (str(user_id),))

    def list_folders(self, user_id: UUID) -> list[LibraryFolder]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT * FROM library_folders WHERE user_id = ?
                ORDER BY is_default DESC, created_at ASC
            """,
                (str(user_id),),
            ).fetchall()
            return [self._load(conn, row) for row in rows]

    def delete_folder(self, folder_id: UUID) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM library_folders WHERE id = ?", (str(folder_id),))
