from typing import Protocol
from uuid import UUID

from toonshelf.domain.entities import Chapter, Comic, ComicStatus, LibraryFolder, Tag, User

# Repositories return None for a missing entity and raise PersistenceFailure
# for anything else.


class UserRepoPort(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None:
        ...

    def get_by_email(self, email: str) -> User | None:
        ...

    def get_by_username(self, username: str) -> User | None:
        ...

    def save(self, user: User) -> None:
        ...


class ComicRepoPort(Protocol):
    def save(self, comic: Comic) -> Comic:
        """Upsert the whole aggregate: translations, tag links, chapters and images."""
        ...

    def get_by_id(self, comic_id: UUID) -> Comic | None:
        """Load the full aggregate: translations, tags, chapters and images."""
        ...

    def list_by_status(self, status: ComicStatus) -> list[Comic]:
        ...

    def list_by_creator(self, creator_id: UUID) -> list[Comic]:
        ...

    def list_public(self) -> list[Comic]:
        ...

    def delete(self, comic_id: UUID) -> None:
        ...


class ChapterRepoPort(Protocol):
    def save(self, chapter: Chapter) -> Chapter:
        ...

    def get_by_id(self, chapter_id: UUID) -> Chapter | None:
        ...


class TagRepoPort(Protocol):
    def get_by_slug(self, slug: str) -> Tag | None:
        ...

    def list_all(self) -> list[Tag]:
        ...


class LibraryRepoPort(Protocol):
    def save_folder(self, folder: LibraryFolder) -> LibraryFolder:
        ...

    def get_folder(self, folder_id: UUID) -> LibraryFolder | None:
        ...

    def get_folder_by_slug(self, slug: str) -> LibraryFolder | None:
        ...

    def get_default_folder(self, user_id: UUID) -> LibraryFolder | None:
        ...

    def list_folders(self, user_id: UUID) -> list[LibraryFolder]:
        ...

    def delete_folder(self, folder_id: UUID) -> None:
        ...
