from uuid import UUID

from toonshelf.domain.entities import LibraryFolder, LibraryFolderItem
from toonshelf.domain.errors import Forbidden, InvalidInput, NotFound
from toonshelf.domain.slug import unique_slug
from toonshelf.ports.clock import ClockPort
from toonshelf.ports.repo import ComicRepoPort, LibraryRepoPort

DEFAULT_FOLDER_NAME = "My Library"


class LibraryService:
    """
    Reader libraries: named folders of comics.

    Every user has one default folder, created on first use, which backs the
    plain "add to library" actions.
    """

    def __init__(self, repo: LibraryRepoPort, comic_repo: ComicRepoPort, clock: ClockPort):
        self.repo = repo
        self.comic_repo = comic_repo
        self.clock = clock

    # --- Default folder ---

    def get_default_folder(self, user_id: UUID) -> LibraryFolder:
        folder = self.repo.get_default_folder(user_id)
        if folder:
            return folder
        return self._new_folder(user_id, DEFAULT_FOLDER_NAME, "", is_public=False, is_default=True)

    def get_user_library(self, user_id: UUID) -> list[LibraryFolderItem]:
        return self.get_default_folder(user_id).items

    def add_to_library(self, user_id: UUID, comic_id: UUID) -> LibraryFolder:
        folder = self.get_default_folder(user_id)
        return self._add_item(folder, comic_id)

    def remove_from_library(self, user_id: UUID, comic_id: UUID) -> LibraryFolder:
        folder = self.get_default_folder(user_id)
        return self._remove_item(folder, comic_id)

    # --- Folders ---

    def create_folder(
        self, user_id: UUID, name: str, description: str = "", is_public: bool = False
    ) -> LibraryFolder:
        if not name.strip():
            raise InvalidInput("Folder name is required")
        return self._new_folder(user_id, name.strip(), description, is_public, is_default=False)

    def list_user_folders(self, user_id: UUID) -> list[LibraryFolder]:
        return self.repo.list_folders(user_id)

    def get_folder(self, folder_id: UUID, requester_id: UUID | None = None) -> LibraryFolder:
        folder = self.repo.get_folder(folder_id)
        return self._check_readable(folder, requester_id)

    def get_folder_by_slug(self, slug: str, requester_id: UUID | None = None) -> LibraryFolder:
        folder = self.repo.get_folder_by_slug(slug)
        return self._check_readable(folder, requester_id)

    def add_to_folder(self, user_id: UUID, folder_id: UUID, comic_id: UUID) -> LibraryFolder:
        folder = self._get_owned(user_id, folder_id)
        return self._add_item(folder, comic_id)

    def remove_from_folder(
        self, user_id: UUID, folder_id: UUID, comic_id: UUID
    ) -> LibraryFolder:
        folder = self._get_owned(user_id, folder_id)
        return self._remove_item(folder, comic_id)

    def delete_folder(self, user_id: UUID, folder_id: UUID) -> None:
        folder = self._get_owned(user_id, folder_id)
        if folder.is_default:
            raise InvalidInput("The default library folder cannot be deleted")
        self.repo.delete_folder(folder.id)

    # --- Helpers ---

    def _new_folder(
        self, user_id: UUID, name: str, description: str, is_public: bool, is_default: bool
    ) -> LibraryFolder:
        now = self.clock.now()
        folder = LibraryFolder(
            user_id=user_id,
            name=name,
            description=description,
            slug=unique_slug(name),
            is_public=is_public,
            is_default=is_default,
            created_at=now,
            updated_at=now,
        )
        return self.repo.save_folder(folder)

    def _get_owned(self, user_id: UUID, folder_id: UUID) -> LibraryFolder:
        folder = self.repo.get_folder(folder_id)
        if not folder:
            raise NotFound("Folder not found")
        if folder.user_id != user_id:
            raise Forbidden("Folder belongs to another user")
        return folder

    def _check_readable(
        self, folder: LibraryFolder | None, requester_id: UUID | None
    ) -> LibraryFolder:
        if not folder:
            raise NotFound("Folder not found")
        if not folder.is_public and folder.user_id != requester_id:
            raise Forbidden("Folder is private")
        return folder

    def _add_item(self, folder: LibraryFolder, comic_id: UUID) -> LibraryFolder:
        if not self.comic_repo.get_by_id(comic_id):
            raise NotFound("Comic not found")
        if folder.has_comic(comic_id):
            raise InvalidInput("Comic already in folder")

        now = self.clock.now()
        folder.items.append(
            LibraryFolderItem(
                folder_id=folder.id,
                comic_id=comic_id,
                order=len(folder.items),
                added_at=now,
            )
        )
        folder.updated_at = now
        return self.repo.save_folder(folder)

    def _remove_item(self, folder: LibraryFolder, comic_id: UUID) -> LibraryFolder:
        remaining = [item for item in folder.items if item.comic_id != comic_id]
        if len(remaining) == len(folder.items):
            raise NotFound("Comic not in folder")
        for position, item in enumerate(remaining):
            item.order = position
        folder.items = remaining
        folder.updated_at = self.clock.now()
        return self.repo.save_folder(folder)
