from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
UserRole = Literal["user", "creator", "admin"]
ComicStatus = Literal["draft", "pending_review", "published", "rejected"]
SerializationStatus = Literal["ongoing", "hiatus", "completed"]
Visibility = Literal["public", "private", "unlisted"]
ChapterStatus = Literal["draft", "published", "scheduled"]

DEFAULT_SERIALIZATION_STATUS: SerializationStatus = "ongoing"
DEFAULT_VISIBILITY: Visibility = "private"

# --- Users ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    username: str
    email: str
    password_hash: str
    role: UserRole = "user"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

# --- Tags ---

class TagTranslation(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    tag_id: UUID
    language: str
    name: str

class Tag(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    slug: str
    type: str = "genre"
    translations: list[TagTranslation] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

# --- Chapters ---

class ChapterImage(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    chapter_id: UUID
    image_url: str
    order: int

class ChapterTranslation(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    chapter_id: UUID
    language: str
    title: str

class Chapter(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    comic_id: UUID
    chapter_number: int
    status: ChapterStatus = "draft"
    published_at: datetime | None = None
    images: list[ChapterImage] = Field(default_factory=list)
    translations: list[ChapterTranslation] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

# --- Comics ---

class ComicTranslation(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    comic_id: UUID
    language: str
    title: str
    synopsis: str = ""
    alt_title: str = ""

class Comic(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    creator_id: UUID
    author: str = ""
    status: ComicStatus = "draft"
    serialization_status: SerializationStatus = DEFAULT_SERIALIZATION_STATUS
    visibility: Visibility = DEFAULT_VISIBILITY
    nsfw: bool = False

    cover_image_url: str = ""
    banner_image_url: str = ""

    schedule_publish_at: datetime | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None

    translations: list[ComicTranslation] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    chapters: list[Chapter] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def translation_for(self, language: str) -> ComicTranslation | None:
        for translation in self.translations:
            if translation.language == language:
                return translation
        return None

# --- Library ---

class LibraryFolderItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    folder_id: UUID
    comic_id: UUID
    order: int = 0
    added_at: datetime = Field(default_factory=datetime.utcnow)

class LibraryFolder(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    name: str
    description: str = ""
    slug: str
    is_default: bool = False
    is_public: bool = False
    items: list[LibraryFolderItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def has_comic(self, comic_id: UUID) -> bool:
        return any(item.comic_id == comic_id for item in self.items)
