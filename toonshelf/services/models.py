"""Service input models - frozen dataclasses built by the API layer."""

from dataclasses import dataclass, field
from datetime import datetime

from toonshelf.domain.entities import SerializationStatus, Visibility


@dataclass(frozen=True)
class TranslationInput:
    """Per-language comic text."""

    language: str
    title: str
    synopsis: str = ""
    alt_title: str = ""


@dataclass(frozen=True)
class TagNameInput:
    language: str
    name: str


@dataclass(frozen=True)
class TagInput:
    """A tag given by its localized names. The first name determines the slug."""

    names: list[TagNameInput]
    type: str = "genre"


@dataclass(frozen=True)
class CreateComicInput:
    translations: list[TranslationInput]
    author: str = ""
    tags: list[TagInput] = field(default_factory=list)
    cover_image_url: str = ""
    banner_image_url: str = ""
    serialization_status: SerializationStatus | None = None
    visibility: Visibility | None = None
    nsfw: bool = False
    schedule_publish_at: datetime | None = None


@dataclass(frozen=True)
class UpdateComicInput:
    """
    Full replacement of a comic's editable fields.

    Scalars left at their defaults here overwrite the stored values.
    Translations are merged by language code.
    """

    translations: list[TranslationInput] = field(default_factory=list)
    author: str = ""
    cover_image_url: str = ""
    banner_image_url: str = ""
    serialization_status: SerializationStatus | None = None
    visibility: Visibility | None = None
    nsfw: bool = False
    schedule_publish_at: datetime | None = None


@dataclass(frozen=True)
class ChapterTranslationInput:
    language: str
    title: str


@dataclass(frozen=True)
class CreateChapterInput:
    chapter_number: int
    translations: list[ChapterTranslationInput]
    image_urls: list[str]
