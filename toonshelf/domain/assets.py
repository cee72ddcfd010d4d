"""
Asset storage tiers.

Uploads land in the draft tier; approval moves them to the public tier. Both
the upload gatekeeper and the comic approval workflow build and inspect object
paths through these helpers so the layout is defined in one place.

Object path layout: ``<tier>/<owner_id>/<name>``
Public URL layout:  ``{base}/storage/v1/object/public/{bucket}/{object_path}``
"""

from enum import Enum
from uuid import UUID

PUBLIC_URL_SEGMENT = "/storage/v1/object/public"


class AssetTier(str, Enum):
    DRAFT = "drafts"
    PUBLIC = "public"

    @property
    def prefix(self) -> str:
        return f"{self.value}/"


def object_path(tier: AssetTier, owner_id: UUID | str, name: str) -> str:
    return f"{tier.prefix}{owner_id}/{name}"


def tier_of(path: str) -> AssetTier | None:
    """Return the tier an object path lives in, or None for foreign paths."""
    for tier in AssetTier:
        if path.startswith(tier.prefix):
            return tier
    return None


def promote_path(path: str) -> str:
    """Map a draft object path to its public counterpart."""
    if tier_of(path) is not AssetTier.DRAFT:
        raise ValueError(f"Not a draft asset path: {path}")
    return AssetTier.PUBLIC.prefix + path[len(AssetTier.DRAFT.prefix):]


def public_url(base_url: str, bucket: str, path: str) -> str:
    return f"{base_url.rstrip('/')}{PUBLIC_URL_SEGMENT}/{bucket}/{path}"


def split_public_url(url: str, bucket: str) -> tuple[str, str] | None:
    """
    Split a storage URL into (prefix, object_path).

    Returns None when the URL does not point into ``bucket``.
    """
    marker = f"/{bucket}/"
    if not url or marker not in url:
        return None
    prefix, path = url.split(marker, 1)
    if not path:
        return None
    return prefix + marker, path

