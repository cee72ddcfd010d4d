import re
from uuid import uuid4

_INVALID = re.compile(r"[^a-z0-9\-]")


def simple_slug(value: str) -> str:
    """Lowercase, spaces to hyphens, drop everything outside [a-z0-9-]."""
    value = value.lower().strip().replace(" ", "-")
    return _INVALID.sub("", value)


def unique_slug(value: str) -> str:
    """Slug with a short random suffix, for user-named collections."""
    base = simple_slug(value) or "folder"
    return f"{base}-{uuid4().hex[:8]}"
