"""Pure text transformations applied by write paths before persistence."""

from django.utils.text import slugify


def derive_slug(value: str) -> str:
    """Derive a URL slug from a title or name (ASCII, lower-case, hyphenated)."""
    return slugify(value or "")


def normalize_tags(tags) -> list[str]:
    """Lower-case and trim tags, dropping empty entries."""
    return [tag.strip().lower() for tag in tags or [] if tag and tag.strip()]


__all__ = ["derive_slug", "normalize_tags"]
