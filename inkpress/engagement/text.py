"""Text helpers: slugs, reading time and tag normalization."""

import math
import re
import unicodedata


def generate_slug(title: str) -> str:
    """Generate URL-friendly slug from title."""
    slug = unicodedata.normalize("NFKD", title)
    slug = slug.encode("ascii", "ignore").decode("ascii")
    slug = slug.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


def count_words(text: str) -> int:
    return len(text.split())


def reading_time(text: str, words_per_minute: int = 200) -> int:
    """Minutes needed to read ``text``, rounded up."""
    return math.ceil(count_words(text) / words_per_minute)


def normalize_tags(tags: list[str] | str | None) -> list[str]:
    """Trim and lower-case tags, dropping empty ones.

    Accepts a list or a comma separated string (form submissions).
    """
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [tag.strip().lower() for tag in tags if tag and tag.strip()]
