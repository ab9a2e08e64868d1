"""Engagement primitives shared by posts, comments and user content."""

from inkpress.engagement.likes import LikeLedger, LikeToggle, apply_like_toggle
from inkpress.engagement.slugs import SlugRegistry
from inkpress.engagement.text import generate_slug, normalize_tags, reading_time
from inkpress.engagement.views import ViewCounter


__all__ = [
    "LikeLedger",
    "LikeToggle",
    "SlugRegistry",
    "ViewCounter",
    "apply_like_toggle",
    "generate_slug",
    "normalize_tags",
    "reading_time",
]
