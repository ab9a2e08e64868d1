"""User-submitted content with moderation."""
