"""Post categories."""
