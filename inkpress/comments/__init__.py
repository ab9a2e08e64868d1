"""Threaded comments shared by posts and user content."""
