"""Packaged JSON schemas for fnstack declaration documents."""
