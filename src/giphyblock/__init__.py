"""Giphy Block: GIF search for the block editor with a server-side API key."""

__version__ = "0.1.0"
