"""Search index assembly and query engine for an image/text portfolio site."""

__version__ = "0.1.0"
