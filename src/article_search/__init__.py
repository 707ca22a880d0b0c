"""Secondary search index over article records kept in a key-value store."""

__version__ = "0.1.0"
