"""
Storage backends for library data.
"""

from .base import StorageBackend, MemoryStorage, BOOKS_KEY, READING_GOALS_KEY, API_KEY_KEY
from .json_store import JSONFileStorage
from .s3_store import S3Storage

__all__ = [
    "StorageBackend",
    "MemoryStorage",
    "JSONFileStorage",
    "S3Storage",
    "BOOKS_KEY",
    "READING_GOALS_KEY",
    "API_KEY_KEY",
]
