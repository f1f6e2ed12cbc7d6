"""
Runtime settings, read from the environment (and a ``.env`` file if present).
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .storage import StorageBackend, JSONFileStorage, MemoryStorage, S3Storage

load_dotenv()

STORAGE_BACKENDS = ("json", "s3", "memory")


def _env(name: str, default: Optional[str] = None):
    return field(default_factory=lambda: os.getenv(name, default))


def _env_float(name: str, default: str):
    return field(default_factory=lambda: float(os.getenv(name, default)))


@dataclass
class Settings:
    # Storage
    data_dir: str = _env("READINGLOG_DATA_DIR", "data")
    storage: str = _env("READINGLOG_STORAGE", "json")
    s3_bucket: Optional[str] = _env("READINGLOG_S3_BUCKET")
    s3_prefix: str = _env("READINGLOG_S3_PREFIX", "")

    # Google Books
    google_books_api_key: Optional[str] = _env("GOOGLE_BOOKS_API_KEY")
    google_books_timeout: float = _env_float("GOOGLE_BOOKS_TIMEOUT", "10")
    api_rate_limit: float = _env_float("READINGLOG_API_RATE_LIMIT", "5")
    cover_delay: float = _env_float("READINGLOG_COVER_DELAY", "0.1")

    log_level: str = _env("READINGLOG_LOG_LEVEL", "INFO")


def get_settings() -> Settings:
    """Fresh settings reflecting the current environment"""
    return Settings()


def build_storage(settings: Settings) -> StorageBackend:
    """Storage backend named by ``settings.storage``"""
    backend = (settings.storage or "json").lower()
    if backend == "json":
        return JSONFileStorage(settings.data_dir)
    if backend == "s3":
        if not settings.s3_bucket:
            raise ValueError("READINGLOG_S3_BUCKET must be set for S3 storage")
        return S3Storage(settings.s3_bucket, prefix=settings.s3_prefix)
    if backend == "memory":
        return MemoryStorage()
    raise ValueError(f"Unknown storage backend '{settings.storage}', expected one of {', '.join(STORAGE_BACKENDS)}")
