"""
Processors that turn raw API responses into library data.
"""

from .google_processor import (
    process_google_response,
    process_volume,
    best_cover_url,
    first_cover_url,
)

__all__ = [
    "process_google_response",
    "process_volume",
    "best_cover_url",
    "first_cover_url",
]
