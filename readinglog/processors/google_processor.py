"""
Google Books API response processor.
"""

from typing import Dict, List, Optional

from ..models.metadata import BookMetadata

# Largest first
IMAGE_SIZES = ("extraLarge", "large", "medium", "thumbnail", "smallThumbnail")


def best_cover_url(volume_info: Dict) -> Optional[str]:
    """Highest resolution image link of a volume, forced to HTTPS."""
    image_links = volume_info.get("imageLinks") or {}
    for size in IMAGE_SIZES:
        url = image_links.get(size)
        if url:
            return url.replace("http:", "https:", 1)
    return None


def _extract_isbn(volume_info: Dict) -> str:
    identifiers = volume_info.get("industryIdentifiers") or []
    by_type = {item.get("type"): item.get("identifier", "") for item in identifiers}
    return by_type.get("ISBN_13") or by_type.get("ISBN_10") or ""


def _extract_price(sale_info: Dict):
    for key in ("listPrice", "retailPrice"):
        price_info = sale_info.get(key)
        if price_info and price_info.get("amount") is not None:
            return float(price_info["amount"]), price_info.get("currencyCode") or "USD"
    return None, "USD"


def process_volume(item: Dict) -> BookMetadata:
    """
    Map a single Google Books volume onto BookMetadata.

    Extracts:
    - title/authors (with "Unknown" defaults)
    - ISBN-13, falling back to ISBN-10
    - first category as genre
    - list price, falling back to retail price
    - best available cover image
    """
    volume_info = item.get("volumeInfo") or {}
    sale_info = item.get("saleInfo") or {}

    authors = volume_info.get("authors") or []
    categories = volume_info.get("categories") or []
    price, currency = _extract_price(sale_info)

    return BookMetadata(
        title=volume_info.get("title") or "Unknown Title",
        author=", ".join(authors) if authors else "Unknown Author",
        isbn=_extract_isbn(volume_info),
        genre=categories[0] if categories else "",
        pages=int(volume_info.get("pageCount") or 0),
        publisher=volume_info.get("publisher") or "",
        published_date=volume_info.get("publishedDate") or "",
        description=volume_info.get("description") or "",
        cover_url=best_cover_url(volume_info) or "",
        price=price,
        currency=currency,
        google_books_id=item.get("id") or "",
    )


def process_google_response(raw_data: Dict) -> List[BookMetadata]:
    """All volumes of a Google Books response as BookMetadata"""
    return [process_volume(item) for item in raw_data.get("items", [])]


def first_cover_url(raw_data: Dict) -> Optional[str]:
    """Cover of the first volume in the response that has any image"""
    for item in raw_data.get("items", []):
        url = best_cover_url(item.get("volumeInfo") or {})
        if url:
            return url
    return None
