"""Parse and normalize Google Books API responses."""
import logging
from typing import Dict, Any, List, Optional
from book_finder.models import Book

logger = logging.getLogger(__name__)


def parse_book(item: Dict[str, Any]) -> Optional[Book]:
    """
    Parse a single book item from Google Books API.

    Args:
        item: Single item from Google Books API response

    Returns:
        Book object or None if parsing fails
    """
    try:
        volume_info = item.get("volumeInfo") or {}

        book_id = item.get("id", "")
        if not book_id:
            return None

        # Extract thumbnail (prefer higher quality)
        image_links = volume_info.get("imageLinks") or {}
        thumbnail = image_links.get("thumbnail") or image_links.get("smallThumbnail")

        return Book(
            id=str(book_id),
            title=volume_info.get("title", "Unknown Title"),
            authors=list(volume_info.get("authors") or []),
            published_date=volume_info.get("publishedDate"),
            description=volume_info.get("description"),
            page_count=volume_info.get("pageCount"),
            categories=list(volume_info.get("categories") or []),
            thumbnail=thumbnail,
            language=volume_info.get("language", "en")
        )
    except (AttributeError, TypeError) as e:
        # Log but don't crash - APIs can be unpredictable
        logger.warning(f"Failed to parse book: {e}")
        return None


def parse_books_response(response_json: Dict[str, Any]) -> List[Book]:
    """
    Parse full Google Books API response.

    Args:
        response_json: Complete API response JSON

    Returns:
        List of Book objects (empty if no items found)
    """
    items = response_json.get("items") or []
    books = []

    for item in items:
        book = parse_book(item)
        if book:
            books.append(book)

    return books


def deduplicate_books(books: List[Book]) -> List[Book]:
    """
    Remove duplicate books by ID, keeping the first occurrence.

    The catalog occasionally repeats a volume within one page.
    """
    seen_ids = set()
    unique_books = []

    for book in books:
        if book.id not in seen_ids:
            seen_ids.add(book.id)
            unique_books.append(book)

    return unique_books
