"""Recently viewed books."""
from typing import List, Tuple

from book_finder.models import Book

DEFAULT_LIMIT = 20


class RecentlyViewed:
    """Most-recently-viewed first, one entry per book id, at most ``limit`` long."""

    def __init__(self, limit: int = DEFAULT_LIMIT):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self._books: List[Book] = []

    @property
    def books(self) -> Tuple[Book, ...]:
        return tuple(self._books)

    def record_view(self, book: Book) -> None:
        remaining = [b for b in self._books if b.id != book.id]
        self._books = [book] + remaining[:self.limit - 1]

    def __len__(self):
        return len(self._books)
