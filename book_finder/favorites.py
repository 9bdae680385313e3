"""Favorites list mirrored to a key-value store."""
import json
import logging
from typing import List, Tuple

from book_finder.errors import PersistenceError
from book_finder.models import Book
from book_finder.store import KeyValueStore

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"


class PersistedFavorites:
    """
    Append-only favorites, written through to the store on every change.

    The same book may be added more than once; entries are never removed or
    reordered.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._books: List[Book] = []

    @property
    def books(self) -> Tuple[Book, ...]:
        return tuple(self._books)

    def load(self) -> List[Book]:
        """
        Read favorites from the store.

        A missing or corrupt entry yields an empty list; decoding problems are
        logged and never raised.
        """
        raw = self.store.get(FAVORITES_KEY)
        if raw is None:
            self._books = []
            return []

        try:
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise ValueError("favorites entry is not a list")
            books = [Book.from_dict(entry) for entry in entries]
        except (ValueError, TypeError) as e:
            # json.JSONDecodeError is a ValueError too
            logger.warning(f"Discarding malformed favorites: {e}")
            books = []

        self._books = books
        logger.info(f"Loaded {len(books)} favorites")
        return list(books)

    def add(self, book: Book) -> None:
        """
        Append a book and persist the whole list.

        Raises:
            PersistenceError: if the store rejects the write; the in-memory
                list is unchanged in that case
        """
        updated = self._books + [book]
        payload = json.dumps([b.to_dict() for b in updated], ensure_ascii=False)

        try:
            self.store.set(FAVORITES_KEY, payload)
        except PersistenceError:
            logger.error(f"Failed to persist favorite {book.id}")
            raise

        self._books = updated
        logger.info(f"Added favorite {book.id} ({len(updated)} total)")
