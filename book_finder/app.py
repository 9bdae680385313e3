"""Composition root: wires user intents to the search and collection components."""
import asyncio
import logging
from typing import Optional, Tuple

from book_finder.async_client import AsyncGoogleBooksClient
from book_finder.config import Config
from book_finder.errors import (
    EmptyNameError,
    PersistenceError,
    PERSISTENCE_ERROR_MESSAGE,
)
from book_finder.favorites import PersistedFavorites
from book_finder.models import Book, SearchState, Session
from book_finder.recent import RecentlyViewed, DEFAULT_LIMIT
from book_finder.search import SearchController
from book_finder.session import SessionGate
from book_finder.store import KeyValueStore, build_store

logger = logging.getLogger(__name__)


class BookFinder:
    """
    One user's session.

    Favorites are read from the store once, here in the constructor. The
    intent methods are the only way to change state; the properties return
    read-only snapshots for whatever renders them.
    """

    def __init__(
        self,
        client,
        store: KeyValueStore,
        recent_limit: int = DEFAULT_LIMIT
    ):
        self.client = client
        self.gate = SessionGate()
        self.search = SearchController(client)
        self.recent = RecentlyViewed(limit=recent_limit)
        self.favorites_store = PersistedFavorites(store)
        self.favorites_store.load()

        self._selected_book: Optional[Book] = None
        self._error_message: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "BookFinder":
        config = config or Config()
        client = AsyncGoogleBooksClient(
            api_key=config.GOOGLE_BOOKS_API_KEY,
            timeout=config.DEFAULT_TIMEOUT
        )
        return cls(
            client,
            build_store(config),
            recent_limit=config.RECENTLY_VIEWED_LIMIT
        )

    # Snapshots

    @property
    def session(self) -> Session:
        return self.gate.session

    @property
    def search_state(self) -> SearchState:
        return self.search.state

    @property
    def favorites(self) -> Tuple[Book, ...]:
        return self.favorites_store.books

    @property
    def recently_viewed(self) -> Tuple[Book, ...]:
        return self.recent.books

    @property
    def selected_book(self) -> Optional[Book]:
        return self._selected_book

    @property
    def error_message(self) -> Optional[str]:
        """Login or favorites message; search messages live on ``search_state``."""
        return self._error_message

    # Intents

    def login(self, name: str) -> Optional[Session]:
        try:
            session = self.gate.login(name)
        except EmptyNameError as e:
            self._error_message = str(e)
            return None

        self._error_message = None
        return session

    def set_query(self, text: str) -> Optional[asyncio.Task]:
        self.gate.require()
        return self.search.set_query(text)

    def submit_search(self) -> Optional[asyncio.Task]:
        self.gate.require()
        return self.search.submit_search()

    def set_sort_option(self, option) -> Optional[asyncio.Task]:
        self.gate.require()
        return self.search.set_sort_option(option)

    def paginate(self, direction) -> Optional[asyncio.Task]:
        self.gate.require()
        return self.search.paginate(direction)

    def select_book(self, book: Book) -> None:
        self.gate.require()
        self.recent.record_view(book)
        self._selected_book = book

    def close_details(self) -> None:
        self._selected_book = None

    def add_favorite(self, book: Book) -> bool:
        """Append to favorites. Returns False if the store could not be written."""
        self.gate.require()
        try:
            self.favorites_store.add(book)
        except PersistenceError as e:
            logger.error(f"Favorite not saved: {e}")
            self._error_message = PERSISTENCE_ERROR_MESSAGE
            return False

        self._error_message = None
        return True

    async def settle(self) -> SearchState:
        return await self.search.settle()

    async def aclose(self):
        close = getattr(self.client, "close", None)
        try:
            if close is not None:
                await close()
        finally:
            # Only the postgres store holds connections
            store_close = getattr(self.favorites_store.store, "close", None)
            if store_close is not None:
                store_close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
