"""End-to-end tests of the session orchestrator with stub collaborators."""
import json

import pytest

from book_finder.app import BookFinder
from book_finder.errors import (
    NetworkError,
    PersistenceError,
    SessionRequiredError,
    EMPTY_NAME_MESSAGE,
    PERSISTENCE_ERROR_MESSAGE,
)
from book_finder.favorites import FAVORITES_KEY
from book_finder.models import Book, PageDirection, SearchStatus, SortOption
from book_finder.store import MemoryStore


class StubClient:
    def __init__(self, pages=None):
        self.pages = pages or {}
        self.error = None
        self.calls = []
        self.closed = False

    async def search(self, query, sort_option, start_index, max_results):
        self.calls.append((query, SortOption(sort_option).value, start_index))
        if self.error:
            raise self.error
        return list(self.pages.get(start_index, []))

    async def close(self):
        self.closed = True


class CountingStore(MemoryStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.reads = 0

    def _get(self, key):
        self.reads += 1
        return super()._get(key)


DUNE = Book("dune-1", "Dune", ["Frank Herbert"])
MESSIAH = Book("dune-2", "Dune Messiah", ["Frank Herbert"])


def make_finder(store=None, pages=None):
    client = StubClient(pages or {0: [DUNE, MESSIAH], 10: [Book("dune-3", "Children of Dune")]})
    return BookFinder(client, store or MemoryStore()), client


def test_favorites_loaded_once_at_startup():
    store = CountingStore()
    store.set(FAVORITES_KEY, json.dumps([DUNE.to_dict()]))

    finder, _ = make_finder(store)

    assert finder.favorites == (DUNE,)
    assert store.reads == 1


def test_login_failure_is_recorded_not_raised():
    finder, _ = make_finder()

    assert finder.login("   ") is None
    assert finder.error_message == EMPTY_NAME_MESSAGE
    assert not finder.session.is_active

    assert finder.login("Ada").display_name == "Ada"
    assert finder.error_message is None


def test_intents_require_login():
    finder, _ = make_finder()

    with pytest.raises(SessionRequiredError):
        finder.submit_search()
    with pytest.raises(SessionRequiredError):
        finder.add_favorite(DUNE)


@pytest.mark.asyncio
async def test_search_page_and_sort_flow():
    finder, client = make_finder()
    finder.login("Ada")

    finder.set_query("dune")
    finder.submit_search()
    state = await finder.settle()
    assert state.status is SearchStatus.SUCCESS
    assert state.page == (DUNE, MESSIAH)

    finder.paginate(PageDirection.NEXT)
    state = await finder.settle()
    assert state.offset == 10
    assert [b.id for b in state.page] == ["dune-3"]

    finder.set_sort_option(SortOption.NEWEST)
    state = await finder.settle()
    assert state.offset == 0
    assert client.calls[-1] == ("dune", "newest", 0)


@pytest.mark.asyncio
async def test_network_error_is_captured_in_state():
    finder, client = make_finder()
    finder.login("Ada")
    finder.set_query("dune")
    await finder.settle()

    client.error = NetworkError("timeout")
    finder.submit_search()
    state = await finder.settle()

    assert state.status is SearchStatus.ERROR
    assert state.page == ()


def test_select_book_records_view():
    finder, _ = make_finder()
    finder.login("Ada")

    finder.select_book(DUNE)
    finder.select_book(MESSIAH)
    finder.select_book(DUNE)

    assert finder.selected_book == DUNE
    assert finder.recently_viewed == (DUNE, MESSIAH)

    finder.close_details()
    assert finder.selected_book is None
    assert finder.recently_viewed == (DUNE, MESSIAH)


def test_add_favorite_persists_for_next_session():
    store = MemoryStore()
    finder, _ = make_finder(store)
    finder.login("Ada")

    assert finder.add_favorite(DUNE)
    assert finder.add_favorite(MESSIAH)

    next_session, _ = make_finder(store)
    assert next_session.favorites == (DUNE, MESSIAH)


def test_add_favorite_failure_is_reported():
    class FailingStore(MemoryStore):
        def _set(self, key, value):
            raise PersistenceError("read-only")

    finder, _ = make_finder(FailingStore())
    finder.login("Ada")

    assert finder.add_favorite(DUNE) is False
    assert finder.error_message == PERSISTENCE_ERROR_MESSAGE
    assert finder.favorites == ()


@pytest.mark.asyncio
async def test_async_context_closes_client():
    finder, client = make_finder()

    async with finder:
        pass

    assert client.closed


@pytest.mark.asyncio
async def test_store_closed_even_when_client_close_fails():
    class ClosableStore(MemoryStore):
        closed = False

        def close(self):
            self.closed = True

    class BrokenCloseClient(StubClient):
        async def close(self):
            raise RuntimeError("transport already gone")

    store = ClosableStore()
    finder = BookFinder(BrokenCloseClient(), store)

    with pytest.raises(RuntimeError):
        await finder.aclose()

    assert store.closed
