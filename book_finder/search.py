"""Search and pagination state machine."""
import asyncio
import logging
from dataclasses import replace
from typing import Optional

from book_finder.errors import (
    NetworkError,
    EMPTY_QUERY_MESSAGE,
    NO_RESULTS_MESSAGE,
    NETWORK_ERROR_MESSAGE,
)
from book_finder.models import (
    PAGE_SIZE,
    PageDirection,
    SearchState,
    SearchStatus,
    SortOption,
)

logger = logging.getLogger(__name__)


class SearchController:
    """
    Owns the query, sort option, offset and the last fetched page.

    Every change to the ``(query, sort_option, offset)`` tuple issues at most
    one fetch for the new tuple. Fetches run as asyncio tasks, so the intent
    methods must be called from inside a running event loop; each returns the
    scheduled task, or None when nothing was fetched.

    Each fetch is tagged with a token. Only the result of the most recently
    issued fetch is applied; anything older that completes later is dropped.
    """

    def __init__(self, client, page_size: int = PAGE_SIZE):
        """
        Args:
            client: Search collaborator with an async
                ``search(query, sort_option, start_index, max_results)``
            page_size: Results per page
        """
        self.client = client
        self.page_size = page_size
        self._state = SearchState()
        self._token = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SearchState:
        return self._state

    def set_query(self, text: str) -> Optional[asyncio.Task]:
        self._state = replace(self._state, query=text or "", offset=0)
        return self._refetch()

    def set_sort_option(self, option) -> Optional[asyncio.Task]:
        self._state = replace(self._state, sort_option=SortOption(option), offset=0)
        return self._refetch()

    def submit_search(self) -> Optional[asyncio.Task]:
        """Start a search from the first page, or record an empty-query error."""
        if not self._state.query.strip():
            # Whatever is in flight belongs to an older query
            self._token += 1
            self._state = replace(
                self._state,
                page=(),
                status=SearchStatus.ERROR,
                error_message=EMPTY_QUERY_MESSAGE
            )
            logger.info("Search submitted with an empty query")
            return None

        self._state = replace(self._state, offset=0)
        return self._issue_fetch()

    def paginate(self, direction) -> Optional[asyncio.Task]:
        """
        Move one page forward or back.

        Going back from the first page changes nothing and fetches nothing.
        """
        offset = self._state.offset

        if PageDirection(direction) is PageDirection.NEXT:
            new_offset = offset + self.page_size
        elif offset > 0:
            new_offset = offset - self.page_size
        else:
            return None

        self._state = replace(self._state, offset=new_offset)
        return self._refetch()

    async def settle(self) -> SearchState:
        """Wait for the latest fetch to finish and return the resulting state."""
        while self._task is not None and not self._task.done():
            await self._task
        return self._state

    def _refetch(self) -> Optional[asyncio.Task]:
        if self._state.query.strip():
            return self._issue_fetch()

        # No query to search for: retire any fetch for the previous tuple
        self._token += 1
        if self._state.status is SearchStatus.LOADING:
            self._state = replace(self._state, status=SearchStatus.IDLE)
        return None

    def _issue_fetch(self) -> asyncio.Task:
        self._token += 1
        token = self._token
        self._state = replace(self._state, status=SearchStatus.LOADING)

        state = self._state
        self._task = asyncio.create_task(
            self._fetch(token, state.query.strip(), state.sort_option, state.offset)
        )
        return self._task

    async def _fetch(self, token: int, query: str, sort_option: SortOption, offset: int):
        try:
            books = await self.client.search(query, sort_option, offset, self.page_size)
        except NetworkError as e:
            if token != self._token:
                logger.debug(f"Dropping failure of superseded fetch {token}")
                return
            logger.error(f"Search for {query!r} at offset {offset} failed: {e}")
            self._state = replace(
                self._state,
                page=(),
                status=SearchStatus.ERROR,
                error_message=NETWORK_ERROR_MESSAGE
            )
            return

        if token != self._token:
            logger.debug(f"Dropping result of superseded fetch {token}")
            return

        if books:
            self._state = replace(
                self._state,
                page=tuple(books),
                status=SearchStatus.SUCCESS,
                error_message=None
            )
        else:
            self._state = replace(
                self._state,
                page=(),
                status=SearchStatus.EMPTY,
                error_message=NO_RESULTS_MESSAGE
            )
        logger.info(f"Search {query!r} offset {offset}: {len(books)} books")
