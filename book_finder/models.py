"""Data models for books, search state and the user session."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Tuple, Dict, Any

# Results requested per catalog fetch
PAGE_SIZE = 10


@dataclass
class Book:
    """Normalized book representation."""
    id: str
    title: str
    authors: List[str] = field(default_factory=list)
    published_date: Optional[str] = None
    description: Optional[str] = None
    page_count: Optional[int] = None
    categories: List[str] = field(default_factory=list)
    thumbnail: Optional[str] = None
    language: str = "en"

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.authors) if self.authors else "Unknown"

    @property
    def categories_str(self) -> str:
        """Format categories as comma-separated string."""
        return ", ".join(self.categories) if self.categories else "None"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Book":
        """
        Rebuild a book from its serialized form.

        Raises:
            ValueError: if the payload has no id or is not a mapping
        """
        if not isinstance(data, dict) or not data.get("id"):
            raise ValueError(f"Not a serialized book: {data!r}")

        return cls(
            id=str(data["id"]),
            title=data.get("title") or "Unknown Title",
            authors=list(data.get("authors") or []),
            published_date=data.get("published_date"),
            description=data.get("description"),
            page_count=data.get("page_count"),
            categories=list(data.get("categories") or []),
            thumbnail=data.get("thumbnail"),
            language=data.get("language") or "en",
        )


class SortOption(str, Enum):
    """Catalog ordering, values match the API's ``orderBy`` parameter."""
    RELEVANCE = "relevance"
    NEWEST = "newest"


class PageDirection(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"


class SearchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class SearchState:
    """
    Snapshot of the search controller.

    ``offset`` is always a non-negative multiple of PAGE_SIZE, and ``page``
    holds the books of exactly one completed fetch (empty on EMPTY/ERROR).
    """
    query: str = ""
    sort_option: SortOption = SortOption.RELEVANCE
    offset: int = 0
    page: Tuple[Book, ...] = ()
    status: SearchStatus = SearchStatus.IDLE
    error_message: Optional[str] = None

    @property
    def page_number(self) -> int:
        """One-based page number for display."""
        return self.offset // PAGE_SIZE + 1


@dataclass(frozen=True)
class Session:
    """The user's display label. Not a credential."""
    display_name: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return bool(self.display_name)
