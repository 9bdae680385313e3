"""Exceptions raised by the book finder core."""

EMPTY_NAME_MESSAGE = "Please enter your name."
EMPTY_QUERY_MESSAGE = "Empty query: please enter a book title or author."
NO_RESULTS_MESSAGE = "No results found."
NETWORK_ERROR_MESSAGE = "Network error occurred. Please try again later."
PERSISTENCE_ERROR_MESSAGE = "Could not save favorites."


class BookFinderError(Exception):
    """Base class for all book finder errors."""


class ValidationError(BookFinderError):
    """User input was rejected."""


class EmptyNameError(ValidationError):
    def __init__(self, message: str = EMPTY_NAME_MESSAGE):
        super().__init__(message)


class EmptyQueryError(ValidationError):
    def __init__(self, message: str = EMPTY_QUERY_MESSAGE):
        super().__init__(message)


class NetworkError(BookFinderError):
    """The catalog could not be reached or answered with a non-2xx status."""


class PersistenceError(BookFinderError):
    """The key-value store failed to read or write."""


class SessionRequiredError(BookFinderError):
    """An intent was issued before a display name was set."""
