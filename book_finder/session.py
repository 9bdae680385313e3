"""Display-name gate in front of the search and favorites features."""
import logging
from typing import Optional

from book_finder.errors import EmptyNameError, SessionRequiredError
from book_finder.models import Session

logger = logging.getLogger(__name__)


class SessionGate:
    """Holds the session; the name is set once and never cleared."""

    def __init__(self):
        self.session = Session()
        self.error_message: Optional[str] = None

    def login(self, name: str) -> Session:
        """
        Set the display name.

        Args:
            name: Raw user input, surrounding whitespace is ignored

        Returns:
            The active session

        Raises:
            EmptyNameError: if the name is blank; the session is untouched
        """
        if self.session.is_active:
            logger.info("Session already started, ignoring login")
            return self.session

        display_name = (name or "").strip()
        if not display_name:
            error = EmptyNameError()
            self.error_message = str(error)
            raise error

        self.session = Session(display_name=display_name)
        self.error_message = None
        logger.info(f"Session started for {display_name}")
        return self.session

    def require(self) -> Session:
        if not self.session.is_active:
            raise SessionRequiredError("Log in with a display name first")
        return self.session
