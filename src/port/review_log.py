"""Port for the review session log."""

from typing import Protocol

from domain.model.review import ReviewSession


class ReviewLog(Protocol):
    """Append-only log of review sessions."""

    def append(self, session: ReviewSession) -> bool:
        """Returns False when the session could not be stored."""
        ...

    def list_all(self) -> list[ReviewSession]:
        """Sessions in chronological order."""
        ...
