"""Port for spaced-repetition card persistence."""

from typing import Protocol

from domain.model.review import SpacedRepetitionCard


class CardRepository(Protocol):
    """Key-value storage of card states, keyed by card id."""

    def save(self, card: SpacedRepetitionCard) -> bool:
        """Insert or replace a card. Returns False on storage failure."""
        ...

    def get_by_id(self, card_id: str) -> SpacedRepetitionCard | None: ...

    def list_all(self) -> list[SpacedRepetitionCard]:
        """All cards in insertion order."""
        ...

    def delete(self, card_id: str) -> bool:
        """Returns True if deleted, False if not found."""
        ...
