"""In-memory implementation of CardRepository for testing."""

from domain.model.review import SpacedRepetitionCard


class FakeCardRepository:
    def __init__(self):
        self.store: dict[str, SpacedRepetitionCard] = {}

    def save(self, card: SpacedRepetitionCard) -> bool:
        self.store[card.id] = card
        return True

    def get_by_id(self, card_id: str) -> SpacedRepetitionCard | None:
        return self.store.get(card_id)

    def list_all(self) -> list[SpacedRepetitionCard]:
        return list(self.store.values())

    def delete(self, card_id: str) -> bool:
        if card_id in self.store:
            del self.store[card_id]
            return True
        return False
