"""Port for the vocabulary store."""

from typing import Any, Protocol

from domain.model.analytics import WordStatistics
from domain.model.vocabulary import Collocation, Idiom, Phrase, VocabularyWord


class VocabularyStore(Protocol):
    """Protocol for word storage, structured queries and serialization.

    Lookups of a single word return None when the id is unknown; queries on
    an unknown language return an empty list.
    """

    def add_word(self, word: VocabularyWord) -> None:
        """Insert a word and index it. Raises ValidationError on missing fields."""
        ...

    def get_word(self, word_id: str) -> VocabularyWord | None: ...

    def list_words(self, language: str | None = None) -> list[VocabularyWord]: ...

    def update_word(self, word_id: str, **changes: Any) -> VocabularyWord | None:
        """Apply changes, refresh date_modified and reindex."""
        ...

    def search_words(
        self,
        query: str,
        language: str | None = None,
        include_etymology: bool = False,
        include_idioms: bool = False,
        include_phrases: bool = False,
    ) -> list[VocabularyWord]:
        """Case-insensitive substring search; a match in any enabled field includes the word."""
        ...

    def get_most_frequent_words(self, language: str, limit: int = 100) -> list[VocabularyWord]: ...

    def get_words_by_frequency_range(self, language: str, min_rank: int, max_rank: int) -> list[VocabularyWord]: ...

    def get_words_by_etymology(self, origin: str, language: str | None = None) -> list[VocabularyWord]: ...

    def get_words_by_category(self, category: str, language: str | None = None) -> list[VocabularyWord]: ...

    def get_idioms_for_word(self, word_id: str) -> list[Idiom]: ...

    def get_phrases_for_word(self, word_id: str) -> list[Phrase]: ...

    def get_collocations_for_word(self, word_id: str) -> list[Collocation]: ...

    def update_word_frequencies(self, frequency_table: dict[str, dict[str, float]]) -> int:
        """Overwrite frequency data from a corpus table keyed by lowercase word."""
        ...

    def get_word_statistics(self, language: str | None = None) -> WordStatistics: ...

    def export_words(self, format: str, language: str | None = None) -> str:
        """Serialize words as 'json', 'csv' or 'anki'."""
        ...

    def import_words(self, data: str, format: str, language: str) -> int:
        """Parse 'json' or 'csv' and add the words. Returns the number added, never raises on bad payloads."""
        ...
