"""In-memory implementation of the VocabularyStore port.

Words live in a primary dict keyed by id. Secondary indexes map a language
to its word ids, a category to its word ids, and a language to its ranked
words in ascending rank order. Results that are not ordered by rank follow
insertion order.

A store instance is not synchronized; wrap it in a lock when several
threads write to the same instance.
"""

import bisect
import itertools
import logging
from dataclasses import fields, replace
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from adapter.system.clock import SystemClock
from codec import formats
from codec.models import WordRecord
from domain.model.analytics import MorphologyStatistics, WordStatistics
from domain.model.errors import ValidationError, VocabularyImportError
from domain.model.vocabulary import (
    Collocation,
    DifficultyLevel,
    EmotionalConnotation,
    Idiom,
    PartOfSpeech,
    Phrase,
    RegisterLevel,
    VocabularyWord,
)
from port.clock import Clock

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({'id', 'date_added', 'date_modified'})
_UPDATABLE_FIELDS = frozenset(f.name for f in fields(VocabularyWord)) - _IMMUTABLE_FIELDS
_ENUM_FIELDS = {
    'part_of_speech': PartOfSpeech,
    'difficulty': DifficultyLevel,
    'register': RegisterLevel,
    'emotional_connotation': EmotionalConnotation,
}


class VocabularyStore:
    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()
        self._words: dict[str, VocabularyWord] = {}
        self._sequence: dict[str, int] = {}
        self._counter = itertools.count()
        self._by_language: dict[str, set[str]] = {}
        self._by_category: dict[str, set[str]] = {}
        self._by_rank: dict[str, list[tuple[int, int, str]]] = {}
        # id → (language, categories, rank) the word is currently filed under
        self._indexed: dict[str, tuple[str, tuple[str, ...], int]] = {}

    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, word_id: object) -> bool:
        return word_id in self._words

    # ── CRUD ──────────────────────────────────────────────────

    def add_word(self, word: VocabularyWord) -> None:
        """Insert a word, replacing any existing word with the same id."""
        missing = word.missing_required_fields()
        if missing:
            raise ValidationError(f"Word is missing required fields: {', '.join(missing)}")

        if word.id in self._words:
            self._unindex(word.id)
        else:
            self._sequence[word.id] = next(self._counter)
        self._words[word.id] = word
        self._index(word)

    def get_word(self, word_id: str) -> VocabularyWord | None:
        return self._words.get(word_id)

    def list_words(self, language: str | None = None) -> list[VocabularyWord]:
        if language is None:
            return list(self._words.values())
        return self._ordered(self._by_language.get(language, set()))

    def update_word(self, word_id: str, **changes: Any) -> VocabularyWord | None:
        """Apply field changes to a stored word.

        Enum fields accept their string values. Refreshes date_modified and
        reindexes the word. Returns None if the id is unknown.
        """
        word = self._words.get(word_id)
        if word is None:
            return None

        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        coerced = {name: self._coerce(name, value) for name, value in changes.items()}
        candidate = replace(word, **coerced)
        missing = candidate.missing_required_fields()
        if missing:
            raise ValidationError(f"Word is missing required fields: {', '.join(missing)}")

        self._unindex(word_id)
        for name, value in coerced.items():
            setattr(word, name, value)
        word.mark_modified(self.clock.now())
        self._index(word)
        return word

    def set_favorite(self, word_id: str, favorite: bool = True) -> VocabularyWord | None:
        return self.update_word(word_id, is_favorite=favorite)

    # ── queries ───────────────────────────────────────────────

    def languages(self) -> list[str]:
        return sorted(lang for lang, ids in self._by_language.items() if ids)

    def categories(self, language: str | None = None) -> list[str]:
        if language is None:
            return sorted(cat for cat, ids in self._by_category.items() if ids)
        language_ids = self._by_language.get(language, set())
        return sorted(cat for cat, ids in self._by_category.items() if ids & language_ids)

    def search_words(
        self,
        query: str,
        language: str | None = None,
        include_etymology: bool = False,
        include_idioms: bool = False,
        include_phrases: bool = False,
    ) -> list[VocabularyWord]:
        term = query.lower()

        def contains(text: str | None) -> bool:
            return bool(text) and term in text.lower()

        def matches(word: VocabularyWord) -> bool:
            if contains(word.word) or contains(word.translation):
                return True
            if any(contains(c) for c in word.categories):
                return True
            if any(contains(s) for s in word.synonyms) or any(contains(a) for a in word.antonyms):
                return True
            if include_etymology and word.etymology:
                if contains(word.etymology.origin) or contains(word.etymology.meaning_evolution):
                    return True
            if include_idioms and any(contains(i.phrase) or contains(i.meaning) for i in word.idioms):
                return True
            if include_phrases and any(contains(p.phrase) or contains(p.meaning) for p in word.phrases):
                return True
            return False

        return [w for w in self.list_words(language) if matches(w)]

    def get_most_frequent_words(self, language: str, limit: int = 100) -> list[VocabularyWord]:
        """Ranked words of a language, most frequent (rank 1) first."""
        ranked = self._by_rank.get(language, [])
        return [self._words[word_id] for _, _, word_id in ranked[:max(limit, 0)]]

    def get_words_by_frequency_range(self, language: str, min_rank: int, max_rank: int) -> list[VocabularyWord]:
        """Words whose rank lies in [min_rank, max_rank], ascending rank."""
        words = [
            w for w in self.list_words(language)
            if min_rank <= w.frequency.rank <= max_rank
        ]
        return sorted(words, key=lambda w: w.frequency.rank)

    def get_words_by_etymology(self, origin: str, language: str | None = None) -> list[VocabularyWord]:
        term = origin.lower()
        return [
            w for w in self.list_words(language)
            if w.etymology and term in w.etymology.origin.lower()
        ]

    def get_words_by_category(self, category: str, language: str | None = None) -> list[VocabularyWord]:
        ids = self._by_category.get(category, set())
        if language is not None:
            ids = ids & self._by_language.get(language, set())
        return self._ordered(ids)

    def get_idioms_for_word(self, word_id: str) -> list[Idiom]:
        word = self.get_word(word_id)
        return list(word.idioms) if word else []

    def get_phrases_for_word(self, word_id: str) -> list[Phrase]:
        word = self.get_word(word_id)
        return list(word.phrases) if word else []

    def get_collocations_for_word(self, word_id: str) -> list[Collocation]:
        word = self.get_word(word_id)
        return list(word.collocations) if word else []

    # ── frequency data ────────────────────────────────────────

    def update_word_frequencies(self, frequency_table: dict[str, dict[str, float]]) -> int:
        """Overwrite frequency figures from a corpus table.

        The table is keyed by lowercase surface form; each entry carries
        ``writingFreq``, ``speechFreq`` and ``rank``. Missing figures keep
        their current value. Returns the number of words updated.
        """
        now = self.clock.now()
        updated = 0
        for word in self._words.values():
            entry = frequency_table.get(word.word.lower())
            if not entry:
                continue
            current = word.frequency
            try:
                word.frequency = replace(
                    current,
                    writing_frequency=entry.get('writingFreq', current.writing_frequency),
                    speech_frequency=entry.get('speechFreq', current.speech_frequency),
                    rank=int(entry.get('rank', current.rank)),
                    last_updated=now,
                )
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning("Skipping invalid frequency entry", extra={
                    "word": word.word,
                    "error": str(e),
                })
                continue
            word.mark_modified(now)
            updated += 1

        self._rebuild_indexes()
        logger.info("Updated word frequencies", extra={
            "updated": updated,
            "table_size": len(frequency_table),
        })
        return updated

    # ── aggregate queries ─────────────────────────────────────

    def get_word_statistics(self, language: str | None = None) -> WordStatistics:
        words = self.list_words(language)
        stats = WordStatistics(total_words=len(words))
        morphology = MorphologyStatistics()

        def bump(counter: dict[str, int], key: str) -> None:
            counter[key] = counter.get(key, 0) + 1

        total_rank = 0
        ranked = 0
        for word in words:
            if word.frequency.rank > 0:
                total_rank += word.frequency.rank
                ranked += 1
            if word.etymology and word.etymology.origin:
                bump(stats.etymology_origins, word.etymology.origin)
            if word.register:
                bump(stats.register_distribution, word.register.value)
            if word.emotional_connotation:
                bump(stats.emotional_distribution, word.emotional_connotation.value)

            stats.total_idioms += len(word.idioms)
            stats.total_phrases += len(word.phrases)
            stats.total_collocations += len(word.collocations)

            if word.morphology:
                if word.morphology.inflections:
                    morphology.words_with_inflections += 1
                if word.morphology.derived_forms:
                    morphology.words_with_derived_forms += 1
                for prefix in word.morphology.prefix:
                    bump(morphology.common_prefixes, prefix)
                for suffix in word.morphology.suffix:
                    bump(morphology.common_suffixes, suffix)

        if ranked:
            stats.average_frequency_rank = total_rank / ranked
        stats.morphology = morphology
        return stats

    # ── serialization ─────────────────────────────────────────

    def export_words(self, format: str, language: str | None = None) -> str:
        return formats.export(self.list_words(language), format)

    def import_words(self, data: str, format: str, language: str) -> int:
        """Import words from a JSON array or a header-driven CSV text.

        Every imported word gets a fresh id and the given language. Records
        that fail validation are skipped; a payload that cannot be parsed at
        all imports nothing. Never raises for bad input.
        """
        try:
            records = formats.parse(data, format)
        except VocabularyImportError as e:
            logger.error("Import failed", extra={"format": format, "language": language, "error": str(e)})
            return 0

        now = self.clock.now()
        imported = 0
        for index, raw in enumerate(records):
            try:
                record = WordRecord.model_validate(raw)
                self.add_word(record.to_domain(language=language, now=now))
            except (SchemaValidationError, ValidationError) as e:
                logger.warning("Skipping malformed word record", extra={
                    "format": format,
                    "index": index,
                    "error": str(e),
                })
                continue
            imported += 1

        logger.info("Imported words", extra={
            "format": format,
            "language": language,
            "imported": imported,
            "skipped": len(records) - imported,
        })
        return imported

    # ── indexes ───────────────────────────────────────────────

    def _index(self, word: VocabularyWord) -> None:
        categories = tuple(dict.fromkeys(word.categories))
        rank = word.frequency.rank
        self._by_language.setdefault(word.language, set()).add(word.id)
        for category in categories:
            self._by_category.setdefault(category, set()).add(word.id)
        if rank > 0:
            bisect.insort(self._by_rank.setdefault(word.language, []), (rank, self._sequence[word.id], word.id))
        self._indexed[word.id] = (word.language, categories, rank)

    def _unindex(self, word_id: str) -> None:
        entry = self._indexed.pop(word_id, None)
        if entry is None:
            return
        language, categories, rank = entry
        self._by_language.get(language, set()).discard(word_id)
        for category in categories:
            self._by_category.get(category, set()).discard(word_id)
        if rank > 0:
            ranked = self._by_rank.get(language, [])
            key = (rank, self._sequence[word_id], word_id)
            position = bisect.bisect_left(ranked, key)
            if position < len(ranked) and ranked[position] == key:
                del ranked[position]

    def _rebuild_indexes(self) -> None:
        self._by_language.clear()
        self._by_category.clear()
        self._by_rank.clear()
        self._indexed.clear()
        for word in self._words.values():
            self._index(word)

    def _ordered(self, ids: set[str]) -> list[VocabularyWord]:
        """Words for the given ids in insertion order."""
        return [self._words[word_id] for word_id in sorted(ids, key=self._sequence.__getitem__)]

    @staticmethod
    def _coerce(name: str, value: Any) -> Any:
        enum_type = _ENUM_FIELDS.get(name)
        if enum_type is None or value is None or isinstance(value, enum_type):
            return value
        try:
            return enum_type(value)
        except ValueError as e:
            raise ValidationError(f"Invalid value for {name}: {value!r}") from e
