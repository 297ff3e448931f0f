"""Vocabulary service — business logic for the learner's word list.

Operates on collections of words (filtering, ordering, overviews,
suggestions), as opposed to VocabularyStore which handles storage and
indexed queries.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from domain.model.analytics import VocabularyOverview
from domain.model.vocabulary import (
    DifficultyLevel,
    FrequencyLevel,
    PartOfSpeech,
    VocabularyWord,
)
from port.vocabulary_store import VocabularyStore

logger = logging.getLogger(__name__)

SORT_OPTIONS = ('alphabetical', 'difficulty', 'frequency', 'date_added', 'random')
RECENT_DAYS = 7


def collect_word(
    store: VocabularyStore,
    word: str,
    translation: str,
    language: str,
    now: datetime | None = None,
    **attributes,
) -> VocabularyWord:
    """Add a word to the store, returning the existing entry if already collected.

    Duplicate = same language + surface form (case-insensitive).
    """
    for existing in store.list_words(language):
        if existing.word.lower() == word.lower():
            return existing
    entry = VocabularyWord.create(word=word, translation=translation, language=language, now=now, **attributes)
    store.add_word(entry)
    logger.info("Collected word", extra={"word_id": entry.id, "language": language})
    return entry


def filter_vocabulary(
    words: Iterable[VocabularyWord],
    language: str | None = None,
    difficulty: Sequence[DifficultyLevel] | None = None,
    part_of_speech: Sequence[PartOfSpeech] | None = None,
    categories: Sequence[str] | None = None,
    favorites: bool = False,
    search: str | None = None,
) -> list[VocabularyWord]:
    """Filter words; every given criterion must hold.

    ``categories`` matches words sharing at least one category. ``search``
    is a case-insensitive substring test on word, translation and categories.
    """
    term = search.lower() if search else None

    def keep(word: VocabularyWord) -> bool:
        if language and word.language != language:
            return False
        if difficulty and word.difficulty not in difficulty:
            return False
        if part_of_speech and word.part_of_speech not in part_of_speech:
            return False
        if categories and not any(c in word.categories for c in categories):
            return False
        if favorites and not word.is_favorite:
            return False
        if term:
            return (
                term in word.word.lower()
                or term in word.translation.lower()
                or any(term in c.lower() for c in word.categories)
            )
        return True

    return [w for w in words if keep(w)]


def sort_vocabulary(
    words: Iterable[VocabularyWord],
    sort_by: str,
    rng: random.Random | None = None,
) -> list[VocabularyWord]:
    """Return a sorted copy.

    Args:
        sort_by: One of SORT_OPTIONS. 'frequency' orders by frequency band,
            'date_added' puts the newest first. Unknown values keep the
            input order.
        rng: Random source for 'random' (seed it for reproducible order).
    """
    result = list(words)
    if sort_by == 'alphabetical':
        result.sort(key=lambda w: w.word.casefold())
    elif sort_by == 'difficulty':
        result.sort(key=lambda w: w.difficulty.order)
    elif sort_by == 'frequency':
        result.sort(key=lambda w: w.frequency.level.order)
    elif sort_by == 'date_added':
        result.sort(key=lambda w: w.date_added, reverse=True)
    elif sort_by == 'random':
        (rng or random.Random()).shuffle(result)
    return result


def get_categories(words: Iterable[VocabularyWord]) -> list[str]:
    """All distinct categories, alphabetically."""
    return sorted({c for w in words for c in w.categories})


def get_vocabulary_overview(words: Sequence[VocabularyWord], now: datetime) -> VocabularyOverview:
    """Counts by difficulty, part of speech and frequency band, plus favorites and recent additions."""
    overview = VocabularyOverview(
        total=len(words),
        by_difficulty={d.value: 0 for d in DifficultyLevel},
        by_part_of_speech={p.value: 0 for p in PartOfSpeech},
        by_frequency={f.value: 0 for f in FrequencyLevel},
    )
    cutoff = now - timedelta(days=RECENT_DAYS)
    for word in words:
        overview.by_difficulty[word.difficulty.value] += 1
        overview.by_part_of_speech[word.part_of_speech.value] += 1
        overview.by_frequency[word.frequency.level.value] += 1
        if word.is_favorite:
            overview.favorites += 1
        if word.date_added >= cutoff:
            overview.recently_added += 1
    return overview


def _relatedness(target: VocabularyWord, candidate: VocabularyWord) -> int:
    shared_categories = sum(1 for c in candidate.categories if c in target.categories)
    score = shared_categories * 3
    score += max(0, 2 - abs(target.difficulty.order - candidate.difficulty.order))
    if candidate.part_of_speech == target.part_of_speech:
        score += 1
    return score


def suggest_related_words(
    target: VocabularyWord,
    words: Iterable[VocabularyWord],
    limit: int = 5,
) -> list[VocabularyWord]:
    """Words most related to ``target`` by shared categories, difficulty and part of speech.

    Score: 3 per shared category, up to 2 for close difficulty, 1 for the
    same part of speech. Zero-score words are never suggested.
    """
    scored = [(_relatedness(target, word), word) for word in words if word.id != target.id]
    scored = [(score, word) for score, word in scored if score > 0]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [word for _, word in scored[:limit]]
