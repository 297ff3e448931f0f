"""Result objects returned by the statistics operations."""

from dataclasses import dataclass, field
from datetime import date


# ── Vocabulary ───────────────────────────────────────────


@dataclass
class MorphologyStatistics:
    words_with_inflections: int = 0
    words_with_derived_forms: int = 0
    common_prefixes: dict[str, int] = field(default_factory=dict)
    common_suffixes: dict[str, int] = field(default_factory=dict)


@dataclass
class WordStatistics:
    """Aggregate linguistic statistics over a set of words.

    average_frequency_rank only averages ranked words (rank > 0); it is 0
    when no word is ranked.
    """
    total_words: int = 0
    average_frequency_rank: float = 0.0
    etymology_origins: dict[str, int] = field(default_factory=dict)
    register_distribution: dict[str, int] = field(default_factory=dict)
    emotional_distribution: dict[str, int] = field(default_factory=dict)
    total_idioms: int = 0
    total_phrases: int = 0
    total_collocations: int = 0
    morphology: MorphologyStatistics = field(default_factory=MorphologyStatistics)


@dataclass
class VocabularyOverview:
    """Counts used by the word-list dashboard."""
    total: int = 0
    by_difficulty: dict[str, int] = field(default_factory=dict)
    by_part_of_speech: dict[str, int] = field(default_factory=dict)
    by_frequency: dict[str, int] = field(default_factory=dict)
    favorites: int = 0
    recently_added: int = 0


# ── Study ────────────────────────────────────────────────


@dataclass(frozen=True)
class StudyStatistics:
    total_cards: int
    due_cards: int
    mastered_cards: int
    average_ease_factor: float
    retention_rate: float
    average_interval: float


@dataclass(frozen=True)
class UpcomingReview:
    date: date
    count: int


@dataclass(frozen=True)
class DailyProgress:
    date: date
    correct: int
    total: int


@dataclass(frozen=True)
class DifficultyDistribution:
    easy: int = 0
    medium: int = 0
    hard: int = 0


@dataclass
class LearningPatterns:
    difficulty_distribution: DifficultyDistribution
    time_of_day_performance: dict[int, int]
    weekly_progress: list[DailyProgress]
    suggested_daily_reviews: int
