"""Spaced-repetition domain models."""

from dataclasses import dataclass
from datetime import datetime, timezone

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


@dataclass(frozen=True)
class SpacedRepetitionCard:
    """Scheduling state of one card (Value Object).

    A new state is produced by every review; instances are never mutated.

    Attributes:
        ease_factor: SM-2 E-Factor, never below MIN_EASE_FACTOR.
        interval: Days between last_review_date and next_review_date (>= 1).
        repetition: Consecutive reviews answered with quality >= 3.
        quality: Quality of the most recent review (0-5).
    """
    id: str
    word: str
    translation: str
    ease_factor: float
    interval: int
    repetition: int
    next_review_date: datetime
    last_review_date: datetime
    quality: float = 0

    @staticmethod
    def create(id: str, word: str, translation: str, now: datetime | None = None) -> 'SpacedRepetitionCard':
        """Create a card in the learning regime, due immediately."""
        now = now or datetime.now(timezone.utc)
        return SpacedRepetitionCard(
            id=id,
            word=word,
            translation=translation,
            ease_factor=DEFAULT_EASE_FACTOR,
            interval=1,
            repetition=0,
            next_review_date=now,
            last_review_date=now,
            quality=0,
        )

    # ── queries ───────────────────────────────────────────

    def is_due(self, now: datetime) -> bool:
        return self.next_review_date <= now


@dataclass(frozen=True)
class ReviewSession:
    """Immutable log entry of a single review."""
    card_id: str
    quality: float
    response_time: int
    timestamp: datetime

    @property
    def is_correct(self) -> bool:
        return self.quality >= 3
