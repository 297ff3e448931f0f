"""SM-2 spaced-repetition scheduler.

Pure functions over SpacedRepetitionCard values. Every time-dependent
function accepts an explicit ``now`` (timezone-aware); when omitted the
current UTC time is sampled once per call.

Quality scale:
    5 - perfect response
    4 - correct response after hesitation
    3 - correct response recalled with serious difficulty
    2 - incorrect response; the correct one seemed familiar
    1 - incorrect response; the correct one was remembered
    0 - complete blackout
"""

import math
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from functools import cmp_to_key
from typing import Iterable, Sequence

from domain.model.analytics import (
    DailyProgress,
    DifficultyDistribution,
    LearningPatterns,
    StudyStatistics,
    UpcomingReview,
)
from domain.model.errors import ValidationError
from domain.model.review import MIN_EASE_FACTOR, ReviewSession, SpacedRepetitionCard

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3
MASTERED_REPETITIONS = 3

DEFAULT_AVERAGE_RESPONSE_TIME_MS = 3000
RESPONSE_TIME_ADJUSTMENT = 0.5

EASY_EASE_THRESHOLD = 2.8
HARD_EASE_THRESHOLD = 2.2
MAX_SUGGESTED_DAILY_REVIEWS = 50
PACE_INCREASE = 1.2


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def _round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 → 3, not 2)."""
    return math.floor(value + 0.5)


def _in_zone_of(value: datetime, reference: datetime) -> datetime:
    """``value`` expressed in the timezone of ``reference``."""
    if value.tzinfo is not None and reference.tzinfo is not None:
        return value.astimezone(reference.tzinfo)
    return value


def _calendar_date(value: datetime, reference: datetime) -> date:
    return _in_zone_of(value, reference).date()


# ── card lifecycle ───────────────────────────────────────────


def create_new_card(id: str, word: str, translation: str, now: datetime | None = None) -> SpacedRepetitionCard:
    return SpacedRepetitionCard.create(id, word, translation, now=_now(now))


def next_ease_factor(ease_factor: float, quality: float) -> float:
    """SM-2 ease update, floored at MIN_EASE_FACTOR.

    Quality 4 leaves the ease unchanged, 5 raises it by 0.1, anything lower
    shrinks it.
    """
    penalty = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02)))


def update_card_after_review(
    card: SpacedRepetitionCard,
    quality: float,
    response_time: int = 0,
    now: datetime | None = None,
) -> SpacedRepetitionCard:
    """Compute the card state after a review.

    Args:
        card: Current card state (left untouched).
        quality: Recall quality in [0, 5]. Fractional values are accepted.
        response_time: Answer latency in milliseconds. Informational only;
            see adjust_quality_by_response_time for latency-based tuning.
        now: Review time.

    Returns:
        A new card. An incorrect answer (quality < 3) restarts the card at
        interval 1; consecutive correct answers give intervals 1, 6, then
        the previous interval times the updated ease factor.

    Raises:
        ValidationError: quality is outside [0, 5].
    """
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise ValidationError(f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}")

    now = _now(now)
    ease_factor = next_ease_factor(card.ease_factor, quality)

    if quality < PASSING_QUALITY:
        repetition = 0
        interval = 1
    else:
        repetition = card.repetition + 1
        if repetition == 1:
            interval = 1
        elif repetition == 2:
            interval = 6
        else:
            interval = max(1, _round_half_up(card.interval * ease_factor))

    return replace(
        card,
        ease_factor=ease_factor,
        interval=interval,
        repetition=repetition,
        quality=quality,
        next_review_date=now + timedelta(days=interval),
        last_review_date=now,
    )


# ── selection and ordering ───────────────────────────────────


def get_due_cards(cards: Iterable[SpacedRepetitionCard], now: datetime | None = None) -> list[SpacedRepetitionCard]:
    """Cards whose next review date is at or before now, in input order."""
    now = _now(now)
    return [card for card in cards if card.is_due(now)]


def sort_cards_by_priority(
    cards: Iterable[SpacedRepetitionCard],
    now: datetime | None = None,
) -> list[SpacedRepetitionCard]:
    """Order cards for study.

    Overdue cards come first, hardest (lowest ease factor) first; cards not
    yet due follow, soonest first. The sort is stable and returns a new list.
    """
    now = _now(now)

    def compare(a: SpacedRepetitionCard, b: SpacedRepetitionCard) -> int:
        a_due, b_due = a.is_due(now), b.is_due(now)
        if a_due and not b_due:
            return -1
        if b_due and not a_due:
            return 1
        if a_due:
            return (a.ease_factor > b.ease_factor) - (a.ease_factor < b.ease_factor)
        return (a.next_review_date > b.next_review_date) - (a.next_review_date < b.next_review_date)

    return sorted(cards, key=cmp_to_key(compare))


# ── analytics ────────────────────────────────────────────────


def calculate_retention_rate(cards: Sequence[SpacedRepetitionCard], sessions: Sequence[ReviewSession]) -> float:
    """Percentage of sessions answered correctly; 0 without sessions."""
    if not sessions:
        return 0.0
    correct = sum(1 for s in sessions if s.is_correct)
    return correct / len(sessions) * 100


def get_study_statistics(
    cards: Sequence[SpacedRepetitionCard],
    sessions: Sequence[ReviewSession],
    now: datetime | None = None,
) -> StudyStatistics:
    now = _now(now)
    total = len(cards)
    return StudyStatistics(
        total_cards=total,
        due_cards=len(get_due_cards(cards, now)),
        mastered_cards=sum(1 for c in cards if c.repetition >= MASTERED_REPETITIONS),
        average_ease_factor=sum(c.ease_factor for c in cards) / total if total else 0.0,
        retention_rate=calculate_retention_rate(cards, sessions),
        average_interval=sum(c.interval for c in cards) / total if total else 0.0,
    )


def get_upcoming_reviews(
    cards: Sequence[SpacedRepetitionCard],
    days: int = 7,
    now: datetime | None = None,
) -> list[UpcomingReview]:
    """Number of cards scheduled on each of the next ``days`` calendar days, today first."""
    now = _now(now)
    today = now.date()
    scheduled: dict[date, int] = {}
    for card in cards:
        day = _calendar_date(card.next_review_date, now)
        scheduled[day] = scheduled.get(day, 0) + 1

    upcoming = []
    for offset in range(days):
        day = today + timedelta(days=offset)
        upcoming.append(UpcomingReview(date=day, count=scheduled.get(day, 0)))
    return upcoming


def adjust_quality_by_response_time(
    base_quality: float,
    response_time: int,
    average_response_time: int = DEFAULT_AVERAGE_RESPONSE_TIME_MS,
) -> float:
    """Nudge a correct answer's quality by how fast it was given.

    Incorrect answers (below 3) are returned unchanged. An answer in less
    than half the average time gains 0.5 (capped at 5); one taking more than
    twice the average loses 0.5 (never below 3).
    """
    if base_quality < PASSING_QUALITY:
        return base_quality
    if average_response_time <= 0:
        return base_quality

    ratio = response_time / average_response_time
    if ratio < 0.5:
        return min(MAX_QUALITY, base_quality + RESPONSE_TIME_ADJUSTMENT)
    if ratio > 2:
        return max(PASSING_QUALITY, base_quality - RESPONSE_TIME_ADJUSTMENT)
    return base_quality


def analyze_learning_patterns(
    cards: Sequence[SpacedRepetitionCard],
    sessions: Sequence[ReviewSession],
    now: datetime | None = None,
) -> LearningPatterns:
    now = _now(now)

    distribution = DifficultyDistribution(
        easy=sum(1 for c in cards if c.ease_factor > EASY_EASE_THRESHOLD),
        medium=sum(1 for c in cards if HARD_EASE_THRESHOLD <= c.ease_factor <= EASY_EASE_THRESHOLD),
        hard=sum(1 for c in cards if c.ease_factor < HARD_EASE_THRESHOLD),
    )

    # correct answers per hour of day, only hours that saw a session
    by_hour: dict[int, int] = {}
    for session in sessions:
        hour = _in_zone_of(session.timestamp, now).hour
        by_hour[hour] = by_hour.get(hour, 0) + (1 if session.is_correct else 0)

    weekly = []
    for days_ago in range(6, -1, -1):
        day = (now - timedelta(days=days_ago)).date()
        day_sessions = [s for s in sessions if _calendar_date(s.timestamp, now) == day]
        weekly.append(DailyProgress(
            date=day,
            correct=sum(1 for s in day_sessions if s.is_correct),
            total=len(day_sessions),
        ))

    due = len(get_due_cards(cards, now))
    sessions_per_day = len(sessions) / 7
    suggested = max(
        min(due, MAX_SUGGESTED_DAILY_REVIEWS),
        _round_half_up(sessions_per_day * PACE_INCREASE),
    )

    return LearningPatterns(
        difficulty_distribution=distribution,
        time_of_day_performance=by_hour,
        weekly_progress=weekly,
        suggested_daily_reviews=suggested,
    )
