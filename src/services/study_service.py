"""Study service — runs reviews against the card and review-log ports.

The scheduler functions are pure; this module is where a review outcome is
turned into a persisted card state and a logged ReviewSession.
"""

import logging

from domain.model.analytics import LearningPatterns, StudyStatistics, UpcomingReview
from domain.model.errors import NotFoundError, StorageError
from domain.model.review import ReviewSession, SpacedRepetitionCard
from domain.model.vocabulary import VocabularyWord
from port.card_repository import CardRepository
from port.clock import Clock
from port.review_log import ReviewLog
from services import scheduler

logger = logging.getLogger(__name__)


def create_card(
    cards: CardRepository,
    card_id: str,
    word: str,
    translation: str,
    clock: Clock,
) -> SpacedRepetitionCard:
    """Return the card stored under card_id, creating a fresh due-now card if needed."""
    existing = cards.get_by_id(card_id)
    if existing:
        return existing
    card = scheduler.create_new_card(card_id, word, translation, now=clock.now())
    if not cards.save(card):
        logger.error("Failed to persist new card", extra={"card_id": card_id})
        raise StorageError(f"Failed to save card {card_id}")
    logger.debug("Created card", extra={"card_id": card_id, "word": word})
    return card


def create_card_for_word(
    cards: CardRepository,
    word: VocabularyWord,
    clock: Clock,
) -> SpacedRepetitionCard:
    """Card keyed by the word id."""
    return create_card(cards, word.id, word.word, word.translation, clock)


def record_review(
    cards: CardRepository,
    review_log: ReviewLog,
    card_id: str,
    quality: float,
    clock: Clock,
    response_time: int = 0,
    adjust_for_response_time: bool = False,
    average_response_time: int = scheduler.DEFAULT_AVERAGE_RESPONSE_TIME_MS,
) -> SpacedRepetitionCard:
    """Apply a review to a stored card, persist it and log the session.

    Raises:
        NotFoundError: No card with this id.
        ValidationError: quality is outside [0, 5].
        StorageError: The card or the session could not be persisted.
    """
    card = cards.get_by_id(card_id)
    if card is None:
        raise NotFoundError(f"Card {card_id} not found")

    if adjust_for_response_time:
        quality = scheduler.adjust_quality_by_response_time(quality, response_time, average_response_time)

    now = clock.now()
    updated = scheduler.update_card_after_review(card, quality, response_time, now=now)
    if not cards.save(updated):
        logger.error("Failed to persist reviewed card", extra={"card_id": card_id})
        raise StorageError(f"Failed to save card {card_id}")
    session = ReviewSession(card_id=card_id, quality=quality, response_time=response_time, timestamp=now)
    if not review_log.append(session):
        logger.error("Failed to log review session", extra={"card_id": card_id})
        raise StorageError(f"Failed to log review of card {card_id}")

    logger.info("Card reviewed", extra={
        "card_id": card_id,
        "quality": quality,
        "interval": updated.interval,
        "repetition": updated.repetition,
        "ease_factor": round(updated.ease_factor, 4),
    })
    return updated


def get_due_queue(cards: CardRepository, clock: Clock, limit: int | None = None) -> list[SpacedRepetitionCard]:
    """Due cards in study order (hardest first)."""
    now = clock.now()
    queue = scheduler.sort_cards_by_priority(scheduler.get_due_cards(cards.list_all(), now), now)
    return queue[:limit] if limit is not None else queue


def get_overview(cards: CardRepository, review_log: ReviewLog, clock: Clock) -> StudyStatistics:
    return scheduler.get_study_statistics(cards.list_all(), review_log.list_all(), now=clock.now())


def get_forecast(cards: CardRepository, clock: Clock, days: int = 7) -> list[UpcomingReview]:
    return scheduler.get_upcoming_reviews(cards.list_all(), days, now=clock.now())


def get_learning_patterns(cards: CardRepository, review_log: ReviewLog, clock: Clock) -> LearningPatterns:
    return scheduler.analyze_learning_patterns(cards.list_all(), review_log.list_all(), now=clock.now())
