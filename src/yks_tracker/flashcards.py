"""Flashcard review queue and scheduling."""
import dataclasses
import logging
from datetime import datetime, timedelta
from typing import Optional

from yks_tracker.models import Flashcard, FlashcardError
from yks_tracker.scheduler import review_interval

logger = logging.getLogger(__name__)


def _queue_order(card: Flashcard):
    # Unseen cards first, then the longest overdue.
    return (card.last_reviewed is not None, card.next_review or datetime.min)


def _due(cards: list, now: datetime, limit: Optional[int]) -> list:
    due = [c for c in cards if c.next_review is None or c.next_review <= now]
    due.sort(key=_queue_order)
    return due[:limit] if limit is not None else due


def get_due_cards(store, now: Optional[datetime] = None, limit: Optional[int] = None) -> list:
    now = now or store.clock()
    return _due(store.get_flashcards(), now, limit)


def get_due_cards_for_subject(store, subject: str, now: Optional[datetime] = None,
                              limit: Optional[int] = None) -> list:
    now = now or store.clock()
    cards = [c for c in store.get_flashcards() if c.subject == subject]
    return _due(cards, now, limit)


def review_card(store, card_id: str, difficulty: str,
                now: Optional[datetime] = None) -> Optional[Flashcard]:
    """Record a review and schedule the next one. Returns None for an unknown card.

    The card's difficulty is replaced by the outcome of this review.
    """
    card = store.get_flashcard(card_id)
    if card is None:
        return None
    now = now or store.clock()
    review_count = card.review_count + 1
    days = review_interval(difficulty, review_count)
    updated = dataclasses.replace(
        card,
        difficulty=difficulty,
        last_reviewed=now,
        next_review=now + timedelta(days=days),
        review_count=review_count,
    )
    store.save_flashcard(updated)
    logger.debug("Reviewed card %s as %s, next in %d days", card_id, difficulty, days)
    return updated


def record_wrong_answer(store, card: Flashcard, user_answer: str,
                        now: Optional[datetime] = None) -> FlashcardError:
    error = FlashcardError(
        card_id=card.id,
        question=card.question,
        topic=card.topic or "",
        difficulty=card.difficulty,
        user_answer=user_answer,
        correct_answer=card.answer,
        timestamp=now or store.clock(),
    )
    store.add_flashcard_error(error)
    return error


def check_answer(card: Flashcard, user_answer: str) -> bool:
    return user_answer.strip().casefold() == card.answer.strip().casefold()
