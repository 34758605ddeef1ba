"""Seed the store with sample goals and flashcards."""
import json
import logging
from pathlib import Path

CONTENT_DIR = Path(__file__).parent / "content"

logger = logging.getLogger(__name__)


def load_content(name: str) -> dict:
    return json.loads((CONTENT_DIR / name).read_text(encoding="utf-8"))


def seed_sample_goals(store) -> list:
    """Insert the sample net and ranking goals from goals.json."""
    data = load_content("goals.json")
    goals = [store.create_goal(**goal) for goal in data["goals"]]
    logger.info("Seeded %d sample goals", len(goals))
    return goals


def seed_sample_flashcards(store) -> list:
    """Insert the sample flashcard set from flashcards.json. All cards start due."""
    data = load_content("flashcards.json")
    cards = [store.create_flashcard(**card) for card in data["flashcards"]]
    logger.info("Seeded %d sample flashcards", len(cards))
    return cards


def is_seeded(store) -> bool:
    """Check whether the store already holds goals or flashcards."""
    return len(store.goals) > 0 or len(store.flashcards) > 0


def seed_all(store) -> None:
    """Run all seed functions once."""
    if is_seeded(store):
        return
    seed_sample_goals(store)
    seed_sample_flashcards(store)
