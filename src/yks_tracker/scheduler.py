"""Review interval policy for flashcards."""
from yks_tracker.errors import ValidationError

INTERVAL_MULTIPLIERS = {"easy": 3, "medium": 2}


def review_interval(difficulty: str, review_count: int) -> int:
    """Days until the next review.

    Args:
        difficulty: Outcome of the review just made: easy, medium or hard.
        review_count: Number of reviews including this one.

    Returns:
        easy grows 3, 6, 9... days, medium 2, 4, 6... days, hard is always 1.
    """
    if difficulty == "hard":
        return 1
    if difficulty not in INTERVAL_MULTIPLIERS:
        raise ValidationError(f"Unknown review difficulty {difficulty!r}")
    return max(1, review_count * INTERVAL_MULTIPLIERS[difficulty])
