# Application Scheduling Package
from .quality import classify_outcome, classify_quality
from .service import ReviewService
from .sm2 import calculate_next_review
from .strength import calculate_deck_stats, calculate_memory_strength, get_cards_for_review

__all__ = [
    "classify_quality",
    "classify_outcome",
    "calculate_next_review",
    "calculate_memory_strength",
    "get_cards_for_review",
    "calculate_deck_stats",
    "ReviewService",
]
