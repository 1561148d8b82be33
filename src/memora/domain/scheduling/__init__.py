# Domain Scheduling Package
from .models import (
    DeckOverview,
    DeckStats,
    QualityScore,
    QueueEntry,
    ReviewOutcome,
    ReviewRecord,
    ReviewResult,
    ReviewSession,
    ReviewSubmission,
    ScheduledCard,
    SchedulingState,
    SessionCard,
)
from .ports import ReviewRepository

__all__ = [
    "SchedulingState",
    "ReviewOutcome",
    "QualityScore",
    "ScheduledCard",
    "QueueEntry",
    "DeckStats",
    "ReviewRecord",
    "ReviewSubmission",
    "ReviewResult",
    "SessionCard",
    "ReviewSession",
    "DeckOverview",
    "ReviewRepository",
]
