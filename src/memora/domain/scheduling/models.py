"""
Domain models for SM-2 scheduling.

These are pure data structures with no I/O or external dependencies.
All of them are immutable: a review event produces a new value, never an
in-place update.
"""

from dataclasses import dataclass, field
from datetime import datetime

from memora.domain.constants import DEFAULT_EASE, DEFAULT_INTERVAL_DAYS

QualityScore = int  # 0 (blackout) .. 5 (instant recall)


@dataclass(frozen=True)
class SchedulingState:
    """
    SM-2 scheduling state for one card.

    Attributes:
        due: Absolute timestamp of the next scheduled review.
        ease: E-Factor, multiplicative growth rate of the interval (>= 1.3).
        interval_days: Days until the next review, counted from last_reviewed_at.
        repetitions: Consecutive quality >= 3 answers since the last lapse.
        last_reviewed_at: Timestamp of the latest review; None if never reviewed.
    """

    due: datetime
    ease: float = DEFAULT_EASE
    interval_days: int = DEFAULT_INTERVAL_DAYS
    repetitions: int = 0
    last_reviewed_at: datetime | None = None

    @classmethod
    def initial(cls, now: datetime) -> "SchedulingState":
        """State of a card that has never been reviewed."""
        return cls(due=now)


@dataclass(frozen=True)
class ReviewOutcome:
    """
    Raw answer produced by a quiz session.

    Attributes:
        correct: Whether the learner answered correctly.
        response_time_ms: Time from stimulus presentation to answer submission.
        timed_out: No answer was given within the allotted window.
    """

    correct: bool
    response_time_ms: float
    timed_out: bool = False


@dataclass(frozen=True)
class ScheduledCard:
    """A scheduling state tagged with the card it belongs to."""

    card_id: str
    state: SchedulingState


@dataclass(frozen=True)
class QueueEntry:
    """
    One card in a prioritized review queue.

    overdue_days is 0 for cards that are not yet due but flagged as weak.
    """

    card_id: str
    overdue_days: float
    strength: float


@dataclass(frozen=True)
class DeckStats:
    """
    Aggregate health metrics for a set of studied cards.

    new_cards is always 0 when computed from review states alone; callers
    that know the deck's full card list fill it in.
    """

    total_cards: int
    new_cards: int
    due_today: int
    overdue: int
    learning: int  # repetitions < 3
    mature: int  # repetitions >= 3
    average_ease: float
    average_strength: float
    next_review_date: datetime | None


@dataclass(frozen=True)
class ReviewRecord:
    """
    Persisted review bookkeeping for a card.

    Wraps the scheduling state with the counters kept alongside it.
    """

    card_id: str
    deck_id: str
    state: SchedulingState
    seen: int = 0
    correct: int = 0
    avg_response_ms: int = 0
    memory_strength: float | None = None  # Cached for display
    first_studied_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_studied(self) -> bool:
        return self.first_studied_at is not None

    @property
    def accuracy(self) -> float:
        if self.seen == 0:
            return 0.0
        return self.correct / self.seen

    def as_scheduled(self) -> ScheduledCard:
        return ScheduledCard(card_id=self.card_id, state=self.state)


@dataclass(frozen=True)
class ReviewSubmission:
    """One answered card in a batch of review submissions."""

    card_id: str
    deck_id: str
    outcome: ReviewOutcome


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of applying a single submission."""

    card_id: str
    quality: QualityScore
    next_review: datetime
    interval_days: int
    memory_strength: float


@dataclass(frozen=True)
class SessionCard:
    """A review queue entry enriched with the card's answer history."""

    card_id: str
    overdue_days: float
    strength: float
    seen: int
    correct: int
    accuracy: float


@dataclass(frozen=True)
class ReviewSession:
    """
    Cards picked for one study session.

    total_due counts every studied card in the review queue, including the
    ones left out of this session.
    """

    cards: list[SessionCard]
    total_due: int


@dataclass
class DeckOverview:
    """
    Dashboard payload for a deck.

    stats covers studied cards only, with total_cards and new_cards taken
    from the deck's full card list.
    """

    stats: DeckStats
    cards_for_review: list[QueueEntry]
    total_cards: int
    studied_cards: int
    new_cards: int
    heat_map: dict[str, int] = field(default_factory=dict)
