"""
Memory strength model and review prioritization.

Derives a continuous recall estimate from the discrete SM-2 state, then uses
it to build review queues and deck-level statistics.

This is a pure computation module with no I/O.
"""

import math
from datetime import datetime

from memora.domain.constants import (
    DEFAULT_EASE,
    DEFAULT_QUEUE_LIMIT,
    DUE_STRENGTH,
    MATURE_REPETITIONS,
    SECONDS_PER_DAY,
    WEAK_STRENGTH_THRESHOLD,
)
from memora.domain.scheduling.models import (
    DeckStats,
    QueueEntry,
    ScheduledCard,
    SchedulingState,
)


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def calculate_memory_strength(state: SchedulingState, now: datetime) -> float:
    """
    Estimate the probability (0-1) that the card is recalled right now.

    The interval is treated as the half-life of retention: strength is 1.0
    right after a review and 0.5 at the due instant. Past the due date it
    keeps decaying from 0.5 toward 0 at a rate set by the interval.
    """
    if state.last_reviewed_at is None:
        return 0.0

    days_since_review = _days_between(state.last_reviewed_at, now)
    days_until_due = _days_between(now, state.due)

    if days_until_due < 0:
        overdue_days = -days_until_due
        strength = math.exp(-overdue_days / state.interval_days) * DUE_STRENGTH
    else:
        progress = days_since_review / state.interval_days
        strength = math.exp(-progress * math.log(2))

    return max(0.0, min(1.0, strength))


def _priority(overdue_days: float, strength: float) -> tuple[int, float]:
    if overdue_days >= 0:
        # Due cards: most overdue first
        return (0, -overdue_days)
    # Not yet due but weak: weakest first
    return (1, strength)


def get_cards_for_review(
    cards: list[ScheduledCard],
    now: datetime,
    limit: int = DEFAULT_QUEUE_LIMIT,
) -> list[QueueEntry]:
    """
    Build a priority-ordered review queue.

    A card qualifies if it is due (overdue_days >= 0) or if its modeled
    strength has dropped below 0.8. Due cards always come before weak ones.

    Args:
        cards: Scheduling states tagged with card IDs.
        now: Reference time.
        limit: Maximum queue length (default: 20)

    Returns:
        QueueEntry list, highest priority first.
    """
    scored: list[tuple[str, float, float]] = []
    for card in cards:
        overdue_days = _days_between(card.state.due, now)
        strength = calculate_memory_strength(card.state, now)
        if overdue_days >= 0 or strength < WEAK_STRENGTH_THRESHOLD:
            scored.append((card.card_id, overdue_days, strength))

    scored.sort(key=lambda item: _priority(item[1], item[2]))

    return [
        QueueEntry(card_id=card_id, overdue_days=max(0.0, overdue_days), strength=strength)
        for card_id, overdue_days, strength in scored[:limit]
    ]


def calculate_deck_stats(cards: list[ScheduledCard], now: datetime) -> DeckStats:
    """
    Aggregate deck health over cards that have review history.

    "Today" ends at the last instant of now's calendar day, in now's timezone.
    new_cards is always 0: this function never sees unstudied cards.
    """
    today_end = now.replace(hour=23, minute=59, second=59, microsecond=999999)

    due_today = 0
    overdue = 0
    learning = 0
    mature = 0
    total_ease = 0.0
    total_strength = 0.0
    next_review_date: datetime | None = None

    for card in cards:
        state = card.state

        if state.due <= now:
            overdue += 1
        elif state.due <= today_end:
            due_today += 1

        if state.repetitions < MATURE_REPETITIONS:
            learning += 1
        else:
            mature += 1

        total_ease += state.ease
        total_strength += calculate_memory_strength(state, now)

        if next_review_date is None or state.due < next_review_date:
            next_review_date = state.due

    count = len(cards)
    return DeckStats(
        total_cards=count,
        new_cards=0,
        due_today=due_today,
        overdue=overdue,
        learning=learning,
        mature=mature,
        average_ease=total_ease / count if count else DEFAULT_EASE,
        average_strength=total_strength / count if count else 0.0,
        next_review_date=next_review_date,
    )
