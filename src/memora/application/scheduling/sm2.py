"""SM-2 (SuperMemo 2) transition function.

Applies one review event to a scheduling state and returns the next state.
The caller supplies ``now``; nothing here reads the system clock.
"""

import math
from dataclasses import replace
from datetime import datetime, timedelta

from memora.domain.constants import (
    FIRST_INTERVAL_DAYS,
    MAX_QUALITY,
    MIN_EASE,
    PASSING_QUALITY,
    SECOND_INTERVAL_DAYS,
)
from memora.domain.scheduling.models import QualityScore, SchedulingState


def next_ease(ease: float, quality: QualityScore) -> float:
    """
    Standard SM-2 E-Factor update, floored at 1.3.

    Quality 5 raises ease by 0.1, quality 4 leaves it unchanged, quality 3
    lowers it by 0.14 and failed answers lower it sharply.
    """
    penalty = MAX_QUALITY - quality
    return max(MIN_EASE, ease + 0.1 - penalty * (0.08 + penalty * 0.02))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_next_review(
    state: SchedulingState,
    quality: QualityScore,
    now: datetime,
) -> SchedulingState:
    """
    Calculate the next scheduling state after a review.

    Args:
        state: Scheduling state before the review.
        quality: Quality of recall (0-5)
            0 - Complete blackout (timed out)
            2 - Incorrect response
            3 - Correct response with serious difficulty
            4 - Correct response after hesitation
            5 - Perfect response
        now: Time of the review.

    Returns:
        A new SchedulingState; the input is left untouched.
    """
    ease = next_ease(state.ease, quality)

    if quality < PASSING_QUALITY:
        # Lapse: relearn from tomorrow
        repetitions = 0
        interval_days = FIRST_INTERVAL_DAYS
    else:
        repetitions = state.repetitions + 1
        if repetitions == 1:
            interval_days = FIRST_INTERVAL_DAYS
        elif repetitions == 2:
            interval_days = SECOND_INTERVAL_DAYS
        else:
            interval_days = round_half_up(state.interval_days * ease)

    return replace(
        state,
        ease=ease,
        interval_days=interval_days,
        repetitions=repetitions,
        due=now + timedelta(days=interval_days),
        last_reviewed_at=now,
    )
