"""
Quality classifier: maps a raw answer to the SM-2 0-5 quality scale.

Response speed stands in for confidence. This is a pure computation module
with no I/O.
"""

from memora.domain.constants import INSTANT_RECALL_MS, QUICK_RECALL_MS
from memora.domain.scheduling.models import QualityScore, ReviewOutcome


def classify_quality(
    correct: bool,
    response_time_ms: float,
    timed_out: bool = False,
) -> QualityScore:
    """
    Compute the quality score for one answered card.

    Args:
        correct: Whether the answer was correct.
        response_time_ms: Response time in milliseconds.
        timed_out: Whether the question timed out.

    Returns:
        0 - Timed out (complete blackout), regardless of correctness
        2 - Incorrect but attempted
        3 - Correct, slow recall (4s or more)
        4 - Correct, quick recall (2s to 4s)
        5 - Correct, instant recall (under 2s)
    """
    if timed_out:
        return 0
    if not correct:
        return 2

    if response_time_ms < INSTANT_RECALL_MS:
        return 5
    if response_time_ms < QUICK_RECALL_MS:
        return 4
    return 3


def classify_outcome(outcome: ReviewOutcome) -> QualityScore:
    return classify_quality(outcome.correct, outcome.response_time_ms, outcome.timed_out)
