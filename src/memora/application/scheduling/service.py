"""
Review Service — Application layer orchestrator.

Coordinates loading review records from the repository, running them through
the scheduling core and storing the results.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from memora.domain.constants import (
    DEFAULT_HEAT_MAP_DAYS,
    DEFAULT_QUEUE_LIMIT,
    DEFAULT_SESSION_SIZE,
)
from memora.domain.errors import InvalidSubmissionError
from memora.domain.scheduling.models import (
    DeckOverview,
    ReviewRecord,
    ReviewResult,
    ReviewSession,
    ReviewSubmission,
    SchedulingState,
    SessionCard,
)
from memora.domain.scheduling.ports import ReviewRepository

from .quality import classify_outcome
from .sm2 import calculate_next_review, round_half_up
from .strength import calculate_deck_stats, calculate_memory_strength, get_cards_for_review

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate(submission: ReviewSubmission) -> None:
    if not submission.card_id or not submission.card_id.strip():
        raise InvalidSubmissionError("Submission is missing a card id")
    if not submission.deck_id or not submission.deck_id.strip():
        raise InvalidSubmissionError(f"Submission for card {submission.card_id} has no deck id")


class ReviewService:
    """
    Application service for recording reviews and building deck views.

    Follows Dependency Inversion: depends on the ReviewRepository abstraction,
    not concrete adapter implementations. The clock is injected so every
    method is deterministic under test.
    """

    def __init__(
        self,
        repo: ReviewRepository,
        now_fn: Callable[[], datetime] | None = None,
    ):
        """
        Args:
            repo: The repository (port) for review records.
            now_fn: Clock used when a method is called without ``now``.
        """
        self._repo = repo
        self._now = now_fn or _utcnow

    async def submit_reviews(
        self,
        submissions: list[ReviewSubmission],
        now: datetime | None = None,
    ) -> list[ReviewResult]:
        """
        Apply a batch of answered cards.

        Invalid submissions are logged and skipped; the rest are applied in
        order, so two submissions for the same card build on each other.

        Returns:
            One ReviewResult per applied submission.
        """
        now = now or self._now()
        results: list[ReviewResult] = []

        for submission in submissions:
            try:
                _validate(submission)
            except InvalidSubmissionError as e:
                logger.warning(f"Skipping review submission: {e}")
                continue

            results.append(await self._apply(submission, now))

        logger.info(f"Applied {len(results)}/{len(submissions)} review submissions")
        return results

    async def _apply(self, submission: ReviewSubmission, now: datetime) -> ReviewResult:
        record = await self._repo.get_record(submission.card_id)
        if record is None:
            record = ReviewRecord(
                card_id=submission.card_id,
                deck_id=submission.deck_id,
                state=SchedulingState.initial(now),
                first_studied_at=now,
                created_at=now,
            )
        elif not record.deck_id:
            record = replace(record, deck_id=submission.deck_id)

        outcome = submission.outcome
        seen = record.seen + 1
        correct = record.correct + (1 if outcome.correct else 0)
        avg_response_ms = round_half_up(
            (record.avg_response_ms * (seen - 1) + outcome.response_time_ms) / seen
        )

        quality = classify_outcome(outcome)
        next_state = calculate_next_review(record.state, quality, now)
        strength = calculate_memory_strength(next_state, now)

        updated = replace(
            record,
            state=next_state,
            seen=seen,
            correct=correct,
            avg_response_ms=avg_response_ms,
            memory_strength=strength,
            first_studied_at=record.first_studied_at or now,
        )
        await self._repo.save_record(updated)

        logger.debug(
            f"Card {updated.card_id}: quality={quality} "
            f"interval={next_state.interval_days}d reps={next_state.repetitions}"
        )

        return ReviewResult(
            card_id=updated.card_id,
            quality=quality,
            next_review=next_state.due,
            interval_days=next_state.interval_days,
            memory_strength=strength,
        )

    async def mark_studied(
        self,
        deck_id: str,
        card_ids: list[str],
        now: datetime | None = None,
    ) -> int:
        """
        Mark cards as studied, creating default records where missing.

        Existing scheduling state is kept; only first_studied_at is set.

        Returns:
            Number of cards marked.
        """
        now = now or self._now()

        for card_id in card_ids:
            record = await self._repo.get_record(card_id)
            if record is None:
                record = ReviewRecord(
                    card_id=card_id,
                    deck_id=deck_id,
                    state=SchedulingState.initial(now),
                    created_at=now,
                )
            await self._repo.save_record(replace(record, first_studied_at=now))

        logger.info(f"Marked {len(card_ids)} cards studied in deck {deck_id}")
        return len(card_ids)

    async def get_deck_overview(
        self,
        deck_id: str,
        now: datetime | None = None,
        limit: int = DEFAULT_QUEUE_LIMIT,
        heat_map_days: int = DEFAULT_HEAT_MAP_DAYS,
    ) -> DeckOverview:
        """
        Build the deck dashboard: stats, review queue and activity heat map.

        Args:
            deck_id: Deck to summarize.
            now: Reference time; defaults to the injected clock.
            limit: Maximum review queue length.
            heat_map_days: How many days of review activity to include.
        """
        now = now or self._now()

        card_ids = await self._repo.get_deck_card_ids(deck_id)
        records = await self._repo.get_deck_records(deck_id)

        reviewed_ids = {r.card_id for r in records}
        unreviewed = [cid for cid in card_ids if cid not in reviewed_ids]
        studied = [r for r in records if r.is_studied]
        new_cards = len(unreviewed) + (len(records) - len(studied))

        scheduled = [r.as_scheduled() for r in studied]
        stats = calculate_deck_stats(scheduled, now)
        stats = replace(stats, new_cards=new_cards, total_cards=len(card_ids))

        return DeckOverview(
            stats=stats,
            cards_for_review=get_cards_for_review(scheduled, now, limit),
            total_cards=len(card_ids),
            studied_cards=len(studied),
            new_cards=new_cards,
            heat_map=self._heat_map(studied, now, heat_map_days),
        )

    @staticmethod
    def _heat_map(records: list[ReviewRecord], now: datetime, days: int) -> dict[str, int]:
        """
        Count studied cards by the calendar date of their latest review.
        """
        since = now - timedelta(days=days)
        heat_map: dict[str, int] = {}

        for record in records:
            reviewed_at = record.state.last_reviewed_at
            if reviewed_at is not None and reviewed_at > since:
                key = reviewed_at.date().isoformat()
                heat_map[key] = heat_map.get(key, 0) + 1

        return heat_map

    async def get_review_session(
        self,
        deck_id: str,
        now: datetime | None = None,
        size: int = DEFAULT_SESSION_SIZE,
    ) -> ReviewSession:
        """
        Pick the cards for the next study session of a deck.

        Only studied cards are eligible. The session is capped at ``size``
        cards, most overdue first, then weakest first; ``total_due`` is the
        length of the uncapped queue.
        """
        now = now or self._now()

        records = {r.card_id: r for r in await self._repo.get_deck_records(deck_id) if r.is_studied}
        # Uncapped: every eligible card counts toward total_due
        queue = get_cards_for_review(
            [r.as_scheduled() for r in records.values()], now, limit=len(records)
        )

        session = [
            SessionCard(
                card_id=entry.card_id,
                overdue_days=entry.overdue_days,
                strength=entry.strength,
                seen=records[entry.card_id].seen,
                correct=records[entry.card_id].correct,
                accuracy=records[entry.card_id].accuracy,
            )
            for entry in queue
        ]
        session.sort(key=lambda c: (-c.overdue_days, c.strength))

        return ReviewSession(cards=session[:size], total_due=len(session))
