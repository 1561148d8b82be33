from datetime import datetime, timedelta, timezone

import pytest

from memora.domain.scheduling.models import ScheduledCard, SchedulingState
from memora.infrastructure.adapters.store import InMemoryReviewRepository


@pytest.fixture
def now():
    """A fixed reference time, mid-day UTC."""
    return datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def memory_repo():
    return InMemoryReviewRepository()


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/store files
    monkeypatch.setenv("HOME", str(home))
    for var in ("MEMORA_STORE_PATH", "MEMORA_QUEUE_LIMIT", "MEMORA_SESSION_SIZE"):
        monkeypatch.delenv(var, raising=False)
    return home


def _reviewed(
    card_id: str,
    now: datetime,
    *,
    last_days_ago: float,
    interval_days: int,
    due_in_days: float | None = None,
    repetitions: int = 1,
    ease: float = 2.5,
) -> ScheduledCard:
    """Build a reviewed card relative to ``now``.

    due defaults to last review + interval.
    """
    last = now - timedelta(days=last_days_ago)
    due = now + timedelta(days=due_in_days) if due_in_days is not None else last + timedelta(
        days=interval_days
    )
    return ScheduledCard(
        card_id=card_id,
        state=SchedulingState(
            due=due,
            ease=ease,
            interval_days=interval_days,
            repetitions=repetitions,
            last_reviewed_at=last,
        ),
    )


@pytest.fixture
def make_card(now):
    """Factory for reviewed cards positioned relative to the ``now`` fixture."""

    def factory(card_id: str, **kwargs) -> ScheduledCard:
        return _reviewed(card_id, now, **kwargs)

    return factory
