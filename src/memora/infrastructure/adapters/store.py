"""
Review Stores — Infrastructure adapters for review record persistence.

Implements ReviewRepository in memory and on top of a single YAML file.
"""

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from memora.domain.errors import ReviewStoreError
from memora.domain.scheduling.models import ReviewRecord, SchedulingState
from memora.domain.scheduling.ports import ReviewRepository

logger = logging.getLogger(__name__)


class InMemoryReviewRepository(ReviewRepository):
    """
    Keeps records in process memory. Used by tests and one-shot tooling.
    """

    def __init__(self):
        self.records: dict[str, ReviewRecord] = {}
        self.decks: dict[str, list[str]] = {}

    async def get_record(self, card_id: str) -> ReviewRecord | None:
        return self.records.get(card_id)

    async def get_deck_records(self, deck_id: str) -> list[ReviewRecord]:
        return [r for r in self.records.values() if r.deck_id == deck_id]

    async def save_record(self, record: ReviewRecord) -> None:
        self.records[record.card_id] = record

    async def get_deck_card_ids(self, deck_id: str) -> list[str]:
        return list(self.decks.get(deck_id, []))

    async def add_deck_cards(self, deck_id: str, card_ids: list[str]) -> None:
        deck = self.decks.setdefault(deck_id, [])
        for card_id in card_ids:
            if card_id not in deck:
                deck.append(card_id)


# ---------------------------------------------------------------------------
# YAML serialization
# ---------------------------------------------------------------------------


def _dump_dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_dt(value: Any) -> datetime | None:
    # Hand-edited files may hold unquoted timestamps, which YAML parses itself
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value))
    # Timestamps without an offset are taken as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def record_to_dict(record: ReviewRecord) -> dict[str, Any]:
    state = record.state
    return {
        "deck_id": record.deck_id,
        "ease": state.ease,
        "interval_days": state.interval_days,
        "repetitions": state.repetitions,
        "due": _dump_dt(state.due),
        "last_reviewed_at": _dump_dt(state.last_reviewed_at),
        "seen": record.seen,
        "correct": record.correct,
        "avg_response_ms": record.avg_response_ms,
        "memory_strength": record.memory_strength,
        "first_studied_at": _dump_dt(record.first_studied_at),
        "created_at": _dump_dt(record.created_at),
    }


def record_from_dict(card_id: str, data: dict[str, Any]) -> ReviewRecord:
    state = SchedulingState(
        due=_load_dt(data["due"]),
        ease=float(data.get("ease", 2.5)),
        interval_days=int(data.get("interval_days", 1)),
        repetitions=int(data.get("repetitions", 0)),
        last_reviewed_at=_load_dt(data.get("last_reviewed_at")),
    )
    return ReviewRecord(
        card_id=card_id,
        deck_id=str(data.get("deck_id", "")),
        state=state,
        seen=int(data.get("seen", 0)),
        correct=int(data.get("correct", 0)),
        avg_response_ms=int(data.get("avg_response_ms", 0)),
        memory_strength=data.get("memory_strength"),
        first_studied_at=_load_dt(data.get("first_studied_at")),
        created_at=_load_dt(data.get("created_at")),
    )


class YamlReviewRepository(ReviewRepository):
    """
    Persists decks and review records in one YAML document.

    Layout:
        decks:   {deck_id: [card_id, ...]}
        records: {card_id: {deck_id, ease, interval_days, ...}}

    The file is re-read on every call and replaced atomically on every write.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"decks": {}, "records": {}}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ReviewStoreError(f"Could not read review store {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise ReviewStoreError(f"Review store {self.path} is not a mapping")

        data.setdefault("decks", {})
        data.setdefault("records", {})
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=True, allow_unicode=True)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise ReviewStoreError(f"Could not write review store {self.path}: {e}") from e

    def _parse(self, card_id: str, raw: Any) -> ReviewRecord:
        try:
            return record_from_dict(card_id, raw)
        except (KeyError, TypeError, ValueError) as e:
            raise ReviewStoreError(f"Malformed record for card {card_id}: {e}") from e

    async def get_record(self, card_id: str) -> ReviewRecord | None:
        raw = self._load()["records"].get(card_id)
        if raw is None:
            return None
        return self._parse(card_id, raw)

    async def get_deck_records(self, deck_id: str) -> list[ReviewRecord]:
        records = self._load()["records"]
        return [
            self._parse(card_id, raw)
            for card_id, raw in records.items()
            if str(raw.get("deck_id", "")) == deck_id
        ]

    async def save_record(self, record: ReviewRecord) -> None:
        data = self._load()
        data["records"][record.card_id] = record_to_dict(record)
        self._write(data)
        logger.debug(f"Saved review record for card {record.card_id}")

    async def get_deck_card_ids(self, deck_id: str) -> list[str]:
        return [str(cid) for cid in self._load()["decks"].get(deck_id, [])]

    async def add_deck_cards(self, deck_id: str, card_ids: list[str]) -> None:
        data = self._load()
        deck = data["decks"].setdefault(deck_id, [])
        added = [cid for cid in dict.fromkeys(card_ids) if cid not in deck]
        if not added:
            return
        deck.extend(added)
        self._write(data)
        logger.info(f"Added {len(added)} cards to deck {deck_id}")
