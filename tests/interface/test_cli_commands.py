"""Tests for CLI commands: help, review, study, queue, session, stats and config."""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from memora.interface.cli import app

runner = CliRunner()


@pytest.fixture
def store(tmp_path):
    return tmp_path / "reviews.yaml"


def invoke(store, *args):
    return runner.invoke(app, ["--store", str(store), *args])


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "SM-2 spaced repetition scheduler" in result.stdout
    assert "review" in result.stdout
    assert "queue" in result.stdout
    assert "stats" in result.stdout


# --- Review ---


def test_review_records_answer(store):
    result = invoke(store, "review", "c1", "--deck", "d1", "--time-ms", "1500")

    assert result.exit_code == 0, result.output
    assert "c1: quality 5" in result.stdout
    assert "next review in 1d" in result.stdout
    assert store.exists()


def test_review_json_output(store):
    result = invoke(
        store, "review", "c1", "-d", "d1", "--incorrect", "--time-ms", "900", "--json"
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["card_id"] == "c1"
    assert data["quality"] == 2
    assert data["interval_days"] == 1


def test_review_timeout(store):
    result = invoke(store, "review", "c1", "-d", "d1", "--timed-out", "--json")

    assert json.loads(result.stdout)["quality"] == 0


def test_review_requires_deck(store):
    result = invoke(store, "review", "c1")
    assert result.exit_code != 0


# --- Study / queue / session ---


def test_studied_cards_enter_queue(store):
    result = invoke(store, "study", "d1", "a", "b")
    assert result.exit_code == 0, result.output
    assert "Marked 2 card(s)" in result.stdout

    queue = invoke(store, "queue", "d1", "--json")
    assert queue.exit_code == 0, queue.output
    assert sorted(e["card_id"] for e in json.loads(queue.stdout)) == ["a", "b"]

    limited = invoke(store, "queue", "d1", "--limit", "1", "--json")
    assert len(json.loads(limited.stdout)) == 1


def test_freshly_reviewed_card_not_queued(store):
    invoke(store, "review", "c1", "-d", "d1", "--time-ms", "1000")

    result = invoke(store, "queue", "d1")

    assert result.exit_code == 0
    assert "No cards need review." in result.stdout


def test_session_lists_studied_cards(store):
    invoke(store, "study", "d1", "a")

    result = invoke(store, "session", "d1", "--json")

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [c["card_id"] for c in data["cards"]] == ["a"]
    assert data["cards"][0]["seen"] == 0
    assert data["total_due"] == 1


def test_session_reports_cards_left_out(store):
    invoke(store, "study", "d1", "a", "b", "c")

    result = invoke(store, "session", "d1", "--size", "2")

    assert result.exit_code == 0, result.output
    assert "Showing 2 of 3 due card(s):" in result.stdout


# --- Stats ---


def test_stats_json(store):
    invoke(store, "add-cards", "d1", "a", "b", "c")
    invoke(store, "review", "a", "-d", "d1", "--time-ms", "1000")

    result = invoke(store, "stats", "d1", "--json")

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["total_cards"] == 3
    assert data["studied_cards"] == 1
    assert data["new_cards"] == 2
    assert data["stats"]["learning"] == 1
    assert data["stats"]["new_cards"] == 2
    assert len(data["heat_map"]) == 1


def test_stats_text(store):
    invoke(store, "review", "a", "-d", "d1", "--time-ms", "1000")

    result = invoke(store, "stats", "d1")

    assert result.exit_code == 0, result.output
    assert "Cards: 1  Studied: 1  New: 0" in result.stdout
    assert "Learning: 1  Mature: 0" in result.stdout
    assert "Next review:" in result.stdout


def test_corrupt_store_reports_error(store):
    store.write_text("records: [unclosed")

    result = invoke(store, "stats", "d1")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_hand_edited_store_without_offsets(store):
    store.write_text(
        "decks:\n"
        "  d1: [c1]\n"
        "records:\n"
        "  c1:\n"
        "    deck_id: d1\n"
        "    due: 2026-03-12 08:00:00\n"
        "    last_reviewed_at: 2026-03-11 08:00:00\n"
        "    first_studied_at: 2026-03-10 08:00:00\n"
        "    repetitions: 1\n"
    )

    result = invoke(store, "stats", "d1", "--json")

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["studied_cards"] == 1


# --- Config ---


def test_config_show_command(mock_home):
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["queue_limit"] == 20
    assert data["store_path"] == str(mock_home / ".config/memora/reviews.yaml")


def test_config_show_honours_global_options(mock_home, store):
    result = runner.invoke(app, ["--store", str(store), "-vv", "config", "show"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["store_path"] == str(store.resolve())
    assert data["verbose"] == 2


@patch("memora.interface.cli.resolve_config")
def test_config_show_uses_resolved_config(mock_resolve_config):
    mock_config = MagicMock()
    mock_config.model_dump.return_value = {"queue_limit": 5, "verbose": 1}
    mock_config.verbose = 1
    mock_resolve_config.return_value = mock_config

    result = runner.invoke(app, ["config", "show"])

    assert json.loads(result.stdout) == {"queue_limit": 5, "verbose": 1}
