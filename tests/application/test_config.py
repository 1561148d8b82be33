from pathlib import Path

import pytest
from pydantic import ValidationError

from memora.application.config import resolve_config


def write_config(home: Path, body: str) -> Path:
    cfg = home / ".config/memora/config.toml"
    cfg.parent.mkdir(parents=True, exist_ok=True)
    cfg.write_text(body)
    return cfg


def test_defaults(mock_home):
    config = resolve_config()

    assert config.store_path == mock_home / ".config/memora/reviews.yaml"
    assert config.queue_limit == 20
    assert config.session_size == 7
    assert config.heat_map_days == 30


def test_config_file_is_loaded(mock_home):
    write_config(mock_home, 'queue_limit = 9\nstore_path = "~/decks.yaml"\n')

    config = resolve_config()

    assert config.queue_limit == 9
    assert config.store_path == (mock_home / "decks.yaml").resolve()


def test_env_overrides_file(mock_home, monkeypatch):
    write_config(mock_home, "queue_limit = 9\n")
    monkeypatch.setenv("MEMORA_QUEUE_LIMIT", "12")

    assert resolve_config().queue_limit == 12


def test_cli_overrides_env(mock_home, monkeypatch):
    monkeypatch.setenv("MEMORA_QUEUE_LIMIT", "12")

    config = resolve_config({"queue_limit": 3, "session_size": None})

    assert config.queue_limit == 3
    assert config.session_size == 7  # None means "not given"


def test_home_dotfile_location(mock_home):
    (mock_home / ".memora.toml").write_text("session_size = 4\n")

    assert resolve_config().session_size == 4


def test_non_positive_limits_rejected(mock_home):
    with pytest.raises(ValidationError):
        resolve_config({"queue_limit": 0})
