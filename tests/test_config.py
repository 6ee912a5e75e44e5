"""
Tests for settings loading and logging setup.
"""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from core import config
from core.config import Settings, load_config_yaml
from core.logging import setup_logging


def test_defaults():
    defaults = Settings()

    assert defaults.NATIVE_INTERVAL_MS == 60_000
    assert defaults.FORECAST_HORIZON == 5
    assert defaults.SIGNAL_THRESHOLD == 0.5
    assert defaults.INITIAL_CAPITAL == 100_000.0
    assert defaults.SIMPLE_BUY_THRESHOLD == 0.5
    assert defaults.SIMPLE_SELL_THRESHOLD == 0.1
    assert defaults.TREND_MAX_SYMBOLS == 100


def test_env_override(monkeypatch):
    monkeypatch.setenv("SIGNAL_THRESHOLD", "0.8")
    assert Settings().SIGNAL_THRESHOLD == 0.8


def test_yaml_loading(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("FORECAST_HORIZON: 10\nEMA_ALPHA: 0.5\n", encoding="utf-8")

    values = load_config_yaml(str(path))
    assert values == {"FORECAST_HORIZON": 10, "EMA_ALPHA": 0.5}
    assert Settings(**values).FORECAST_HORIZON == 10


def test_missing_or_empty_yaml(tmp_path):
    assert load_config_yaml(str(tmp_path / "absent.yaml")) == {}

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_config_yaml(str(empty)) == {}


def test_invalid_alpha_rejected():
    with pytest.raises(ValueError):
        Settings(EMA_ALPHA=0)


def test_setup_logging_is_idempotent(tmp_path, monkeypatch):
    log_file = tmp_path / "logs" / "app.log"
    monkeypatch.setattr(config.settings, "LOG_FILE", str(log_file))

    root = logging.getLogger()
    before = list(root.handlers)
    try:
        setup_logging()
        setup_logging()
        file_handlers = [
            h for h in root.handlers
            if isinstance(h, RotatingFileHandler) and h.baseFilename == str(log_file.resolve())
        ]
        assert len(file_handlers) == 1
        assert log_file.parent.is_dir()
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()


def test_setup_logging_arguments_override_settings(tmp_path):
    log_file = tmp_path / "custom.log"

    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        setup_logging(level="debug", log_file=str(log_file))
        assert root.level == logging.DEBUG
        assert any(getattr(h, "baseFilename", None) == str(log_file.resolve()) for h in root.handlers)
    finally:
        root.setLevel(level)
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
