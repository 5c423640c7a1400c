"""
Pytest configuration and shared fixtures for modconfig tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from modconfig.engine import ConfigEngine, get_global_engine, set_global_engine
from modconfig.logging import get_global_logger, set_global_logger


class RecordingLogger:
    """Logger that keeps every message for assertions."""

    def __init__(self) -> None:
        self.warnings: list[tuple[str, str]] = []
        self.messages: list[tuple[str, str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.messages.append(("step", f"{step}/{total}", message))

    def warning(self, prefix: str, message: str) -> None:
        self.warnings.append((prefix, message))

    def verbose(self, prefix: str, message: str) -> None:
        self.messages.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.messages.append(("debug", prefix, message))

    def warning_text(self) -> str:
        return "\n".join(message for _, message in self.warnings)


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def logger() -> RecordingLogger:
    """Provide a logger that records warnings and progress messages."""
    return RecordingLogger()


@pytest.fixture
def engine(logger: RecordingLogger) -> ConfigEngine:
    """Provide a fresh lenient engine with no external source."""
    return ConfigEngine(logger=logger)


@pytest.fixture
def global_engine(logger: RecordingLogger, monkeypatch):
    """
    Swap in a fresh global engine and global logger for the test.

    The previous global engine and logger are restored afterwards.
    """
    monkeypatch.delenv("MODCONFIG_CONFIG_FILE", raising=False)
    previous_engine = get_global_engine()
    previous_logger = get_global_logger()
    fresh = ConfigEngine(logger=logger)
    set_global_engine(fresh)
    set_global_logger(logger)
    yield fresh
    set_global_engine(previous_engine)
    set_global_logger(previous_logger)


@pytest.fixture
def sample_schema() -> dict[str, Any]:
    """
    Provide a schema declaration touching every node kind.
    """

    def is_url(value):
        if not isinstance(value, str) or not value.startswith(("http", "/")):
            return "must be a URL or absolute path"
        return None

    return {
        "title": {"default": "Home", "description": "Page title"},
        "logo": {
            "src": {"default": "/logo.png", "validators": [is_url]},
            "alt": {"default": "Logo"},
        },
        "links": {
            "default": [],
            "array_elements": {
                "label": {"default": "Link"},
                "url": {"default": "/", "validators": [is_url]},
            },
        },
        "labels": {
            "default": {},
            "dictionary_elements": {
                "text": {"default": ""},
            },
        },
        "extra": {"default": {"freeform": True}},
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
