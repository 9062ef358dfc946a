"""Typed tests for the settings loader.

The `monkeypatch` fixture is annotated as `Any` to keep the suite mypy-strict
friendly without importing pytest's types.

These tests verify:
1) Importing the module-level `settings` yields a `Settings` instance.
2) Environment variables override defaults after clearing the loader cache.
3) `get_logger()` respects the configured LOG_LEVEL when constructing loggers.
4) `open_store()` builds the backend named by `PLANDRAFT_STORE_BACKEND`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from plandraft.core.settings import (
    Settings,
    get_logger,
    load_settings,
    settings,
)
from plandraft.core.store.factory import open_store
from plandraft.core.store.file import JsonFileSnapshotStore
from plandraft.core.store.http import HttpSnapshotStore
from plandraft.core.store.memory import InMemorySnapshotStore


def test_settings_instance_type() -> None:
    """`settings` should be an instance of the typed `Settings` model."""
    assert isinstance(settings, Settings)


def test_env_overrides_with_cache_clear(monkeypatch: Any) -> None:
    """Changing env vars should take effect after `load_settings.cache_clear()`."""
    monkeypatch.setenv("PLANDRAFT_ENV", "test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PLANDRAFT_AUTOSAVE_DEBOUNCE_MS", "250")

    load_settings.cache_clear()
    s = load_settings()

    assert s.environment == "test"
    assert s.is_test and not s.is_dev
    assert s.log_level == "DEBUG"
    assert s.autosave_debounce_ms == 250
    assert s.autosave_debounce_seconds == 0.25


def test_defaults_match_editor_behaviour(monkeypatch: Any) -> None:
    """Without overrides the debounce is 800 ms and plans target 60 minutes."""
    for name in (
        "PLANDRAFT_AUTOSAVE_DEBOUNCE_MS",
        "PLANDRAFT_DEFAULT_TARGET_MINUTES",
        "PLANDRAFT_STORE_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)
    load_settings.cache_clear()
    s = load_settings()

    assert s.autosave_debounce_ms == 800
    assert s.default_target_minutes == 60
    assert s.store_backend == "file"


def test_get_logger_respects_level(monkeypatch: Any) -> None:
    """`get_logger()` should apply the numeric level derived from `LOG_LEVEL`."""
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    load_settings.cache_clear()
    _ = load_settings()

    logger = get_logger("plandraft.tests.settings")

    assert logger.level == logging.ERROR
    assert logger.handlers, "Expected at least one StreamHandler to be attached."


def test_open_store_follows_backend_setting(monkeypatch: Any, tmp_path: Path) -> None:
    """Each backend name maps to its store class."""
    monkeypatch.setenv("PLANDRAFT_STORE_DIR", str(tmp_path / "plans"))
    monkeypatch.setenv("PLANDRAFT_STORE_URL", "http://plans.example:9000")

    monkeypatch.setenv("PLANDRAFT_STORE_BACKEND", "memory")
    load_settings.cache_clear()
    assert isinstance(open_store(), InMemorySnapshotStore)

    monkeypatch.setenv("PLANDRAFT_STORE_BACKEND", "file")
    load_settings.cache_clear()
    file_store = open_store()
    assert isinstance(file_store, JsonFileSnapshotStore)
    assert file_store.base_dir == tmp_path / "plans"
    assert (tmp_path / "plans").is_dir()

    monkeypatch.setenv("PLANDRAFT_STORE_BACKEND", "http")
    load_settings.cache_clear()
    http_store = open_store()
    assert isinstance(http_store, HttpSnapshotStore)
    assert http_store.base_url == "http://plans.example:9000"
