"""Runtime configuration of the plan editor (Pydantic Settings v2).

Values come from, in order of precedence:
- real environment variables,
- `.env`, `.env.local`, `.env.dev`, `.env.test`, `.env.prod` in the working directory,
- the defaults below.

Two groups of knobs live here: the process flags every entry point reads
(`PLANDRAFT_ENV`, `LOG_LEVEL`), and the editor engine's own settings, namely
the autosave debounce window and the snapshot store a CLI or API session opens.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
StoreBackendName = Literal["memory", "file", "http"]

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class Settings(BaseSettings):
    """Editor configuration, one field per environment variable.

    Attributes
    ----------
    environment : EnvName
        `PLANDRAFT_ENV`; the API server only auto-reloads in ``dev``.
    log_level : LogLevelName
        `LOG_LEVEL`; applied by :func:`get_logger`.
    autosave_debounce_ms : int
        Quiet period before a pending autosave is written.
    store_backend : StoreBackendName
        Which snapshot store `open_store()` builds.
    store_dir : Path
        Base directory of the JSON file store.
    store_url : str
        Base URL of the plan API used by the HTTP store.
    store_timeout_seconds : float
        Socket timeout of each HTTP store request.
    default_target_minutes : int
        Time budget given to plans created from the CLI.
    """

    environment: EnvName = Field(default="dev", alias="PLANDRAFT_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    autosave_debounce_ms: int = Field(default=800, ge=0, alias="PLANDRAFT_AUTOSAVE_DEBOUNCE_MS")

    store_backend: StoreBackendName = Field(default="file", alias="PLANDRAFT_STORE_BACKEND")
    store_dir: Path = Field(default=Path("artifacts") / "plans", alias="PLANDRAFT_STORE_DIR")
    store_url: str = Field(default="http://127.0.0.1:8000", alias="PLANDRAFT_STORE_URL")
    store_timeout_seconds: float = Field(default=10.0, gt=0, alias="PLANDRAFT_STORE_TIMEOUT")

    default_target_minutes: int = Field(
        default=60, ge=0, alias="PLANDRAFT_DEFAULT_TARGET_MINUTES"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    @property
    def autosave_debounce_seconds(self) -> float:
        """The debounce window in the unit `asyncio.sleep` expects."""
        return self.autosave_debounce_ms / 1000.0

    def log_level_numeric(self) -> int:
        return logging.getLevelName(self.log_level)  # type: ignore[no-any-return]


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Build the settings once per process.

    Tests that change `os.environ` call `load_settings.cache_clear()` first.
    """
    os.environ.setdefault("PLANDRAFT_ENV", "dev")
    return Settings()


# Import-time snapshot of the configuration; prefer load_settings() in code
# that must observe overrides made after import.
settings: Settings = load_settings()


def get_logger(name: str = "plandraft") -> logging.Logger:
    """Return the named logger, with one stream handler at the configured level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(stream)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
