"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default: float, *, cast=float):
    """Read a numeric environment variable, rejecting garbage early."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        number = cast(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be numeric, got {value!r}") from exc
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return number


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Habitline"
    DB_FILENAME = "habitline.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITLINE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITLINE_DATABASE_URL", self._build_sqlite_url())
        self.DEFAULT_TIMEZONE = os.getenv("HABITLINE_DEFAULT_TIMEZONE", "UTC")
        self.LOCK_TIMEOUT = _env_number("HABITLINE_LOCK_TIMEOUT", 10.0)
        self.HISTORY_WINDOW_DAYS = _env_number("HABITLINE_HISTORY_WINDOW_DAYS", 365, cast=int)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITLINE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {}
        if self.is_sqlite:
            # busy timeout doubles as the store-level wait bound
            engine_options["connect_args"] = {
                "check_same_thread": False,
                "timeout": self.LOCK_TIMEOUT,
            }
        else:
            engine_options["pool_timeout"] = self.LOCK_TIMEOUT
            engine_options["pool_pre_ping"] = True
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration for the test-suite: throwaway database, short timeouts."""

    __test__ = False
    DEBUG = False
    TESTING = True

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self._data_dir_override = Path(data_dir) if data_dir is not None else None
        super().__init__()
        self.DATABASE_URL = self._build_sqlite_url()
        self.LOCK_TIMEOUT = 2.0

    def _resolve_data_dir(self) -> Path:
        if self._data_dir_override is None:
            return super()._resolve_data_dir()
        self._data_dir_override.mkdir(parents=True, exist_ok=True)
        return self._data_dir_override.resolve()
