from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    # Storage
    data_dir: Path
    preferences_file: str
    documents_file: str

    # Off: every adapter is in-memory (nothing survives the process)
    persist_to_disk: bool

    # Logging
    log_level: str


def get_settings() -> Settings:
    data_dir = Path(_env_str("APP_DATA_DIR", str(PROJECT_ROOT / "data"))).expanduser()

    preferences_file = _env_str("APP_PREFERENCES_FILE", "preferences.json")
    documents_file = _env_str("APP_DOCUMENTS_FILE", "documents.json")

    persist_to_disk = _env_bool("APP_PERSIST_TO_DISK", True)

    log_level = _env_str("APP_LOG_LEVEL", "INFO").upper()

    return Settings(
        data_dir=data_dir,
        preferences_file=preferences_file,
        documents_file=documents_file,
        persist_to_disk=persist_to_disk,
        log_level=log_level,
    )


def load_settings(env_file: str | os.PathLike[str] | None = "local.env") -> Settings:
    """Load an optional .env file into the environment, then read settings from it."""
    if env_file is not None:
        load_dotenv(env_file)
    return get_settings()


def configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.log_level!r}")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
