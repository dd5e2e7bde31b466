from __future__ import annotations

from pathlib import Path

from settings import Settings


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def data_dir(settings: Settings) -> Path:
    return ensure_dir(settings.data_dir)


def preferences_path(settings: Settings) -> Path:
    return data_dir(settings) / settings.preferences_file


def documents_path(settings: Settings) -> Path:
    return data_dir(settings) / settings.documents_file


def files_dir(settings: Settings) -> Path:
    return ensure_dir(data_dir(settings) / "files")
