from __future__ import annotations

import logging
from dataclasses import dataclass

from persistence.documents import DocumentStore
from persistence.filesystem import FileSystem, LocalFileSystem, MemoryFileSystem
from persistence.paths import documents_path, files_dir, preferences_path
from persistence.preferences import Preferences
from services.counter import CounterService
from services.documents import DocumentService
from services.files import FileService
from services.greeter import Callback, Greeter
from settings import Settings, configure_logging, load_settings

logger = logging.getLogger(__name__)


@dataclass
class Services:
    counter: CounterService
    documents: DocumentService
    files: FileService
    greeter: Greeter


def _noop() -> None:
    return None


def create_services(settings: Settings | None = None, *, on_greeted: Callback = _noop) -> Services:
    """
    Production wiring: every service gets the real adapter for its dependency.

    With persist_to_disk off, the in-memory adapters are used instead, so nothing
    is written outside the process.
    """
    if settings is None:
        settings = load_settings()
        configure_logging(settings)

    fs: FileSystem
    if settings.persist_to_disk:
        preferences = Preferences.on_disk(preferences_path(settings))
        store = DocumentStore.on_disk(documents_path(settings))
        fs = LocalFileSystem(files_dir(settings))
    else:
        preferences = Preferences.in_memory()
        store = DocumentStore.in_memory()
        fs = MemoryFileSystem()

    logger.info("Services created (persist_to_disk=%s, data_dir=%s)", settings.persist_to_disk, settings.data_dir)

    return Services(
        counter=CounterService(preferences),
        documents=DocumentService(store),
        files=FileService(fs),
        greeter=Greeter(on_greeted),
    )
