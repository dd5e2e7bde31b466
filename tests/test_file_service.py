from __future__ import annotations

import pytest

from persistence.filesystem import LocalFileSystem
from services.files import FileService


@pytest.fixture
def service(memory_fs) -> FileService:
    return FileService(memory_fs)


def test_create_file(service, memory_fs):
    assert service.create_file("/data/logs/app.log") is True

    assert memory_fs.file("/data/logs/app.log").exists()


def test_create_file_without_recursive_needs_parent(service):
    with pytest.raises(FileNotFoundError):
        service.create_file("/data/app.log", recursive=False)


def test_file_exists_reads_arranged_state(service, memory_fs):
    assert service.file_exists("/config.json") is False

    memory_fs.file("/config.json").create()

    assert service.file_exists("/config.json") is True


def test_write_and_read_file(service, memory_fs):
    service.write_file("/notes/today.txt", "buy milk")

    assert memory_fs.file("/notes/today.txt").read_text() == "buy milk"
    assert service.read_file("/notes/today.txt") == "buy milk"


def test_read_missing_file_is_none(service):
    assert service.read_file("/missing.txt") is None


def test_file_service_on_real_disk(tmp_path):
    service = FileService(LocalFileSystem(tmp_path))

    assert service.create_file("deep/er/file.txt") is True
    assert (tmp_path / "deep" / "er" / "file.txt").is_file()
