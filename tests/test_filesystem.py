from __future__ import annotations

import pytest

from persistence.filesystem import LocalFileSystem, MemoryFileSystem


@pytest.fixture(params=["memory", "local"])
def fs(request, tmp_path):
    # Both adapters must behave the same way.
    if request.param == "memory":
        return MemoryFileSystem()
    return LocalFileSystem(tmp_path)


def test_file_does_not_exist_until_created(fs):
    f = fs.file("/a/b/file.txt")
    assert f.exists() is False


def test_create_recursive_makes_parents(fs):
    f = fs.file("/a/b/file.txt").create(recursive=True)

    assert f.exists() is True
    assert fs.directory("/a/b").exists() is True
    assert fs.file("/a/b/file.txt").read_text() == ""


def test_create_without_parent_fails(fs):
    with pytest.raises(FileNotFoundError):
        fs.file("/missing/file.txt").create()
    assert fs.file("/missing/file.txt").exists() is False


def test_create_existing_file_keeps_contents(fs):
    f = fs.file("/notes.txt").create()
    f.write_text("hello")

    f.create()

    assert f.read_text() == "hello"


def test_write_read_delete(fs):
    f = fs.file("/notes.txt")
    f.write_text("hello")
    assert f.read_text() == "hello"

    f.delete()
    assert f.exists() is False
    with pytest.raises(FileNotFoundError):
        f.read_text()
    with pytest.raises(FileNotFoundError):
        f.delete()


def test_directory_is_not_a_file(fs):
    fs.directory("/dir").create()

    assert fs.file("/dir").exists() is False
    with pytest.raises(IsADirectoryError):
        fs.file("/dir").create()


def test_directory_create_and_list(fs):
    d = fs.directory("/x/y")
    with pytest.raises(FileNotFoundError):
        d.create()

    d.create(recursive=True)
    fs.file("/x/y/b.txt").create()
    fs.file("/x/y/a.txt").create()
    fs.directory("/x/y/sub").create()

    assert d.exists() is True
    assert d.list() == ["a.txt", "b.txt", "sub"]


def test_list_missing_directory_fails(fs):
    with pytest.raises(FileNotFoundError):
        fs.directory("/nope").list()


def test_memory_paths_are_normalized():
    fs = MemoryFileSystem()
    fs.file("a/./b/../c.txt").create(recursive=True)

    assert fs.file("/a/c.txt").exists()
    assert fs.files == {"/a/c.txt": ""}
    assert fs.directories == {"/", "/a"}


def test_memory_file_under_a_file_fails():
    fs = MemoryFileSystem()
    fs.file("/plain").create()

    with pytest.raises(NotADirectoryError):
        fs.file("/plain/child").create()
    with pytest.raises(NotADirectoryError):
        fs.file("/plain/deeper/child").create(recursive=True)


def test_memory_filesystems_are_independent():
    a = MemoryFileSystem()
    b = MemoryFileSystem()
    a.file("/only-a").create()

    assert b.file("/only-a").exists() is False


def test_local_filesystem_stays_under_root(tmp_path):
    fs = LocalFileSystem(tmp_path)
    fs.file("/inside.txt").create()

    assert (tmp_path / "inside.txt").is_file()


def test_double_slash_prefix_is_the_root(fs):
    directory, name = "/", "a.txt"
    f = fs.file(f"{directory}/{name}").create()

    assert f.exists() is True
    assert fs.file("/a.txt").exists() is True
    assert fs.directory("//").list() == ["a.txt"]


def test_memory_double_slash_paths_normalize_to_single_root():
    assert MemoryFileSystem.normalize("//a.txt") == "/a.txt"
    assert MemoryFileSystem.normalize("///x//y/") == "/x/y"
    assert MemoryFileSystem.normalize("/") == "/"
    assert MemoryFileSystem.normalize("//") == "/"
