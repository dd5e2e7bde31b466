from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Protocol, Union

from pydantic import BaseModel, Field

from .disk_store import DiskJsonDocumentStore
from .interfaces import KeyValueDocumentStore
from .memory_store import MemoryJsonDocumentStore

logger = logging.getLogger(__name__)

PreferenceValue = Union[bool, int, float, str, list[str]]


class PreferencesDoc(BaseModel):
    """
    Mirrors the on-disk preferences schema:
      { "values": { "<key>": true | 1 | 1.5 | "text" | ["a", "b"] } }
    """

    values: dict[str, PreferenceValue] = Field(default_factory=dict)

    @classmethod
    def from_disk_doc(cls, doc: Mapping[str, Any]) -> "PreferencesDoc":
        # The backend may hold a bare key/value map (e.g. a seeded fake), which
        # can itself have a preference named "values".
        wrapped = set(doc) == {"values"} and isinstance(doc["values"], dict)
        if not wrapped:
            doc = {"values": dict(doc)}
        # strict: "1" must stay a string and 1 must stay an int
        return cls.model_validate(doc, strict=True)

    def to_disk_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class KeyValueStore(Protocol):
    def get_int(self, key: str) -> int | None:
        ...

    def set_int(self, key: str, value: int) -> bool:
        ...


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_float(value: Any) -> bool:
    return isinstance(value, float)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


class Preferences(KeyValueStore):
    """
    Typed key/value preferences over a whole-document backend.

    Getters never raise for a missing key: they return None, and so does a key
    holding a value of another type. Setters check the value type, write through
    to the backend and report success.
    """

    def __init__(self, backend: KeyValueDocumentStore):
        self._backend = backend
        self._cache: dict[str, PreferenceValue] | None = None

    @classmethod
    def in_memory(cls, initial_values: Mapping[str, PreferenceValue] | None = None) -> "Preferences":
        """
        Build preferences over a fresh in-memory backend, seeded with `initial_values`.

        This is the test-side initializer: arrange state here, before the code under
        test first reads it.
        """
        backend = MemoryJsonDocumentStore()
        if initial_values:
            backend.seed(PreferencesDoc.from_disk_doc({"values": dict(initial_values)}).to_disk_doc())
        return cls(backend)

    @classmethod
    def on_disk(cls, path: Path) -> "Preferences":
        return cls(DiskJsonDocumentStore(path))

    @property
    def backend(self) -> KeyValueDocumentStore:
        return self._backend

    def _values(self) -> dict[str, PreferenceValue]:
        if self._cache is None:
            self._cache = PreferencesDoc.from_disk_doc(self._backend.load()).values
        return self._cache

    def _get(self, key: str, check) -> Any:
        value = self._values().get(key)
        if value is None or not check(value):
            return None
        return value

    def _set(self, key: str, value: PreferenceValue) -> bool:
        with self._backend.lock:
            doc = PreferencesDoc.from_disk_doc(self._backend.load())
            doc.values[key] = value
            self._backend.save(doc.to_disk_doc())
            self._cache = doc.values
        logger.debug("Set preference %s", key)
        return True

    def get_int(self, key: str) -> int | None:
        return self._get(key, _is_int)

    def set_int(self, key: str, value: int) -> bool:
        if not _is_int(value):
            raise TypeError(f"set_int expects an int, got {type(value).__name__}")
        return self._set(key, value)

    def get_bool(self, key: str) -> bool | None:
        return self._get(key, lambda v: isinstance(v, bool))

    def set_bool(self, key: str, value: bool) -> bool:
        if not isinstance(value, bool):
            raise TypeError(f"set_bool expects a bool, got {type(value).__name__}")
        return self._set(key, value)

    def get_float(self, key: str) -> float | None:
        return self._get(key, _is_float)

    def set_float(self, key: str, value: float) -> bool:
        if not _is_float(value):
            raise TypeError(f"set_float expects a float, got {type(value).__name__}")
        return self._set(key, value)

    def get_str(self, key: str) -> str | None:
        return self._get(key, lambda v: isinstance(v, str))

    def set_str(self, key: str, value: str) -> bool:
        if not isinstance(value, str):
            raise TypeError(f"set_str expects a str, got {type(value).__name__}")
        return self._set(key, value)

    def get_str_list(self, key: str) -> list[str] | None:
        value = self._get(key, _is_str_list)
        return list(value) if value is not None else None

    def set_str_list(self, key: str, value: list[str]) -> bool:
        if not _is_str_list(value):
            raise TypeError("set_str_list expects a list of str")
        return self._set(key, list(value))

    def contains_key(self, key: str) -> bool:
        return key in self._values()

    def keys(self) -> set[str]:
        return set(self._values())

    def remove(self, key: str) -> bool:
        with self._backend.lock:
            doc = PreferencesDoc.from_disk_doc(self._backend.load())
            doc.values.pop(key, None)
            self._backend.save(doc.to_disk_doc())
            self._cache = doc.values
        return True

    def clear(self) -> bool:
        with self._backend.lock:
            self._backend.save(PreferencesDoc().to_disk_doc())
            self._cache = {}
        return True

    def reload(self) -> None:
        self._cache = None
