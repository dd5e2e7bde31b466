from __future__ import annotations

import asyncio
import copy
import logging
import math
import secrets
import string
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Iterator, Mapping, TypeVar

from pydantic import BaseModel, Field

from .disk_store import DiskJsonDocumentStore
from .errors import InvalidPathError, TransactionAbortedError
from .interfaces import KeyValueDocumentStore
from .memory_store import MemoryJsonDocumentStore
from .transactions import Transaction, WriteBatch, WriteOp

logger = logging.getLogger(__name__)

T = TypeVar("T")

AUTO_ID_ALPHABET = string.ascii_letters + string.digits
AUTO_ID_LENGTH = 20


class StoredDocument(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)
    version: int = 1


class StoreDoc(BaseModel):
    """
    Mirrors the on-disk documents schema:
      { "collections": { "<collection>": { "<doc_id>": { "data": {...}, "version": 3 } } } }
    """

    collections: dict[str, dict[str, StoredDocument]] = Field(default_factory=dict)

    @classmethod
    def from_disk_doc(cls, doc: Mapping[str, Any]) -> "StoreDoc":
        return cls.model_validate(doc)

    def to_disk_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def find(self, collection: str, doc_id: str) -> StoredDocument | None:
        return self.collections.get(collection, {}).get(doc_id)


def _check_segment(kind: str, value: str) -> str:
    if not isinstance(value, str) or not value or "/" in value:
        raise InvalidPathError(f"Invalid {kind} id: {value!r}")
    return value


def _check_value(value: Any, where: str) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise TypeError(f"Non-finite float at {where}")
        return value
    if isinstance(value, Mapping):
        return {_check_key(k, where): _check_value(v, f"{where}.{k}") for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_check_value(v, f"{where}[{i}]") for i, v in enumerate(value)]
    raise TypeError(f"Unsupported value of type {type(value).__name__} at {where}")


def _check_key(key: Any, where: str) -> str:
    if not isinstance(key, str):
        raise TypeError(f"Document keys must be strings, got {key!r} at {where}")
    return key


def validate_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-compatible deep copy of `data`, or raise TypeError."""
    if not isinstance(data, Mapping):
        raise TypeError(f"Document data must be a mapping, got {type(data).__name__}")
    return {_check_key(k, "<root>"): _check_value(v, k) for k, v in data.items()}


def generate_id() -> str:
    return "".join(secrets.choice(AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))


class DocumentSnapshot:
    """Point-in-time view of one document. Absent documents have exists == False."""

    def __init__(self, reference: "DocumentReference", data: dict[str, Any] | None):
        self._reference = reference
        self._data = copy.deepcopy(data) if data is not None else None

    @property
    def id(self) -> str:
        return self._reference.id

    @property
    def reference(self) -> "DocumentReference":
        return self._reference

    @property
    def exists(self) -> bool:
        return self._data is not None

    def data(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._data) if self._data is not None else None

    def get(self, field: str) -> Any:
        """Read one field; dotted paths reach into nested maps. Missing reads as None."""
        current: Any = self._data
        for part in field.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return copy.deepcopy(current)

    def __repr__(self) -> str:
        return f"DocumentSnapshot(path={self._reference.path!r}, exists={self.exists})"


class QuerySnapshot:
    def __init__(self, docs: list[DocumentSnapshot]):
        self._docs = docs

    @property
    def docs(self) -> list[DocumentSnapshot]:
        return list(self._docs)

    @property
    def size(self) -> int:
        return len(self._docs)

    @property
    def empty(self) -> bool:
        return not self._docs

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(self._docs)

    def __len__(self) -> int:
        return len(self._docs)


class DocumentReference:
    def __init__(self, store: "DocumentStore", collection: str, doc_id: str):
        self._store = store
        self._collection = _check_segment("collection", collection)
        self._id = _check_segment("document", doc_id)

    @property
    def id(self) -> str:
        return self._id

    @property
    def path(self) -> str:
        return f"{self._collection}/{self._id}"

    @property
    def parent(self) -> "CollectionReference":
        return CollectionReference(self._store, self._collection)

    def get(self) -> DocumentSnapshot:
        snapshot, _ = self._store._read_versioned(self)
        return snapshot

    def set(self, data: Mapping[str, Any], merge: bool = False) -> None:
        self._store._write(WriteOp(kind="set", collection=self._collection, doc_id=self._id, data=validate_data(data), merge=merge))

    def update(self, data: Mapping[str, Any]) -> None:
        """Merge `data` into the document. Raises DocumentNotFoundError if it does not exist."""
        self._store._write(WriteOp(kind="update", collection=self._collection, doc_id=self._id, data=validate_data(data)))

    def delete(self) -> None:
        self._store._write(WriteOp(kind="delete", collection=self._collection, doc_id=self._id))

    def snapshots(self) -> AsyncGenerator[DocumentSnapshot, None]:
        return self._store._stream(lambda path: path == self.path, lambda state: self._store._snapshot_of(self, state))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentReference):
            return NotImplemented
        return self._store is other._store and self.path == other.path

    def __hash__(self) -> int:
        return hash((id(self._store), self.path))

    def __repr__(self) -> str:
        return f"DocumentReference({self.path!r})"


class CollectionReference:
    def __init__(self, store: "DocumentStore", name: str):
        self._store = store
        self._name = _check_segment("collection", name)

    @property
    def id(self) -> str:
        return self._name

    def doc(self, doc_id: str | None = None) -> DocumentReference:
        return DocumentReference(self._store, self._name, doc_id if doc_id is not None else generate_id())

    def add(self, data: Mapping[str, Any]) -> DocumentReference:
        ref = self.doc()
        ref.set(data)
        return ref

    def get(self) -> QuerySnapshot:
        return self._store._query(self._name, self._store._read_state())

    def where(self, field: str, value: Any) -> QuerySnapshot:
        """Documents whose `field` equals `value` (equality filter only)."""
        return QuerySnapshot([d for d in self.get() if d.get(field) == value])

    def snapshots(self) -> AsyncGenerator[QuerySnapshot, None]:
        prefix = f"{self._name}/"
        return self._store._stream(lambda path: path.startswith(prefix), lambda state: self._store._query(self._name, state))

    def __repr__(self) -> str:
        return f"CollectionReference({self._name!r})"


@dataclass(eq=False)
class _Listener:
    touches: Callable[[str], bool]
    render: Callable[[StoreDoc], Any]
    queue: asyncio.Queue
    loop: asyncio.AbstractEventLoop


class DocumentStore:
    """
    Collections of JSON documents kept in a single whole-document backend.

    Every write (single, batched or transactional) is one load/modify/save cycle
    under the backend's lock, so it lands completely or not at all. Swap the
    backend to go from the in-memory fake to the on-disk store without changing
    anything the caller sees.
    """

    def __init__(self, backend: KeyValueDocumentStore):
        self._backend = backend
        self._listeners: list[_Listener] = []
        self._listeners_guard = threading.Lock()

    @classmethod
    def in_memory(cls, initial: Mapping[str, Mapping[str, Mapping[str, Any]]] | None = None) -> "DocumentStore":
        """
        Build a store over a fresh in-memory backend.

        `initial` seeds it as {collection: {doc_id: data}}.
        """
        store = cls(MemoryJsonDocumentStore())
        if initial:
            state = StoreDoc()
            for collection, docs in initial.items():
                _check_segment("collection", collection)
                state.collections[collection] = {
                    _check_segment("document", doc_id): StoredDocument(data=validate_data(data))
                    for doc_id, data in docs.items()
                }
            store._backend.save(state.to_disk_doc())
        return store

    @classmethod
    def on_disk(cls, path: Path) -> "DocumentStore":
        return cls(DiskJsonDocumentStore(path))

    @property
    def backend(self) -> KeyValueDocumentStore:
        return self._backend

    def collection(self, name: str) -> CollectionReference:
        return CollectionReference(self, name)

    def document(self, path: str) -> DocumentReference:
        parts = path.split("/")
        if len(parts) != 2:
            raise InvalidPathError(f"Document path must look like 'collection/doc': {path!r}")
        return DocumentReference(self, parts[0], parts[1])

    def collections(self) -> list[str]:
        return sorted(name for name, docs in self._read_state().collections.items() if docs)

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def run_transaction(self, fn: Callable[[Transaction], T], max_attempts: int = 5) -> T:
        """
        Run `fn` with a fresh Transaction and commit its writes atomically.

        Retries when a document read inside `fn` changed before the commit, up to
        `max_attempts` times, then raises TransactionAbortedError. An exception from
        `fn` propagates and nothing is written.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        for attempt in range(1, max_attempts + 1):
            tx = Transaction(self)
            result = fn(tx)
            if self._commit(tx.writes, expected_versions=tx.reads):
                return result
            logger.warning("Transaction conflict on attempt %d/%d", attempt, max_attempts)
        raise TransactionAbortedError(max_attempts)

    def _read_state(self) -> StoreDoc:
        return StoreDoc.from_disk_doc(self._backend.load())

    def _read_versioned(self, ref: DocumentReference) -> tuple[DocumentSnapshot, int]:
        state = self._read_state()
        stored = state.find(ref.parent.id, ref.id)
        if stored is None:
            return DocumentSnapshot(ref, None), 0
        return DocumentSnapshot(ref, stored.data), stored.version

    def _snapshot_of(self, ref: DocumentReference, state: StoreDoc) -> DocumentSnapshot:
        stored = state.find(ref.parent.id, ref.id)
        return DocumentSnapshot(ref, stored.data if stored is not None else None)

    def _query(self, collection: str, state: StoreDoc) -> QuerySnapshot:
        docs = state.collections.get(collection, {})
        return QuerySnapshot(
            [DocumentSnapshot(DocumentReference(self, collection, doc_id), docs[doc_id].data) for doc_id in sorted(docs)]
        )

    def _write(self, op: WriteOp) -> None:
        self._commit([op])

    def _commit(self, ops: list[WriteOp], expected_versions: Mapping[str, int] | None = None) -> bool:
        """
        Apply `ops` in order as one save.

        Returns False without writing if a document's version differs from
        `expected_versions`. Raises (without writing) if any op cannot apply.
        """
        with self._backend.lock:
            state = self._read_state()
            for path, expected in (expected_versions or {}).items():
                collection, doc_id = path.split("/", 1)
                stored = state.find(collection, doc_id)
                if (stored.version if stored is not None else 0) != expected:
                    return False
            if not ops:
                return True
            for op in ops:
                docs = state.collections.setdefault(op.collection, {})
                current = docs.get(op.doc_id)
                new_data = op.apply(current.data if current is not None else None)
                if new_data is None:
                    docs.pop(op.doc_id, None)
                    if not docs:
                        state.collections.pop(op.collection, None)
                else:
                    version = (current.version if current is not None else 0) + 1
                    docs[op.doc_id] = StoredDocument(data=new_data, version=version)
            self._backend.save(state.to_disk_doc())
            # still under the lock: listeners see views in commit order
            self._notify({op.path for op in ops}, state)
        logger.debug("Committed %d write(s): %s", len(ops), ", ".join(op.path for op in ops))
        return True

    def _notify(self, paths: set[str], state: StoreDoc) -> None:
        with self._listeners_guard:
            listeners = list(self._listeners)
        for listener in listeners:
            if not any(listener.touches(p) for p in paths):
                continue
            if listener.loop.is_closed():
                self._remove_listener(listener)
                continue
            listener.loop.call_soon_threadsafe(listener.queue.put_nowait, listener.render(state))

    def _remove_listener(self, listener: _Listener) -> None:
        with self._listeners_guard:
            if listener in self._listeners:
                self._listeners.remove(listener)

    async def _stream(self, touches: Callable[[str], bool], render: Callable[[StoreDoc], T]) -> AsyncGenerator[T, None]:
        listener = _Listener(touches, render, asyncio.Queue(), asyncio.get_running_loop())
        with self._listeners_guard:
            self._listeners.append(listener)
        try:
            state = await asyncio.to_thread(self._read_state)
            yield render(state)
            while True:
                yield await listener.queue.get()
        finally:
            self._remove_listener(listener)
