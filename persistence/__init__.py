from __future__ import annotations

from .disk_store import DiskJsonDocumentStore
from .documents import CollectionReference, DocumentReference, DocumentSnapshot, DocumentStore, QuerySnapshot
from .errors import (
    DocumentNotFoundError,
    InvalidPathError,
    StoreError,
    TransactionAbortedError,
    TransactionError,
)
from .filesystem import FileSystem, LocalFileSystem, MemoryFileSystem
from .interfaces import KeyValueDocumentStore
from .memory_store import MemoryJsonDocumentStore
from .preferences import KeyValueStore, Preferences
from .transactions import Transaction, WriteBatch

__all__ = [
    "KeyValueDocumentStore",
    "DiskJsonDocumentStore",
    "MemoryJsonDocumentStore",
    "KeyValueStore",
    "Preferences",
    "DocumentStore",
    "CollectionReference",
    "DocumentReference",
    "DocumentSnapshot",
    "QuerySnapshot",
    "Transaction",
    "WriteBatch",
    "FileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "StoreError",
    "DocumentNotFoundError",
    "InvalidPathError",
    "TransactionError",
    "TransactionAbortedError",
]
