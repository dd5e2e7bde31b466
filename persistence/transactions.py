from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Literal, Mapping

from pydantic import BaseModel

from .errors import DocumentNotFoundError, TransactionError

if TYPE_CHECKING:
    from .documents import DocumentReference, DocumentSnapshot, DocumentStore

MAX_WRITES_PER_BATCH = 500


class WriteOp(BaseModel):
    """One buffered write against a single document."""

    kind: Literal["set", "update", "delete"]
    collection: str
    doc_id: str
    data: dict[str, Any] | None = None
    merge: bool = False

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.doc_id}"

    def apply(self, existing: dict[str, Any] | None) -> dict[str, Any] | None:
        """
        Compute the document's new data from its current data (None when absent).

        Returns None when the document ends up deleted. Does not mutate `existing`.
        """
        if self.kind == "delete":
            return None
        data = copy.deepcopy(self.data or {})
        if self.kind == "set" and not self.merge:
            return data
        if existing is None:
            if self.kind == "update":
                raise DocumentNotFoundError(self.path)
            return data
        # Shallow merge: incoming keys win, untouched keys survive.
        merged = copy.deepcopy(existing)
        merged.update(data)
        return merged


def _op(kind: str, ref: DocumentReference, data: Mapping[str, Any] | None = None, merge: bool = False) -> WriteOp:
    from .documents import validate_data

    return WriteOp(
        kind=kind,
        collection=ref.parent.id,
        doc_id=ref.id,
        data=validate_data(data) if data is not None else None,
        merge=merge,
    )


class Transaction:
    """
    Read-then-write unit of work passed to DocumentStore.run_transaction.

    Reads go straight to the store and remember the version they saw; writes are
    buffered and only applied when the transaction function returns. If any
    document read here was changed by someone else before the commit, the whole
    attempt is thrown away and the function runs again.
    """

    def __init__(self, store: DocumentStore):
        self._store = store
        self._reads: dict[str, int] = {}
        self._writes: list[WriteOp] = []

    @property
    def reads(self) -> dict[str, int]:
        return dict(self._reads)

    @property
    def writes(self) -> list[WriteOp]:
        return list(self._writes)

    def get(self, ref: DocumentReference) -> DocumentSnapshot:
        if self._writes:
            raise TransactionError("Transactions require all reads to be executed before all writes")
        snapshot, version = self._store._read_versioned(ref)
        self._reads.setdefault(ref.path, version)
        return snapshot

    def set(self, ref: DocumentReference, data: Mapping[str, Any], merge: bool = False) -> "Transaction":
        self._writes.append(_op("set", ref, data, merge))
        return self

    def update(self, ref: DocumentReference, data: Mapping[str, Any]) -> "Transaction":
        self._writes.append(_op("update", ref, data))
        return self

    def delete(self, ref: DocumentReference) -> "Transaction":
        self._writes.append(_op("delete", ref))
        return self


class WriteBatch:
    """
    Write-only group of operations, applied in issue order by a single commit().

    Nothing reaches the store before commit(), and if any operation fails (an
    update of a missing document) none of them do.
    """

    def __init__(self, store: DocumentStore):
        self._store = store
        self._writes: list[WriteOp] = []
        self._committed = False

    def __len__(self) -> int:
        return len(self._writes)

    @property
    def committed(self) -> bool:
        return self._committed

    def _add(self, op: WriteOp) -> "WriteBatch":
        if self._committed:
            raise TransactionError("This batch has already been committed")
        if len(self._writes) >= MAX_WRITES_PER_BATCH:
            raise TransactionError(f"A batch holds at most {MAX_WRITES_PER_BATCH} writes")
        self._writes.append(op)
        return self

    def set(self, ref: DocumentReference, data: Mapping[str, Any], merge: bool = False) -> "WriteBatch":
        return self._add(_op("set", ref, data, merge))

    def update(self, ref: DocumentReference, data: Mapping[str, Any]) -> "WriteBatch":
        return self._add(_op("update", ref, data))

    def delete(self, ref: DocumentReference) -> "WriteBatch":
        return self._add(_op("delete", ref))

    def commit(self) -> None:
        if self._committed:
            raise TransactionError("This batch has already been committed")
        self._committed = True
        self._store._commit(self._writes)
