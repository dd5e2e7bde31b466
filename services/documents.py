from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Mapping

from persistence.documents import DocumentReference, DocumentStore
from persistence.transactions import Transaction

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "users"


class DocumentService:
    """
    Async facade over one collection of a DocumentStore.

    Store calls are blocking; they run via asyncio.to_thread so callers on an
    event loop are never stalled by a disk-backed store.
    """

    def __init__(self, store: DocumentStore, collection: str = DEFAULT_COLLECTION) -> None:
        self._store = store
        self._collection = store.collection(collection)

    def _doc(self, doc_id: str) -> DocumentReference:
        return self._collection.doc(doc_id)

    async def get_data(self, doc_id: str) -> dict[str, Any] | None:
        snapshot = await asyncio.to_thread(self._doc(doc_id).get)
        return snapshot.data()

    async def get_field(self, doc_id: str, field: str) -> Any:
        snapshot = await asyncio.to_thread(self._doc(doc_id).get)
        return snapshot.get(field)

    async def list_data(self) -> list[dict[str, Any]]:
        query = await asyncio.to_thread(self._collection.get)
        return [snapshot.data() or {} for snapshot in query]

    async def set_data(self, doc_id: str, data: Mapping[str, Any]) -> None:
        await asyncio.to_thread(self._doc(doc_id).set, data)

    async def update_data(self, doc_id: str, data: Mapping[str, Any]) -> None:
        await asyncio.to_thread(self._doc(doc_id).update, data)

    async def delete_data(self, doc_id: str) -> None:
        await asyncio.to_thread(self._doc(doc_id).delete)

    async def add_data(self, data: Mapping[str, Any]) -> str:
        ref = await asyncio.to_thread(self._collection.add, data)
        return ref.id

    async def watch_data(self, doc_id: str) -> dict[str, Any] | None:
        """Current data of `doc_id`, taken as the first element of its snapshot stream."""
        async with contextlib.aclosing(self._doc(doc_id).snapshots()) as stream:
            snapshot = await anext(stream)
        return snapshot.data()

    async def watch_collection(self) -> list[dict[str, Any]]:
        async with contextlib.aclosing(self._collection.snapshots()) as stream:
            query = await anext(stream)
        return [snapshot.data() or {} for snapshot in query]

    async def merge_in_transaction(
        self,
        update_id: str,
        update: Mapping[str, Any],
        set_id: str,
        payload: Mapping[str, Any],
        delete_id: str,
    ) -> dict[str, Any]:
        """
        In one transaction: merge `update` into `update_id` (creating it if absent),
        overwrite `set_id` with `payload` and delete `delete_id`.

        Returns the merged data written to `update_id`.
        """

        def _work(tx: Transaction) -> dict[str, Any]:
            current = tx.get(self._doc(update_id)).data() or {}
            merged = {**current, **update}
            tx.set(self._doc(update_id), merged)
            tx.set(self._doc(set_id), payload)
            tx.delete(self._doc(delete_id))
            return merged

        merged = await asyncio.to_thread(self._store.run_transaction, _work)
        logger.debug("Transaction committed for %s, %s, %s", update_id, set_id, delete_id)
        return merged

    async def write_in_batch(
        self,
        update_id: str,
        update: Mapping[str, Any],
        set_id: str,
        payload: Mapping[str, Any],
        delete_id: str,
    ) -> None:
        """Same three writes as merge_in_transaction, issued blind as one batch."""
        batch = self._store.batch()
        batch.update(self._doc(update_id), update)
        batch.set(self._doc(set_id), payload)
        batch.delete(self._doc(delete_id))
        await asyncio.to_thread(batch.commit)
