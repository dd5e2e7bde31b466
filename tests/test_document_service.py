from __future__ import annotations

import asyncio

import pytest

from doubles import ContainsMapping, contains_mapping
from persistence.documents import DocumentStore
from persistence.errors import DocumentNotFoundError
from services.documents import DocumentService


@pytest.fixture
def service(document_store) -> DocumentService:
    return DocumentService(document_store)


def test_get_data_of_missing_document_is_none(service):
    assert asyncio.run(service.get_data("nobody")) is None
    assert asyncio.run(service.get_field("nobody", "data")) is None


def test_set_data_lands_in_the_store(service, document_store):
    asyncio.run(service.set_data("alice", {"data": "42"}))

    # assert against the fake directly, not through the service
    assert document_store.collection("users").doc("alice").get().data() == {"data": "42"}


def test_get_data_reads_arranged_state():
    store = DocumentStore.in_memory({"users": {"alice": {"data": "42"}}})
    service = DocumentService(store)

    assert asyncio.run(service.get_data("alice")) == {"data": "42"}
    assert asyncio.run(service.get_field("alice", "data")) == "42"


def test_update_data_merges(service, document_store):
    document_store.collection("users").doc("alice").set({"data": "42"})

    asyncio.run(service.update_data("alice", {"updated_data": "43"}))

    assert document_store.collection("users").doc("alice").get().data() == {"data": "42", "updated_data": "43"}


def test_update_data_of_missing_document_propagates(service):
    with pytest.raises(DocumentNotFoundError):
        asyncio.run(service.update_data("ghost", {"x": 1}))


def test_delete_data(service, document_store):
    document_store.collection("users").doc("alice").set({"data": "42"})

    asyncio.run(service.delete_data("alice"))

    assert document_store.collection("users").doc("alice").get().exists is False


def test_add_data_and_list(service, document_store):
    async def _run():
        new_id = await service.add_data({"name": "bob", "age": 30})
        listed = await service.list_data()
        return new_id, listed

    new_id, listed = asyncio.run(_run())

    assert document_store.collection("users").doc(new_id).get().exists
    # a freshly built dict is a different object; match it structurally
    assert contains_mapping(listed, {"age": 30, "name": "bob"})
    assert not contains_mapping(listed, {"name": "bob"})


def test_watch_data_returns_first_snapshot(service, document_store):
    document_store.collection("users").doc("alice").set({"data": "42"})

    assert asyncio.run(service.watch_data("alice")) == {"data": "42"}
    assert asyncio.run(service.watch_data("nobody")) is None
    assert document_store._listeners == []


def test_watch_collection(service, document_store):
    users = document_store.collection("users")
    users.doc("a").set({"n": 1})
    users.doc("b").set({"n": 2})

    result = asyncio.run(service.watch_collection())

    assert ContainsMapping({"n": 2}) == result
    assert len(result) == 2


def test_merge_in_transaction(service, document_store):
    users = document_store.collection("users")
    users.doc("first").set({"data": "42"})
    users.doc("third").set({"data": "gone"})

    merged = asyncio.run(
        service.merge_in_transaction("first", {"updated_data": "43"}, "second", {"data": "44"}, "third")
    )

    assert merged == {"data": "42", "updated_data": "43"}
    assert users.doc("first").get().data() == {"data": "42", "updated_data": "43"}
    assert users.doc("second").get().data() == {"data": "44"}
    assert users.doc("third").get().data() is None


def test_merge_in_transaction_creates_missing_first_document(service, document_store):
    merged = asyncio.run(service.merge_in_transaction("first", {"a": 1}, "second", {"b": 2}, "third"))

    assert merged == {"a": 1}
    assert document_store.collection("users").doc("first").get().data() == {"a": 1}


def test_write_in_batch(service, document_store):
    users = document_store.collection("users")
    users.doc("first").set({"data": "42"})
    users.doc("third").set({"data": "gone"})

    asyncio.run(service.write_in_batch("first", {"updated_data": "43"}, "second", {"data": "44"}, "third"))

    assert users.doc("first").get().data() == {"data": "42", "updated_data": "43"}
    assert users.doc("second").get().data() == {"data": "44"}
    assert users.doc("third").get().data() is None


def test_custom_collection(document_store):
    service = DocumentService(document_store, collection="notes")
    asyncio.run(service.set_data("n1", {"text": "hi"}))

    assert document_store.collection("notes").doc("n1").get().exists
    assert document_store.collection("users").get().empty
