"""Tests for the SQLite document store and change feed."""

import asyncio
import json
from datetime import datetime, timezone

import aiosqlite
import pytest

from fastwell.db import DocumentStore, init_db
from fastwell.exceptions import DocumentNotFoundError, InvalidInputError
from fastwell.services.channels import ChangeFeed


class TestDocumentStore:
    """Tests for DocumentStore CRUD and queries."""

    def test_create_and_get(self, store):
        async def run():
            doc_id = await store.create("notes", {"userId": "u1", "text": "hello"})
            return doc_id, await store.get("notes", doc_id)

        doc_id, doc = asyncio.run(run())

        assert doc == {"userId": "u1", "text": "hello", "id": doc_id}

    def test_get_missing_returns_none(self, store):
        assert asyncio.run(store.get("notes", "missing")) is None

    def test_create_duplicate_id_rejected(self, store):
        async def run():
            await store.create("notes", {"text": "a"}, doc_id="fixed")
            await store.create("notes", {"text": "b"}, doc_id="fixed")

        with pytest.raises(InvalidInputError):
            asyncio.run(run())

    def test_datetimes_stored_as_utc_strings(self, store):
        async def run():
            doc_id = await store.create(
                "notes", {"at": datetime(2024, 6, 15, 8, 0, tzinfo=timezone.utc)}
            )
            return await store.get("notes", doc_id)

        assert asyncio.run(run())["at"] == "2024-06-15T08:00:00.000+00:00"

    def test_set_merges_nested_objects(self, store):
        async def run():
            await store.set("profiles", "u1", {"uid": "u1", "prefs": {"a": 1, "b": 2}})
            await store.set("profiles", "u1", {"prefs": {"b": 3}, "goal": 16})
            return await store.get("profiles", "u1")

        doc = asyncio.run(run())

        assert doc["prefs"] == {"a": 1, "b": 3}
        assert doc["goal"] == 16
        assert doc["uid"] == "u1"

    def test_set_without_merge_replaces(self, store):
        async def run():
            await store.set("profiles", "u1", {"uid": "u1", "goal": 16})
            await store.set("profiles", "u1", {"uid": "u1"}, merge=False)
            return await store.get("profiles", "u1")

        assert "goal" not in asyncio.run(run())

    def test_update_missing_raises(self, store):
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(store.update("notes", "missing", {"text": "x"}))

    def test_query_filters_order_and_limit(self, store):
        async def run():
            for i, user in enumerate(["u1", "u2", "u1", "u1"]):
                await store.create("items", {"userId": user, "rank": i, "kind": "a"})
            return await store.query(
                "items", [("userId", "==", "u1")], order_by="rank", descending=True, limit=2
            )

        docs = asyncio.run(run())

        assert [d["rank"] for d in docs] == [3, 2]

    def test_query_null_filter(self, store):
        async def run():
            await store.create("items", {"endTime": None})
            await store.create("items", {"endTime": "2024-06-15T08:00:00.000+00:00"})
            return (
                await store.count("items", [("endTime", "==", None)]),
                await store.count("items", [("endTime", "!=", None)]),
            )

        assert asyncio.run(run()) == (1, 1)

    def test_query_rejects_bad_field_names(self, store):
        with pytest.raises(InvalidInputError):
            asyncio.run(store.query("items", [("x') OR 1=1 --", "==", 1)]))

    def test_query_rejects_unknown_operator(self, store):
        with pytest.raises(InvalidInputError):
            asyncio.run(store.query("items", [("rank", "~", 1)]))

    def test_collections_are_isolated(self, store):
        async def run():
            await store.create("a", {"x": 1})
            return await store.count("b")

        assert asyncio.run(run()) == 0


class TestSubscriptions:
    """Tests for document subscriptions and the change feed."""

    def test_subscribe_delivers_current_then_changes(self, store):
        async def run():
            seen = []
            doc_id = await store.create("jobs", {"status": "pending"})
            subscription = await store.subscribe("jobs", doc_id, seen.append)
            await store.update("jobs", doc_id, {"status": "done"})
            subscription.unsubscribe()
            await store.update("jobs", doc_id, {"status": "ignored"})
            return seen

        seen = asyncio.run(run())

        assert [doc["status"] for doc in seen] == ["pending", "done"]

    def test_failing_callback_does_not_block_others(self):
        feed = ChangeFeed()
        seen = []

        def broken(doc):
            raise RuntimeError("boom")

        feed.subscribe("jobs", "1", broken)
        feed.subscribe("jobs", "1", seen.append)
        feed.publish("jobs", "1", {"status": "done"})

        assert seen == [{"status": "done"}]

    def test_unsubscribe_removes_channel(self):
        feed = ChangeFeed()
        subscription = feed.subscribe("jobs", "1", lambda doc: None)
        assert feed.subscriber_count("jobs", "1") == 1

        subscription.unsubscribe()
        subscription.unsubscribe()

        assert feed.subscriber_count("jobs", "1") == 0

    def test_listen_unsubscribes_when_closed(self):
        async def run():
            feed = ChangeFeed()
            stream = feed.listen("jobs", "1")
            pending = asyncio.ensure_future(stream.__anext__())
            await asyncio.sleep(0)
            feed.publish("jobs", "1", {"status": "done"})
            first = await pending
            await stream.aclose()
            return first, feed.subscriber_count("jobs", "1")

        first, remaining = asyncio.run(run())

        assert first == {"status": "done"}
        assert remaining == 0


class TestMigrations:
    """Tests for init_db migrations."""

    def test_unversioned_documents_are_stamped(self, temp_db_path):
        async def run():
            await init_db(temp_db_path)
            async with aiosqlite.connect(temp_db_path) as db:
                await db.execute(
                    "INSERT INTO documents (collection, id, data) VALUES (?, ?, ?)",
                    ("fasting_sessions", "old", json.dumps({"userId": "u1"})),
                )
                await db.commit()
            await init_db(temp_db_path)
            return await DocumentStore(temp_db_path).get("fasting_sessions", "old")

        assert asyncio.run(run())["schemaVersion"] == 1

    def test_init_db_is_idempotent(self, temp_db_path):
        async def run():
            await init_db(temp_db_path)
            store = DocumentStore(temp_db_path)
            doc_id = await store.create("notes", {"text": "keep"})
            await init_db(temp_db_path)
            return await store.get("notes", doc_id)

        assert asyncio.run(run())["text"] == "keep"
