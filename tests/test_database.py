"""
Reproductor - Metadata Store Tests

Tests for the aiosqlite-backed ``songs`` table: schema creation,
id assignment, natural ordering, lookups and deletes.
"""

import asyncio
import sqlite3

import pytest

from reproductor.database import MetadataStore, row_to_dict


def _with_store(db_path, body):
    """Open a store, run ``body(store)`` and always close it."""

    async def _run():
        store = MetadataStore(db_path)
        await store.open()
        try:
            return await body(store)
        finally:
            await store.close()

    return asyncio.run(_run())


class TestLifecycle:
    """Test opening and closing the store."""

    def test_open_creates_file_and_table(self, db_path):
        async def body(store):
            return store.is_open

        assert _with_store(db_path, body) is True
        assert db_path.exists()
        with sqlite3.connect(str(db_path)) as conn:
            cols = [r[1] for r in conn.execute("PRAGMA table_info(songs)")]
        assert cols == ["id", "title", "file_path"]

    def test_closed_store_refuses_queries(self, db_path):
        store = MetadataStore(db_path)
        assert store.is_open is False
        with pytest.raises(RuntimeError):
            asyncio.run(store.select_all())

    def test_close_twice_is_harmless(self, db_path):
        async def _run():
            store = MetadataStore(db_path)
            await store.open()
            await store.close()
            await store.close()
            return store.is_open

        assert asyncio.run(_run()) is False

    def test_data_survives_reopen(self, db_path):
        async def insert(store):
            return await store.insert("kept.mp3", "/uploads/1.mp3")

        async def read(store):
            return await store.select_all()

        song_id = _with_store(db_path, insert)
        rows = _with_store(db_path, read)
        assert rows == [{"id": song_id, "title": "kept.mp3", "file_path": "/uploads/1.mp3"}]


class TestCrud:
    """Test insert / select / delete."""

    def test_insert_returns_increasing_ids(self, db_path):
        async def body(store):
            a = await store.insert("a.mp3", "/uploads/a.mp3")
            b = await store.insert("b.mp3", "/uploads/b.mp3")
            return a, b

        a, b = _with_store(db_path, body)
        assert a == 1
        assert b == 2

    def test_ids_never_reused(self, db_path):
        async def body(store):
            first = await store.insert("a.mp3", "/uploads/a.mp3")
            await store.delete_by_id(first)
            await store.delete_all()
            return first, await store.insert("b.mp3", "/uploads/b.mp3")

        first, second = _with_store(db_path, body)
        assert second > first

    def test_select_all_insertion_order(self, db_path):
        async def body(store):
            for title in ["c.mp3", "a.mp3", "b.mp3"]:
                await store.insert(title, f"/uploads/{title}")
            return await store.select_all()

        rows = _with_store(db_path, body)
        assert [r["title"] for r in rows] == ["c.mp3", "a.mp3", "b.mp3"]

    def test_select_by_id(self, db_path):
        async def body(store):
            song_id = await store.insert("x.mp3", "/uploads/x.mp3")
            return await store.select_by_id(song_id), await store.select_by_id(999)

        found, missing = _with_store(db_path, body)
        assert found["title"] == "x.mp3"
        assert missing is None

    def test_title_stored_verbatim(self, db_path):
        weird = "Ñandú; DROP TABLE songs; -- 🎸 \"quoted\".mp3"

        async def body(store):
            song_id = await store.insert(weird, "/uploads/1.mp3")
            return await store.select_by_id(song_id)

        assert _with_store(db_path, body)["title"] == weird

    def test_delete_by_id_counts(self, db_path):
        async def body(store):
            song_id = await store.insert("x.mp3", "/uploads/x.mp3")
            return await store.delete_by_id(song_id), await store.delete_by_id(song_id)

        assert _with_store(db_path, body) == (1, 0)

    def test_delete_all_then_count(self, db_path):
        async def body(store):
            await store.insert("a.mp3", "/uploads/a.mp3")
            await store.insert("b.mp3", "/uploads/b.mp3")
            before = await store.count()
            await store.delete_all()
            return before, await store.count(), await store.select_all()

        assert _with_store(db_path, body) == (2, 0, [])


class TestRowToDict:
    def test_none(self):
        assert row_to_dict(None) == {}

    def test_dict_passthrough(self):
        assert row_to_dict({"id": 1}) == {"id": 1}
