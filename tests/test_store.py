import sqlite3

import numpy as np
import pytest

from lexivec_core import DecodeError, DocumentStore, StorageError, encode, open_store
from lexivec_core.config import Settings


def test_upsert_and_all_documents(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        for text in ["alpha", "beta", "gamma"]:
            store.upsert(text)
        docs = store.all_documents()
        assert [t for t, _ in docs] == ["alpha", "beta", "gamma"]
        for text, vec in docs:
            assert np.array_equal(vec, encode(text))
        assert store.count() == 3
        assert len(store) == 3


def test_upsert_same_text_keeps_one_row(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        store.upsert("I like apples")
        store.upsert("I like apples")
        docs = store.all_documents()
        assert len(docs) == 1
        assert docs[0][0] == "I like apples"
        assert np.array_equal(docs[0][1], encode("I like apples"))


def test_upsert_replaces_stale_vector(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        store.upsert("abc")
        store.conn.execute("UPDATE documents SET vector = ? WHERE text = 'abc'", (b"[0]",))
        store.conn.commit()
        store.upsert("abc")
        assert np.array_equal(store.get("abc"), encode("abc"))
        assert store.count() == 1


def test_upsert_is_case_sensitive_key(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        store.upsert("Cat")
        store.upsert("cat")
        assert store.count() == 2


def test_upsert_rejects_empty_or_non_str(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        with pytest.raises(ValueError):
            store.upsert("")
        with pytest.raises(TypeError):
            store.upsert(42)  # type: ignore[arg-type]
        assert store.count() == 0


def test_upsert_many_is_atomic(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        assert store.upsert_many(["one", "two", "one"]) == 3
        assert store.count() == 2
        with pytest.raises(ValueError):
            store.upsert_many(["three", ""])
        assert store.count() == 2


def test_get_missing_returns_none(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        assert store.get("nope") is None


def test_open_resets_existing_data(tmp_path):
    path = tmp_path / "v.db"
    with open_store(path) as store:
        store.upsert("persisted?")
    with open_store(path) as store:
        assert store.count() == 0
        assert store.all_documents() == []


def test_keep_mode_preserves_rows(tmp_path):
    path = tmp_path / "v.db"
    with open_store(path) as store:
        store.upsert("persisted")
    with open_store(path, reset_on_open=False) as store:
        assert [t for t, _ in store.all_documents()] == ["persisted"]
        store.reset()
        assert store.count() == 0


def test_schema(tmp_path):
    path = tmp_path / "v.db"
    with open_store(path) as store:
        cols = store.conn.execute("PRAGMA table_info(documents)").fetchall()
    assert [c[1] for c in cols] == ["id", "text", "vector"]


def test_corrupted_row_fails_whole_retrieval(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        store.upsert("good")
        store.upsert("bad")
        store.conn.execute("UPDATE documents SET vector = ? WHERE text = 'bad'", (b"\x00garbage",))
        store.conn.commit()
        with pytest.raises(DecodeError, match="bad"):
            store.all_documents()
        with pytest.raises(DecodeError):
            store.top_n("good", 1)


def test_wrong_dimension_row_is_corrupt(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        store.upsert("short")
        store.conn.execute("UPDATE documents SET vector = ?", (b"[1.0, 2.0]",))
        store.conn.commit()
        with pytest.raises(DecodeError):
            store.get("short")


def test_open_inaccessible_path_raises_storage_error(tmp_path):
    with pytest.raises(StorageError):
        DocumentStore(tmp_path / "missing" / "dir" / "v.db")


def test_close_is_idempotent_and_blocks_use(tmp_path):
    store = open_store(tmp_path / "v.db")
    store.upsert("x")
    store.close()
    store.close()
    assert store.closed
    with pytest.raises(StorageError):
        store.upsert("y")
    with pytest.raises(StorageError):
        store.all_documents()


def test_context_manager_closes_on_error(tmp_path):
    with pytest.raises(RuntimeError):
        with open_store(tmp_path / "v.db") as store:
            raise RuntimeError("boom")
    assert store.closed


def test_write_failure_raises_storage_error(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        store.conn.execute("DROP TABLE documents")
        with pytest.raises(StorageError):
            store.upsert("lost")


def test_default_path_from_settings(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with DocumentStore() as store:
        store.upsert("here")
    assert (tmp_path / "vector_store.db").exists()


def test_file_is_sqlite_with_json_blobs(tmp_path):
    path = tmp_path / "v.db"
    with open_store(path) as store:
        store.upsert("ab")
    conn = sqlite3.connect(path)
    try:
        (blob,) = conn.execute("SELECT vector FROM documents WHERE text = 'ab'").fetchone()
    finally:
        conn.close()
    assert bytes(blob).startswith(b"[1.0,1.0,0.0")


def test_open_store_resets_even_when_env_keeps(tmp_path, monkeypatch):
    monkeypatch.setenv("LEXIVEC_RESET_ON_OPEN", "0")
    monkeypatch.setattr("lexivec_core.store.settings", Settings())
    path = tmp_path / "v.db"
    with open_store(path) as store:
        store.upsert("old")
    with DocumentStore(path) as store:
        assert store.reset_on_open is False
        assert store.count() == 1
    with open_store(path) as store:
        assert store.count() == 0


def test_non_finite_row_fails_retrieval(tmp_path):
    with open_store(tmp_path / "v.db") as store:
        store.upsert("abc")
        blob = b"[" + b",".join([b"NaN"] + [b"0.0"] * 25) + b"]"
        store.conn.execute("UPDATE documents SET vector = ?", (blob,))
        store.conn.commit()
        with pytest.raises(DecodeError):
            store.top_n("abc", 1)
