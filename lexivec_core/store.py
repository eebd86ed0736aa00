from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import numpy as np

from logging_utils import get_logger

from . import ranker
from .codec import DecodeError, deserialize, serialize
from .config import settings
from .encoder import DIM, encode

logger = get_logger(__name__)

_CREATE_SQL = (
    "CREATE TABLE IF NOT EXISTS documents("
    "id INTEGER PRIMARY KEY, "
    "text TEXT NOT NULL UNIQUE, "
    "vector BLOB NOT NULL)"
)
_UPSERT_SQL = (
    "INSERT INTO documents(text, vector) VALUES (?, ?) "
    "ON CONFLICT(text) DO UPDATE SET vector = excluded.vector"
)


class StorageError(RuntimeError):
    """Raised when the backing SQLite file cannot be opened, read or written."""


def _check_text(text: str) -> None:
    if not isinstance(text, str):
        raise TypeError(f"document text must be str, got {type(text).__name__}")
    if not text:
        raise ValueError("document text must be non-empty")


class DocumentStore:
    """SQLite-backed mapping from document text to its letter vector.

    The store owns a single connection from construction until :meth:`close`.
    Use it as a context manager to release the connection on every exit path.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Defaults to ``settings.db_path``.
    reset_on_open:
        Drop any existing ``documents`` table before creating it. Defaults to
        ``settings.reset_on_open`` (true), so every open starts empty and data
        from earlier runs is discarded. Pass ``False`` to keep existing rows.
    check_same_thread:
        Passed to :func:`sqlite3.connect`.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        reset_on_open: bool | None = None,
        *,
        check_same_thread: bool = True,
    ) -> None:
        self.db_path = str(db_path if db_path is not None else settings.db_path)
        self.reset_on_open = settings.reset_on_open if reset_on_open is None else reset_on_open
        self.conn: Optional[sqlite3.Connection] = None
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=check_same_thread)
            self.conn.execute(f"PRAGMA journal_mode={settings.journal_mode};")
            self._init_db(drop=self.reset_on_open)
        except sqlite3.Error as exc:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
            raise StorageError(f"cannot open vector store at {self.db_path!r}: {exc}") from exc
        logger.info(
            "opened vector store (reset_on_open=%s)",
            self.reset_on_open,
            extra={"db_path": self.db_path},
        )

    def close(self) -> None:
        if self.conn is None:
            return
        self.conn.close()
        self.conn = None
        logger.info("closed vector store", extra={"db_path": self.db_path})

    @property
    def closed(self) -> bool:
        return self.conn is None

    def __enter__(self) -> "DocumentStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return self.count()

    # -- database -------------------------------------------------------------
    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StorageError("vector store is closed")
        return self.conn

    def _init_db(self, drop: bool) -> None:
        conn = self._require_conn()
        with conn:
            if drop:
                conn.execute("DROP TABLE IF EXISTS documents")
            conn.execute(_CREATE_SQL)

    def reset(self) -> None:
        """Discard every document and recreate an empty table."""
        try:
            self._init_db(drop=True)
        except sqlite3.Error as exc:
            raise StorageError(f"cannot reset vector store: {exc}") from exc
        logger.info("reset vector store", extra={"db_path": self.db_path})

    # -- writes ---------------------------------------------------------------
    def upsert(self, text: str) -> None:
        """Insert ``text`` or replace the vector already stored for it."""
        _check_text(text)
        blob = serialize(encode(text))
        conn = self._require_conn()
        try:
            with conn:
                conn.execute(_UPSERT_SQL, (text, sqlite3.Binary(blob)))
        except sqlite3.Error as exc:
            raise StorageError(f"upsert failed: {exc}") from exc
        logger.debug("upserted %s", text, extra={"db_path": self.db_path})

    def upsert_many(self, texts: Iterable[str]) -> int:
        """Upsert all ``texts`` in one transaction; returns how many were written."""
        texts = list(texts)
        for text in texts:
            _check_text(text)
        rows = [(t, sqlite3.Binary(serialize(encode(t)))) for t in texts]
        conn = self._require_conn()
        try:
            with conn:
                conn.executemany(_UPSERT_SQL, rows)
        except sqlite3.Error as exc:
            raise StorageError(f"batch upsert failed: {exc}") from exc
        logger.debug("upserted %s documents", len(rows), extra={"db_path": self.db_path})
        return len(rows)

    # -- reads ----------------------------------------------------------------
    def _query(self, sql: str, params: tuple = ()) -> list:
        conn = self._require_conn()
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"query failed: {exc}") from exc

    def _decode(self, text: str, blob: bytes) -> np.ndarray:
        try:
            return deserialize(blob, dim=DIM)
        except DecodeError as exc:
            logger.error("corrupted vector for %s", text, extra={"db_path": self.db_path})
            raise DecodeError(f"corrupted vector for document {text!r}: {exc}") from exc

    def count(self) -> int:
        return int(self._query("SELECT COUNT(*) FROM documents")[0][0])

    def get(self, text: str) -> Optional[np.ndarray]:
        rows = self._query("SELECT vector FROM documents WHERE text = ?", (text,))
        if not rows:
            return None
        return self._decode(text, rows[0][0])

    def all_documents(self) -> List[Tuple[str, np.ndarray]]:
        """Return every ``(text, vector)`` pair.

        A single corrupted row fails the whole call with :class:`DecodeError`.
        """
        rows = self._query("SELECT text, vector FROM documents ORDER BY id")
        return [(text, self._decode(text, blob)) for text, blob in rows]

    # -- search ---------------------------------------------------------------
    def top_n(self, query_text: str, n: int | None = None) -> List[Tuple[str, float]]:
        if n is None:
            n = settings.default_top_n
        return ranker.top_n(self, query_text, n)


def open_store(
    path: str | Path | None = None,
    reset_on_open: bool = True,
    *,
    check_same_thread: bool = True,
) -> DocumentStore:
    """Open the store at ``path``, emptying it unless ``reset_on_open=False``.

    Unlike :class:`DocumentStore`, the reset default here ignores
    ``LEXIVEC_RESET_ON_OPEN``; keeping rows must be asked for explicitly.
    """
    return DocumentStore(path, reset_on_open, check_same_thread=check_same_thread)


__all__ = ["StorageError", "DocumentStore", "open_store"]
