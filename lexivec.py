# lexivec.py — command-line front end for the letter-frequency vector store.
# Upserts the given documents, then prints the top-N matches for each query.
# With no documents and no queries, runs the built-in demo.

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence

from lexivec_core import CodecError, StorageError, open_store, settings
from logging_utils import get_logger

logger = get_logger("lexivec")

DEMO_DOCUMENTS = ["I like apples", "I like pears", "I like dogs", "I like cats"]
DEMO_QUERIES = [("I like apples", 1), ("animal", 2)]


def _format_hits(hits: Sequence[tuple[str, float]]) -> str:
    return "[" + ", ".join(f"{text}={score}" for text, score in hits) + "]"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="lexivec (bag-of-letters vector store)")
    parser.add_argument("docs", nargs="*", help="documents to upsert")
    parser.add_argument("--db", default=settings.db_path, help="SQLite database path")
    parser.add_argument("--query", "-q", action="append", default=[], help="query text (repeatable)")
    parser.add_argument("--top", "-n", type=int, default=settings.default_top_n, help="results per query")
    parser.add_argument("--keep", action="store_true", help="keep rows from earlier runs")
    return parser


def run(db_path: str, docs: List[str], queries: List[tuple[str, int]], keep: bool = False) -> List[str]:
    lines: List[str] = []
    with open_store(db_path, reset_on_open=not keep) as store:
        store.upsert_many(docs)
        for query, n in queries:
            lines.append(_format_hits(store.top_n(query, n)))
    return lines


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.top < 0:
        parser.error("--top must be >= 0")
    docs = list(args.docs)
    if not all(docs):
        parser.error("documents must be non-empty")
    queries = [(q, args.top) for q in args.query]
    if not docs and not queries:
        docs, queries = list(DEMO_DOCUMENTS), list(DEMO_QUERIES)
    try:
        lines = run(args.db, docs, queries, keep=args.keep)
    except (StorageError, CodecError) as exc:
        logger.error("lexivec failed: %s", exc, extra={"db_path": args.db})
        return 1
    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
