from __future__ import annotations

from typing import Iterable

import numpy as np

DIM = 26
_ORD_A = ord("a")


def encode(text: str) -> np.ndarray:
    """Return per-letter counts of ``text`` as a ``(26,)`` float64 vector.

    Only ``a``-``z`` (after lowercasing) contribute; everything else,
    including non-Latin letters, is dropped.
    """
    vec = np.zeros(DIM, dtype=np.float64)
    for ch in text.lower():
        idx = ord(ch) - _ORD_A
        if 0 <= idx < DIM:
            vec[idx] += 1.0
    return vec


def encode_many(texts: Iterable[str]) -> np.ndarray:
    rows = [encode(t) for t in texts]
    if not rows:
        return np.empty((0, DIM), dtype=np.float64)
    return np.vstack(rows)


__all__ = ["DIM", "encode", "encode_many"]
