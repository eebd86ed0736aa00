from __future__ import annotations

from typing import Iterable, List, Protocol, Sequence, Tuple

import numpy as np

from logging_utils import get_logger

from .encoder import encode

logger = get_logger(__name__)


class SupportsDocuments(Protocol):
    def all_documents(self) -> Sequence[Tuple[str, np.ndarray]]: ...


def cosine_similarity(u: np.ndarray, v: np.ndarray) -> float:
    """Cosine of the angle between ``u`` and ``v``.

    A zero-magnitude operand scores 0.0, never NaN.
    """
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    if u.shape != v.shape:
        raise ValueError(f"shape mismatch: {u.shape} vs {v.shape}")
    norm_sq = float(np.dot(u, u)) * float(np.dot(v, v))
    if norm_sq == 0.0:
        return 0.0
    # sqrt of the product keeps self-similarity exactly 1.0 for integer counts
    return float(np.dot(u, v)) / float(np.sqrt(norm_sq))


def rank(
    query_vector: np.ndarray,
    documents: Iterable[Tuple[str, np.ndarray]],
    n: int,
) -> List[Tuple[str, float]]:
    """Score ``documents`` against ``query_vector`` and keep the best ``n``.

    The sort is stable, so equal scores keep scan order.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    scored = [(text, cosine_similarity(query_vector, vec)) for text, vec in documents]
    scored.sort(key=lambda kv: kv[1], reverse=True)
    return scored[:n]


def top_n(store: SupportsDocuments, query_text: str, n: int) -> List[Tuple[str, float]]:
    logger.debug("top_n query=%s", query_text, extra={"n": n})
    return rank(encode(query_text), store.all_documents(), n)


__all__ = ["cosine_similarity", "rank", "top_n"]
