"""JSON codec for vectors stored as SQLite blobs.

Vectors are written as a UTF-8 JSON array of numbers. Python emits the
shortest repr that round-trips a double, so decoding yields bit-identical
values.
"""

from __future__ import annotations

import json
import math
from numbers import Real
from typing import Sequence

import numpy as np


class CodecError(RuntimeError):
    """Raised when a vector cannot be serialized or deserialized."""


class DecodeError(CodecError):
    """Raised when stored bytes do not describe a list of numbers."""


def _is_number(x: object) -> bool:
    return isinstance(x, Real) and not isinstance(x, (bool, np.bool_))


def serialize(vector: Sequence[float] | np.ndarray) -> bytes:
    arr = np.asarray(vector)
    if arr.ndim != 1:
        raise CodecError(f"expected a 1-D vector, got shape {arr.shape}")
    if arr.dtype.kind not in "iuf":
        raise CodecError(f"expected numeric values, got dtype {arr.dtype}")
    values = [float(x) for x in arr.tolist()]
    if not all(math.isfinite(x) for x in values):
        raise CodecError("vector contains NaN or infinite values")
    return json.dumps(values, separators=(",", ":"), allow_nan=False).encode("utf-8")


def _reject_constant(name: str) -> float:
    raise DecodeError(f"non-finite value {name} in vector blob")


def deserialize(blob: bytes, dim: int | None = None) -> np.ndarray:
    try:
        data = json.loads(bytes(blob).decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError, TypeError) as exc:
        raise DecodeError(f"malformed vector blob: {exc}") from exc
    if not isinstance(data, list) or not all(_is_number(x) for x in data):
        raise DecodeError("vector blob is not a flat list of numbers")
    if dim is not None and len(data) != dim:
        raise DecodeError(f"expected {dim} values, got {len(data)}")
    try:
        arr = np.array(data, dtype=np.float64)
    except OverflowError as exc:
        raise DecodeError(f"value out of float range: {exc}") from exc
    if not np.isfinite(arr).all():
        raise DecodeError("vector blob contains non-finite values")
    return arr


__all__ = ["CodecError", "DecodeError", "serialize", "deserialize"]
