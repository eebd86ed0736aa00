from __future__ import annotations

from .codec import CodecError, DecodeError, deserialize, serialize
from .config import ConfigError, Settings, settings
from .encoder import DIM, encode, encode_many
from .ranker import cosine_similarity, rank, top_n
from .store import DocumentStore, StorageError, open_store

__all__ = [
    "CodecError",
    "DecodeError",
    "deserialize",
    "serialize",
    "ConfigError",
    "Settings",
    "settings",
    "DIM",
    "encode",
    "encode_many",
    "cosine_similarity",
    "rank",
    "top_n",
    "DocumentStore",
    "StorageError",
    "open_store",
]
