"""MemKV - in-memory string and list store with TTL, served over HTTP."""

from memkv.errors import (
    AlreadyExistsError,
    EmptyListError,
    ExpiredError,
    InvalidTTLError,
    NotFoundError,
    StoreError,
)
from memkv.list_store import ListStore
from memkv.string_store import StringStore

__all__ = [
    "StringStore",
    "ListStore",
    "StoreError",
    "AlreadyExistsError",
    "NotFoundError",
    "ExpiredError",
    "EmptyListError",
    "InvalidTTLError",
]
