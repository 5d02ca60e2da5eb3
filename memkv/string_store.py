"""String store: scalar string values with optional TTL."""

from memkv.storage_engine import TTLStore


class StringStore(TTLStore[str]):
    """
    Thread-safe store of string values.

    Example:
        >>> store = StringStore()
        >>> store.set("greeting", "hello", ttl=60)
        >>> store.get("greeting").value
        'hello'
    """

    name = "strings"
