"""
MemKV Store Errors

Typed outcomes of store operations. None of these indicate corrupted state;
callers map them to user-facing responses.
"""


class StoreError(Exception):
    """Base class for all store operation failures."""

    message = "store error"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"{self.message}: {key}")


class AlreadyExistsError(StoreError):
    """Insert attempted on a key that already holds an entry."""

    message = "key already exists"


class NotFoundError(StoreError):
    """Operation on a key that holds no entry."""

    message = "key not found"


class ExpiredError(StoreError):
    """Read found an entry past its expiry. The entry has been removed."""

    message = "key expired"


class EmptyListError(StoreError):
    """Pop attempted on a list with no elements."""

    message = "list is empty"


class InvalidTTLError(StoreError):
    """TTL is not a finite number of seconds within the supported range."""

    message = "invalid ttl"
