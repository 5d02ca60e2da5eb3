"""
Storage Engine - shared core of the string and list stores

Layout:
- Entry: one stored value plus its optional expiry
- ReadWriteLock: many readers OR one writer, per store
- Four map primitives (insert/read/overwrite/delete) that every store
  operation is built from
- TTLStore: the lazily-expiring store both concrete stores derive from

Expiry is never swept in the background. An expired entry stays in the map
until the next access to its key removes it.
"""

import copy
import logging
import math
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Generic, Iterator, Optional, TypeVar

from memkv.errors import AlreadyExistsError, ExpiredError, InvalidTTLError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Ten years; keeps expires_at within datetime range.
MAX_TTL_SECONDS = 10 * 365 * 24 * 3600


@dataclass
class Entry(Generic[T]):
    """
    A stored value with optional expiry.

    expires_at is the wall-clock time reported to clients. deadline is the
    same instant on the monotonic clock and is what expiry checks use, so
    system clock adjustments cannot expire or resurrect a key.
    """
    value: T
    expires_at: Optional[datetime] = None
    deadline: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.deadline is not None and now >= self.deadline

    def copy(self) -> "Entry[T]":
        return Entry(copy.copy(self.value), self.expires_at, self.deadline)


class ReadWriteLock:
    """
    Reader/writer lock.

    Any number of readers may hold the lock together; a writer holds it
    alone. Waiting writers block new readers so a steady read load cannot
    starve mutations. Not reentrant.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_lock(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


# ============================================================================
# Map primitives
#
# Callers hold the owning store's lock for the duration of each call.
# ============================================================================

def insert_if_absent(data: Dict[str, Entry[T]], key: str, entry: Entry[T]) -> None:
    """Store entry under key. Raises AlreadyExistsError if key is taken."""
    if key in data:
        raise AlreadyExistsError(key)
    data[key] = entry


def read(data: Dict[str, Entry[T]], key: str) -> Entry[T]:
    """Return a copy of the entry under key. Raises NotFoundError."""
    try:
        return data[key].copy()
    except KeyError:
        raise NotFoundError(key) from None


def overwrite_if_present(data: Dict[str, Entry[T]], key: str, value: T) -> None:
    """Replace the value under key, keeping its expiry. Raises NotFoundError."""
    entry = data.get(key)
    if entry is None:
        raise NotFoundError(key)
    entry.value = value


def delete_if_present(data: Dict[str, Entry[T]], key: str) -> None:
    """Remove the entry under key. Raises NotFoundError."""
    try:
        del data[key]
    except KeyError:
        raise NotFoundError(key) from None


@dataclass
class StoreStats:
    """Operation counters for monitoring."""
    sets: int = 0
    gets: int = 0
    updates: int = 0
    removes: int = 0
    expirations: int = 0
    extra: Dict[str, int] = field(default_factory=dict)


class TTLStore(Generic[T]):
    """
    Lazily-expiring key/value store over one value type.

    Reads take the shared lock; every mutation takes the exclusive lock for
    its whole duration. Subclasses add type-specific operations and may
    override _own() to control how caller values are taken into the store.
    """

    name = "store"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Monotonic time source in seconds, used for expiry checks
        """
        self._data: Dict[str, Entry[T]] = {}
        self._lock = ReadWriteLock()
        self._clock = clock
        self._stats = StoreStats()
        self._stats_lock = threading.Lock()

    def _own(self, value: T) -> T:
        """Return the object to store for a caller-supplied value."""
        return value

    def _count(self, counter: str, amount: int = 1) -> None:
        with self._stats_lock:
            if hasattr(self._stats, counter):
                setattr(self._stats, counter, getattr(self._stats, counter) + amount)
            else:
                self._stats.extra[counter] = self._stats.extra.get(counter, 0) + amount

    def _new_entry(self, key: str, value: T, ttl: Optional[float]) -> Entry[T]:
        if ttl is None:
            return Entry(self._own(value))
        if not math.isfinite(ttl) or ttl > MAX_TTL_SECONDS:
            raise InvalidTTLError(key)
        if ttl <= 0:
            return Entry(self._own(value))
        return Entry(
            self._own(value),
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=ttl),
            deadline=self._clock() + ttl,
        )

    def _purge_if_expired(self, key: str) -> bool:
        """Drop the entry under key if it has expired. Write lock must be held."""
        entry = self._data.get(key)
        if entry is None or not entry.is_expired(self._clock()):
            return False
        delete_if_present(self._data, key)
        self._count("expirations")
        logger.debug("%s: expired key %r removed", self.name, key)
        return True

    def _live_entry(self, key: str) -> Entry[T]:
        """
        Return the stored (not copied) entry for key. Write lock must be held.

        An expired entry is removed and reported as missing.
        """
        if self._purge_if_expired(key) or key not in self._data:
            raise NotFoundError(key)
        return self._data[key]

    def set(self, key: str, value: T, ttl: Optional[float] = 0) -> None:
        """
        Insert a new key.

        Args:
            key: Non-empty key
            value: Value to store
            ttl: Seconds until expiry; zero, negative or None means never

        Raises:
            AlreadyExistsError: key holds a live entry
            InvalidTTLError: ttl is not finite or exceeds MAX_TTL_SECONDS
        """
        entry = self._new_entry(key, value, ttl)
        with self._lock.write_lock():
            self._purge_if_expired(key)
            insert_if_absent(self._data, key, entry)
        self._count("sets")

    def get(self, key: str) -> Entry[T]:
        """
        Return a copy of the entry under key.

        Raises:
            NotFoundError: key holds no entry
            ExpiredError: entry had expired; it has been removed
        """
        with self._lock.read_lock():
            entry = read(self._data, key)
        self._count("gets")

        if entry.is_expired(self._clock()):
            self._discard_expired(key)
            raise ExpiredError(key)

        return entry

    def _discard_expired(self, key: str) -> None:
        # A concurrent reader may already have removed the entry, or a writer
        # may have replaced it with a live one. Both leave nothing to do.
        with self._lock.write_lock():
            entry = self._data.get(key)
            if entry is None or not entry.is_expired(self._clock()):
                return
            delete_if_present(self._data, key)
        self._count("expirations")
        logger.debug("%s: expired key %r removed on read", self.name, key)

    def update(self, key: str, value: T) -> None:
        """
        Replace the value under key. The original expiry is kept.

        Raises:
            NotFoundError: key holds no live entry
        """
        with self._lock.write_lock():
            self._live_entry(key)
            overwrite_if_present(self._data, key, self._own(value))
        self._count("updates")

    def remove(self, key: str) -> None:
        """
        Delete key.

        Raises:
            NotFoundError: key holds no live entry
        """
        with self._lock.write_lock():
            self._live_entry(key)
            delete_if_present(self._data, key)
        self._count("removes")

    def info(self) -> Dict[str, Any]:
        """Key counts and operation counters."""
        now = self._clock()
        with self._lock.read_lock():
            stored = len(self._data)
            live = sum(1 for entry in self._data.values() if not entry.is_expired(now))

        with self._stats_lock:
            info = {
                "store": self.name,
                "keys": live,
                "stored_keys": stored,
                "sets_total": self._stats.sets,
                "gets_total": self._stats.gets,
                "updates_total": self._stats.updates,
                "removes_total": self._stats.removes,
                "expirations_total": self._stats.expirations,
            }
            for counter, value in self._stats.extra.items():
                info[f"{counter}_total"] = value

        return info
