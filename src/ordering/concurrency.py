"""Per-aggregate serialisation of read-modify-write spans.

Cart mutations, order assembly, and the paid transition each read an
aggregate, change it in memory, and write it back in one unit of work. Two
requests doing that to the same cart or order at the same time would lose an
update, so callers hold the aggregate's key for the whole span, including the
commit.

Keys are plain strings such as ``owner:<id>`` or ``order:<id>``. Multiple keys
are always acquired in sorted order.
"""

import threading
from contextlib import ExitStack, contextmanager


def product_key(product_id) -> str:
    return f"product:{product_id}"


def order_key(order_id) -> str:
    return f"order:{order_id}"


def owner_key(owner_id) -> str:
    """Key for a cart owner, used while the cart itself may not exist yet."""
    return f"owner:{owner_id}"


class KeyedLocks:
    """A registry of re-entrant locks created on demand and dropped when idle."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._holders: dict[str, int] = {}

    def _checkout(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            self._holders[key] = self._holders.get(key, 0) + 1
            return lock

    def _release(self, key: str) -> None:
        with self._guard:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    @contextmanager
    def _hold_one(self, key: str):
        lock = self._checkout(key)
        try:
            with lock:
                yield
        finally:
            self._release(key)

    @contextmanager
    def hold(self, *keys: str):
        """Hold every given key until the block exits."""
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self._hold_one(key))
            yield

    def active_keys(self) -> set[str]:
        with self._guard:
            return set(self._locks)


_current_locks: KeyedLocks | None = None


def get_locks() -> KeyedLocks:
    """Return the active lock registry, creating one on first use."""
    global _current_locks
    if _current_locks is None:
        _current_locks = KeyedLocks()
    return _current_locks


def set_locks(locks: KeyedLocks) -> None:
    """Swap the lock registry (one per worker process, or per test)."""
    global _current_locks
    _current_locks = locks


def reset_locks() -> None:
    global _current_locks
    _current_locks = None
