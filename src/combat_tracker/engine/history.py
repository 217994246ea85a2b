"""Bounded undo/redo history over a single persisted value.

A HistoryStore owns one value (the roster or the encounter). Every change
goes through ``set``, ``undo`` or ``redo``; each committed change writes
the new present through the versioned store and notifies subscribers.
History is linear: a new edit discards the redo stack.

Example:
    >>> from combat_tracker.storage import MemoryStorage, VersionedStore
    >>> store = HistoryStore(VersionedStore(MemoryStorage()), "sct.counter", lambda: 0)
    >>> store.set(lambda prev: prev + 1)
    True
    >>> store.undo(), store.present
    (True, 0)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pydantic import TypeAdapter

from combat_tracker.core.constants import MAX_HISTORY
from combat_tracker.core.logging import get_logger
from combat_tracker.storage.versioned import VersionedStore

logger = get_logger(__name__)

T = TypeVar("T")

Subscriber = Callable[[Any], None]


@dataclass(frozen=True)
class HistoryState(Generic[T]):
    """Snapshot of a store's history.

    Attributes:
        past: Prior values, oldest first.
        present: Current value.
        future: Values available for redo, most recent undo first.
    """

    past: tuple[T, ...]
    present: T
    future: tuple[T, ...]


class HistoryStore(Generic[T]):
    """Undo/redo log over one value, persisted on every committed change.

    Attributes:
        key: Logical storage key of the value.
        limit: Maximum length of the past stack.
    """

    def __init__(
        self,
        storage: VersionedStore,
        key: str,
        default_factory: Callable[[], T],
        adapter: TypeAdapter[T] | None = None,
        *,
        limit: int = MAX_HISTORY,
    ) -> None:
        """Load the initial present from storage.

        Nothing is written on construction.

        Args:
            storage: Versioned store used for load and save.
            key: Logical storage key.
            default_factory: Builds the value used when nothing is stored.
            adapter: Validates and serialises the value.
            limit: Maximum number of past entries kept.
        """
        self._storage = storage
        self.key = key
        self._adapter = adapter
        self.limit = limit
        self._past: list[T] = []
        self._present: T = storage.load(key, default_factory, adapter)
        self._future: list[T] = []
        self._subscribers: list[Subscriber] = []

    # =========================================================================
    # Read Access
    # =========================================================================

    @property
    def present(self) -> T:
        return self._present

    @property
    def state(self) -> HistoryState[T]:
        return HistoryState(
            past=tuple(self._past),
            present=self._present,
            future=tuple(self._future),
        )

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    # =========================================================================
    # Transitions
    # =========================================================================

    def set(self, value: T | Callable[[T], T]) -> bool:
        """Replace the present value.

        Args:
            value: The new value, or a function of the current value.

        Returns:
            True if the present changed; False for a no-op, which adds no
            history entry and performs no write.
        """
        candidate = value(self._present) if callable(value) else value
        if candidate is self._present or candidate == self._present:
            return False

        self._past.append(self._present)
        if len(self._past) > self.limit:
            del self._past[: len(self._past) - self.limit]
        self._present = candidate
        self._future.clear()

        logger.debug("History set", key=self.key, past=len(self._past))
        self._commit()
        return True

    def undo(self) -> bool:
        """Step back one entry. Returns False when there is nothing to undo."""
        if not self._past:
            return False
        self._future.insert(0, self._present)
        self._present = self._past.pop()

        logger.debug("History undo", key=self.key, past=len(self._past), future=len(self._future))
        self._commit()
        return True

    def redo(self) -> bool:
        """Step forward one entry. Returns False when there is nothing to redo."""
        if not self._future:
            return False
        self._past.append(self._present)
        self._present = self._future.pop(0)

        logger.debug("History redo", key=self.key, past=len(self._past), future=len(self._future))
        self._commit()
        return True

    def _commit(self) -> None:
        self._storage.save(self.key, self._present, self._adapter)
        for callback in list(self._subscribers):
            callback(self._present)

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback(present)`` after every committed change.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


__all__ = [
    "HistoryState",
    "HistoryStore",
]
