"""Schema-versioned key/value persistence.

VersionedStore embeds a schema version token in every physical key and
migrates values written under the older unversioned key exactly once.

Example:
    >>> from combat_tracker.storage.backends import MemoryStorage
    >>> store = VersionedStore(MemoryStorage())
    >>> store.versioned_key("sct.characters")
    'sct.v1.characters'
"""

from __future__ import annotations

import json
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from combat_tracker.core.constants import STORAGE_VERSION
from combat_tracker.core.exceptions import StorageError
from combat_tracker.core.logging import get_logger
from combat_tracker.storage.backends import StoragePort

logger = get_logger(__name__)

T = TypeVar("T")


class VersionedStore:
    """Load and save JSON values under version-qualified keys.

    Attributes:
        port: The underlying key/value port.
        version: Schema version embedded in every physical key.
    """

    def __init__(self, port: StoragePort, *, version: int = STORAGE_VERSION) -> None:
        self.port = port
        self.version = version

    def versioned_key(self, key: str) -> str:
        """Derive the physical key for a logical key.

        The version token goes after the first dotted namespace, or in
        front of a key that has none.
        """
        token = f"v{self.version}"
        namespace, sep, rest = key.partition(".")
        if sep and namespace and rest:
            return f"{namespace}.{token}.{rest}"
        return f"{token}.{key}"

    # =========================================================================
    # Load
    # =========================================================================

    def load(
        self,
        key: str,
        default_factory: Callable[[], T],
        adapter: TypeAdapter[T] | None = None,
    ) -> T:
        """Read the value stored under ``key``.

        Falls back to the legacy unversioned key once, copying it forward.
        Returns ``default_factory()`` when nothing usable is stored.

        Args:
            key: Logical key (e.g. ``"sct.encounter"``).
            default_factory: Builds the value used when nothing is stored.
            adapter: Validates the decoded JSON into the target type.

        Returns:
            The stored value or the default.
        """
        physical = self.versioned_key(key)
        try:
            raw = self.port.get(physical)
        except StorageError as exc:
            logger.warning("Storage read failed", key=physical, error=str(exc))
            return default_factory()

        if raw is not None:
            try:
                return self._decode(raw, adapter)
            except (ValueError, PydanticValidationError) as exc:
                logger.warning("Failed to parse stored value", key=physical, error=str(exc))
                return default_factory()

        migrated = self._migrate(key, physical, adapter)
        if migrated is not None:
            return migrated[0]

        logger.debug("No stored value, using default", key=physical)
        return default_factory()

    def _decode(self, raw: str, adapter: TypeAdapter[T] | None) -> T:
        data = json.loads(raw)
        if adapter is None:
            return data
        return adapter.validate_python(data)

    def _migrate(
        self,
        legacy_key: str,
        physical: str,
        adapter: TypeAdapter[T] | None,
    ) -> tuple[T] | None:
        """Move a value from its legacy key to the versioned key.

        Returns a one-element tuple holding the value, or None when there
        is nothing usable under the legacy key.
        """
        try:
            raw = self.port.get(legacy_key)
        except StorageError as exc:
            logger.warning("Storage read failed", key=legacy_key, error=str(exc))
            return None
        if not raw:
            return None

        try:
            value = self._decode(raw, adapter)
        except (ValueError, PydanticValidationError) as exc:
            logger.warning("Legacy value unreadable, not migrated", key=legacy_key, error=str(exc))
            return None

        try:
            self.port.set(physical, raw)
            self.port.delete(legacy_key)
        except (StorageError, OSError) as exc:
            logger.warning("Migration write failed", key=physical, error=str(exc))
        else:
            logger.info("Migrated storage key", legacy_key=legacy_key, key=physical)
        return (value,)

    # =========================================================================
    # Save
    # =========================================================================

    def save(self, key: str, value: Any, adapter: TypeAdapter[Any] | None = None) -> bool:
        """Serialise ``value`` and write it under the versioned key.

        Failures are logged and swallowed; the caller's in-memory value
        stays authoritative.

        Returns:
            True if the write succeeded.
        """
        physical = self.versioned_key(key)
        if adapter is not None:
            data = adapter.dump_python(value, mode="json", by_alias=True)
        elif isinstance(value, BaseModel):
            data = value.model_dump(mode="json", by_alias=True)
        else:
            data = value
        raw = json.dumps(data, ensure_ascii=False)

        try:
            self.port.set(physical, raw)
        except (StorageError, OSError) as exc:
            logger.warning("Failed to persist value", key=physical, error=str(exc))
            return False
        return True


__all__ = [
    "VersionedStore",
]
