"""Key/value persistence ports for the Skirmish Combat Tracker.

A port stores raw strings under string keys. The versioned store sits on
top of a port and handles versioning, migration and serialisation, so
ports stay deliberately small:

- MemoryStorage: in-process dict with an optional byte quota
- JsonFileStorage: a single JSON object file, replaced atomically
- SqliteStorage: a key/value table in a SQLite database

Every port raises StorageError (or a subclass) when an operation fails.
"""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Generator, Protocol, runtime_checkable

from combat_tracker.core.exceptions import (
    StorageError,
    StorageQuotaError,
    StorageUnavailableError,
)
from combat_tracker.core.logging import get_logger

if TYPE_CHECKING:
    from combat_tracker.core.config import StorageSettings

logger = get_logger(__name__)


# =============================================================================
# Port Protocol
# =============================================================================


@runtime_checkable
class StoragePort(Protocol):
    """Minimal key/value interface the versioned store depends on."""

    def get(self, key: str) -> str | None:
        """Return the raw value stored under ``key``, or None."""
        ...

    def set(self, key: str, raw: str) -> None:
        """Store ``raw`` under ``key``, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""
        ...


# =============================================================================
# In-Memory Port
# =============================================================================


class MemoryStorage:
    """Dict-backed port, used by tests and ephemeral sessions.

    Attributes:
        quota: Optional byte budget across all keys and values. Writes that
            would exceed it raise StorageQuotaError and leave the port
            unchanged.
        disabled: When True every operation raises StorageUnavailableError.
    """

    def __init__(self, quota: int | None = None) -> None:
        self.quota = quota
        self.disabled = False
        self._data: dict[str, str] = {}

    def _check_available(self, key: str) -> None:
        if self.disabled:
            raise StorageUnavailableError("Storage is disabled", key=key)

    def _usage(self, data: dict[str, str]) -> int:
        return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in data.items())

    def get(self, key: str) -> str | None:
        self._check_available(key)
        return self._data.get(key)

    def set(self, key: str, raw: str) -> None:
        self._check_available(key)
        if self.quota is not None:
            candidate = {**self._data, key: raw}
            used = self._usage(candidate)
            if used > self.quota:
                raise StorageQuotaError(
                    "Storage quota exceeded",
                    key=key,
                    details={"quota": self.quota, "required": used},
                )
        self._data[key] = raw

    def delete(self, key: str) -> None:
        self._check_available(key)
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """List stored keys in insertion order."""
        return list(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


# =============================================================================
# JSON File Port
# =============================================================================


class JsonFileStorage:
    """Port that keeps every key in one JSON object on disk.

    The file is read on each access and rewritten through a temporary file
    plus ``os.replace`` so a crash never leaves a half-written document.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self, key: str) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageUnavailableError(
                f"Cannot read storage file: {exc}",
                key=key,
                details={"path": str(self.path)},
            ) from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageError(
                f"Storage file is not valid JSON: {exc}",
                key=key,
                details={"path": str(self.path)},
            ) from exc
        if not isinstance(data, dict):
            raise StorageError(
                "Storage file does not hold a JSON object",
                key=key,
                details={"path": str(self.path)},
            )
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str], key: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageUnavailableError(
                f"Cannot write storage file: {exc}",
                key=key,
                details={"path": str(self.path)},
            ) from exc

    def get(self, key: str) -> str | None:
        return self._read_all(key).get(key)

    def set(self, key: str, raw: str) -> None:
        data = self._read_all(key)
        data[key] = raw
        self._write_all(data, key)

    def delete(self, key: str) -> None:
        data = self._read_all(key)
        if key in data:
            del data[key]
            self._write_all(data, key)


# =============================================================================
# SQLite Port
# =============================================================================


class SqliteStorage:
    """Port backed by a single key/value table in SQLite."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path) -> None:
        """Open (and if needed create) the database.

        Args:
            db_path: Path to the database file.

        Raises:
            StorageUnavailableError: If the database cannot be initialised.
        """
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailableError(
                f"Cannot open storage database: {exc}",
                details={"path": str(self.db_path)},
            ) from exc
        logger.debug("SQLite storage ready", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a connection that commits on success and always closes."""
        conn = sqlite3.connect(str(self.db_path))
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    def get(self, key: str) -> str | None:
        try:
            with self._get_connection() as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Read failed: {exc}", key=key) from exc
        return row[0] if row else None

    def set(self, key: str, raw: str) -> None:
        try:
            with self._get_connection() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                    (key, raw),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Write failed: {exc}", key=key) from exc

    def delete(self, key: str) -> None:
        try:
            with self._get_connection() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageError(f"Delete failed: {exc}", key=key) from exc

    def schema_version(self) -> int | None:
        """Return the recorded table schema version."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row else None


# =============================================================================
# Factory
# =============================================================================


def create_storage(settings: StorageSettings | None = None) -> StoragePort:
    """Build the port selected by the storage settings.

    Args:
        settings: Storage settings; defaults to the cached application settings.

    Returns:
        A ready-to-use storage port.
    """
    if settings is None:
        from combat_tracker.core.config import get_settings

        settings = get_settings().storage

    if settings.backend == "memory":
        port: StoragePort = MemoryStorage()
    elif settings.backend == "sqlite":
        port = SqliteStorage(settings.path)
    else:
        port = JsonFileStorage(settings.path)

    logger.info("Storage port created", backend=settings.backend)
    return port


__all__ = [
    "StoragePort",
    "MemoryStorage",
    "JsonFileStorage",
    "SqliteStorage",
    "create_storage",
]
