"""Storage module for the Skirmish Combat Tracker.

Provides:
- Key/value persistence ports (memory, JSON file, SQLite)
- The schema-versioned store with one-time legacy key migration
- Export/import of the full roster and encounter
"""

from combat_tracker.storage.backends import (
    JsonFileStorage,
    MemoryStorage,
    SqliteStorage,
    StoragePort,
    create_storage,
)
from combat_tracker.storage.transfer import (
    ExportPayload,
    ImportResult,
    create_export_payload,
    export_filename,
    export_to_file,
    import_from_file,
    validate_import_data,
)
from combat_tracker.storage.versioned import VersionedStore

__all__ = [
    "StoragePort",
    "MemoryStorage",
    "JsonFileStorage",
    "SqliteStorage",
    "create_storage",
    "VersionedStore",
    "ExportPayload",
    "ImportResult",
    "create_export_payload",
    "export_filename",
    "export_to_file",
    "validate_import_data",
    "import_from_file",
]
