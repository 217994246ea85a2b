"""Export and import of the full tracker state.

The export payload is a single JSON document holding the roster and the
encounter::

    {"version": 1, "characters": [...], "encounter": {"members": [...], ...}}

Import never raises past this module. Every outcome is an ImportResult
whose status is success, failed (with a reason) or cancelled.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Self, Sequence

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from combat_tracker.core.constants import EXPORT_FILENAME_PREFIX, EXPORT_VERSION
from combat_tracker.core.exceptions import ImportDataError, StorageError
from combat_tracker.core.logging import get_logger
from combat_tracker.models.components import TrackerModel
from combat_tracker.models.entities import Character
from combat_tracker.models.enums import ImportStatus
from combat_tracker.models.game_state import EncounterState

logger = get_logger(__name__)


# =============================================================================
# Payload & Result Models
# =============================================================================


class ExportPayload(TrackerModel):
    """The document written by export and accepted by import."""

    version: int = Field(default=EXPORT_VERSION, description="Payload format version")
    characters: tuple[Character, ...] = Field(default=(), description="Roster")
    encounter: EncounterState = Field(default_factory=EncounterState, description="Encounter")


class ImportResult(TrackerModel):
    """Outcome of an import attempt.

    Attributes:
        status: success, failed or cancelled.
        payload: The validated payload (success only).
        error: Human-readable reason (failed only).
    """

    status: ImportStatus
    payload: ExportPayload | None = None
    error: str | None = None

    @classmethod
    def ok(cls, payload: ExportPayload) -> Self:
        return cls(status=ImportStatus.SUCCESS, payload=payload)

    @classmethod
    def failure(cls, error: str) -> Self:
        return cls(status=ImportStatus.FAILED, error=error)

    @classmethod
    def cancelled_result(cls) -> Self:
        return cls(status=ImportStatus.CANCELLED)

    @property
    def success(self) -> bool:
        return self.status == ImportStatus.SUCCESS

    @property
    def cancelled(self) -> bool:
        """Cancellation is not a failure and should not be reported as one."""
        return self.status == ImportStatus.CANCELLED


# =============================================================================
# Export
# =============================================================================


def create_export_payload(
    characters: Sequence[Character],
    encounter: EncounterState,
) -> ExportPayload:
    """Bundle the roster and encounter into an export payload."""
    return ExportPayload(
        version=EXPORT_VERSION,
        characters=tuple(characters),
        encounter=encounter,
    )


def export_filename(today: date | None = None) -> str:
    """File name for an export made on ``today`` (default: the current date)."""
    day = today or date.today()
    return f"{EXPORT_FILENAME_PREFIX}-{day.isoformat()}.json"


def export_to_file(
    directory: str | Path,
    characters: Sequence[Character],
    encounter: EncounterState,
    today: date | None = None,
) -> Path:
    """Write the export payload as pretty-printed JSON.

    Args:
        directory: Target directory (created if missing).
        characters: Roster to export.
        encounter: Encounter to export.
        today: Date used in the file name.

    Returns:
        Path of the written file.

    Raises:
        StorageError: If the file cannot be written.
    """
    payload = create_export_payload(characters, encounter)
    target = Path(directory) / export_filename(today)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            json.dumps(payload.to_json_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    except OSError as exc:
        raise StorageError(
            f"Failed to write export file: {exc}",
            details={"path": str(target)},
        ) from exc

    logger.info(
        "Exported tracker state",
        path=str(target),
        characters=len(payload.characters),
        members=len(payload.encounter.members),
    )
    return target


# =============================================================================
# Import
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_structure(data: Any) -> None:
    """Run the ordered structural checks on a decoded payload.

    Raises:
        ImportDataError: On the first check that fails.
    """
    if not isinstance(data, dict):
        raise ImportDataError("Invalid file format", reason="not_an_object")
    if not _is_number(data.get("version")):
        raise ImportDataError("Missing or invalid version", reason="version")
    if not isinstance(data.get("characters"), list):
        raise ImportDataError("Missing or invalid characters array", reason="characters")

    encounter = data.get("encounter")
    if not isinstance(encounter, dict):
        raise ImportDataError("Missing or invalid encounter data", reason="encounter")
    if not isinstance(encounter.get("members"), list):
        raise ImportDataError("Missing or invalid encounter members", reason="members")

    for index, entry in enumerate(data["characters"]):
        if not isinstance(entry, dict):
            raise ImportDataError(
                "Invalid character entry",
                reason="character",
                details={"index": index},
            )
        missing = [name for name in ("id", "name") if not isinstance(entry.get(name), str)]
        if missing:
            raise ImportDataError(
                f"Character missing required fields ({', '.join(missing)})",
                reason="character_fields",
                details={"index": index},
            )


def validate_import_data(data: Any) -> ImportResult:
    """Validate a decoded import document.

    Structural checks run first, in a fixed order, so the reported reason
    is always the first problem found. Entries are then validated as
    records.

    Args:
        data: The decoded JSON document.

    Returns:
        A success result carrying the payload, or a failed result.
    """
    try:
        _check_structure(data)
    except ImportDataError as exc:
        logger.warning("Import rejected", error=exc.message, **exc.details)
        return ImportResult.failure(exc.message)

    try:
        payload = ExportPayload.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        message = f"Invalid import data at {location}: {first['msg']}"
        logger.warning("Import rejected", error=message, error_count=exc.error_count())
        return ImportResult.failure(message)

    return ImportResult.ok(payload)


def import_from_file(path: str | Path | None) -> ImportResult:
    """Read and validate an export file.

    Args:
        path: File chosen by the user, or None if the picker was cancelled.

    Returns:
        The import result; never raises.
    """
    if path is None:
        logger.info("Import cancelled")
        return ImportResult.cancelled_result()

    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Import file unreadable", path=str(path), error=str(exc))
        return ImportResult.failure("Failed to read file")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Import file is not JSON", path=str(path), error=str(exc))
        return ImportResult.failure("Failed to parse JSON file")

    return validate_import_data(data)


__all__ = [
    "ExportPayload",
    "ImportResult",
    "create_export_payload",
    "export_filename",
    "export_to_file",
    "validate_import_data",
    "import_from_file",
]
