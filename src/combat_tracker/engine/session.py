"""Session wiring: one roster store and one encounter store over one port.

A TrackerSession is built once per session and passed to whatever drives
it. Roster changes (including undo and redo) are pushed into the
encounter through roster sync.

Example:
    >>> from combat_tracker.storage import MemoryStorage
    >>> session = TrackerSession(MemoryStorage())
    >>> session.encounter.add_characters(session.roster.characters)
    True
    >>> session.encounter.round_summary()
    'Round 1 — Active: Cassimei'
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from combat_tracker.core.constants import CHARACTERS_KEY, ENCOUNTER_KEY, MAX_HISTORY
from combat_tracker.core.logging import get_logger
from combat_tracker.engine.balance import BalanceEstimate
from combat_tracker.engine.encounter import EncounterController
from combat_tracker.engine.history import HistoryStore
from combat_tracker.engine.notifications import Notifier, PainFlashScheduler
from combat_tracker.engine.roster import Roster, RosterController
from combat_tracker.engine.sync import sync_members
from combat_tracker.models.defaults import build_default_characters
from combat_tracker.models.entities import Character
from combat_tracker.models.game_state import EncounterState, default_encounter_state
from combat_tracker.storage.backends import StoragePort, create_storage
from combat_tracker.storage.transfer import ImportResult, export_to_file
from combat_tracker.storage.versioned import VersionedStore

if TYPE_CHECKING:
    from combat_tracker.core.config import Settings

logger = get_logger(__name__)

ROSTER_ADAPTER: TypeAdapter[Roster] = TypeAdapter(tuple[Character, ...])
ENCOUNTER_ADAPTER: TypeAdapter[EncounterState] = TypeAdapter(EncounterState)


class TrackerSession:
    """The roster, the encounter and their shared persistence.

    Attributes:
        storage: Versioned store over the injected port.
        roster: Roster editing controller.
        encounter: Encounter controller.
        notifier: Pain-threshold notification callback, if any.
    """

    def __init__(
        self,
        port: StoragePort,
        *,
        history_limit: int = MAX_HISTORY,
        notifier: Notifier | None = None,
    ) -> None:
        self.storage = VersionedStore(port)
        self.roster = RosterController(
            HistoryStore(
                self.storage,
                CHARACTERS_KEY,
                build_default_characters,
                ROSTER_ADAPTER,
                limit=history_limit,
            )
        )
        self.encounter = EncounterController(
            HistoryStore(
                self.storage,
                ENCOUNTER_KEY,
                default_encounter_state,
                ENCOUNTER_ADAPTER,
                limit=history_limit,
            ),
            notifier=notifier,
        )
        self.notifier = notifier
        self._unsubscribe = self.roster.history.subscribe(self.encounter.sync_from_roster)
        # Stored snapshots may predate roster edits made elsewhere
        self.encounter.sync_from_roster(self.roster.characters)

        logger.debug(
            "Session ready",
            characters=len(self.roster.characters),
            members=len(self.encounter.members),
        )

    def balance(self) -> BalanceEstimate | None:
        return self.encounter.balance()

    def apply_import(self, result: ImportResult) -> bool:
        """Replace the roster and encounter with an imported payload.

        The encounter is synced against the imported roster before either
        store changes. Failed and cancelled results leave both stores
        untouched.

        Returns:
            True if the import was applied.
        """
        if not result.success or result.payload is None:
            if not result.cancelled:
                logger.warning("Import not applied", error=result.error)
            return False

        payload = result.payload
        encounter = sync_members(payload.encounter, payload.characters)
        # Encounter first, so the roster subscription finds it already synced
        self.encounter.history.set(encounter)
        self.roster.replace_all(payload.characters)

        logger.info(
            "Import applied",
            characters=len(payload.characters),
            members=len(encounter.members),
        )
        return True

    def export(self, directory: str | Path, today: date | None = None) -> Path:
        """Write the current roster and encounter to an export file."""
        return export_to_file(directory, self.roster.characters, self.encounter.state, today)

    def close(self) -> None:
        """Detach roster sync and cancel pending notifications."""
        self._unsubscribe()
        close = getattr(self.notifier, "close", None)
        if callable(close):
            close()


def create_session(
    settings: Settings | None = None,
    port: StoragePort | None = None,
    notifier: Notifier | None = None,
) -> TrackerSession:
    """Build a session from settings.

    Args:
        settings: Application settings; defaults to the cached settings.
        port: Storage port; defaults to the configured backend.
        notifier: Pain-threshold notification callback; defaults to a
            PainFlashScheduler timed by the notification settings.
    """
    if settings is None:
        from combat_tracker.core.config import get_settings

        settings = get_settings()

    if port is None:
        port = create_storage(settings.storage)

    if notifier is None:
        notifier = PainFlashScheduler(
            flash_duration=settings.notifications.flash_duration_seconds,
            toast_duration=settings.notifications.toast_duration_seconds,
        )

    return TrackerSession(port, history_limit=settings.history.limit, notifier=notifier)


__all__ = [
    "ROSTER_ADAPTER",
    "ENCOUNTER_ADAPTER",
    "TrackerSession",
    "create_session",
]
