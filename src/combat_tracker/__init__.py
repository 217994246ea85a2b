"""Skirmish Combat Tracker - session state engine.

Tracks a roster of player characters and a live initiative list of
combatants, with turn/round progression, hurt/heal adjustments and the
pain-threshold rule.

ARCHITECTURE:
- Records are frozen pydantic models; every change builds a new snapshot
- Each store (roster, encounter) owns its value and its undo/redo log
- Persistence goes through an injected key/value port, never a global

Example:
    >>> from combat_tracker import create_session
    >>>
    >>> session = create_session()
    >>> session.encounter.add_characters(session.roster.characters)
    >>> session.encounter.sort_by_initiative()
    >>> session.encounter.apply_adjustment(member_id, 4, "hurt")
    >>> print(session.encounter.round_summary())

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 records (characters, combatants, encounter).
    storage: Persistence ports, versioned keys, export/import.
    engine: History, turn order, roster sync, balance, notifications.
"""

from __future__ import annotations

# Core
from combat_tracker.core.config import Settings, get_settings
from combat_tracker.core.exceptions import TrackerError
from combat_tracker.core.logging import configure_logging, get_logger

# Models
from combat_tracker.models import (
    Character,
    Combatant,
    EncounterState,
    NpcDraft,
)

# Engine
from combat_tracker.engine import (
    BalanceEstimate,
    EncounterController,
    HistoryStore,
    PainFlashScheduler,
    PainThresholdEvent,
    RosterController,
    TrackerSession,
    create_session,
    estimate_balance,
)

# Storage
from combat_tracker.storage import (
    ImportResult,
    MemoryStorage,
    VersionedStore,
    import_from_file,
)


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "TrackerError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Character",
    "Combatant",
    "EncounterState",
    "NpcDraft",
    # Engine
    "BalanceEstimate",
    "EncounterController",
    "HistoryStore",
    "PainFlashScheduler",
    "PainThresholdEvent",
    "RosterController",
    "TrackerSession",
    "create_session",
    "estimate_balance",
    # Storage
    "ImportResult",
    "MemoryStorage",
    "VersionedStore",
    "import_from_file",
]
