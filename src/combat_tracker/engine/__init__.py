"""Session state engine for the Skirmish Combat Tracker.

This module provides the stateful core of the tracker: the bounded
undo/redo history, the turn-order state machine, roster synchronisation,
the balance estimate and pain-threshold notifications.

Submodules:
    history: Undo/redo log over one persisted value
    encounter: Turn/round transitions and member operations
    roster: Undoable roster editing
    sync: Roster to encounter synchronisation
    balance: Encounter difficulty estimate
    notifications: Pain-threshold events, the deferred flash and toasts
    session: Wiring of both stores over one storage port

Example:
    >>> from combat_tracker.engine import create_session
    >>> session = create_session()
    >>> session.encounter.next_turn()
    False
"""

from __future__ import annotations

from combat_tracker.engine.balance import (
    BalanceEstimate,
    difficulty_for,
    estimate_balance,
)
from combat_tracker.engine.encounter import (
    EncounterController,
    add_characters,
    add_members,
    add_npc,
    apply_adjustment,
    clear_encounter,
    move_member,
    next_turn,
    prev_turn,
    remove_member,
    sort_by_initiative,
    toggle_flag,
    update_member,
)
from combat_tracker.engine.history import HistoryState, HistoryStore
from combat_tracker.engine.notifications import (
    Notifier,
    PainFlash,
    PainFlashScheduler,
    PainThresholdEvent,
    PainToast,
)
from combat_tracker.engine.roster import Roster, RosterController
from combat_tracker.engine.session import TrackerSession, create_session
from combat_tracker.engine.sync import sync_member_from_pc, sync_members


__all__ = [
    # History
    "HistoryState",
    "HistoryStore",
    # Encounter
    "EncounterController",
    "add_members",
    "add_characters",
    "add_npc",
    "remove_member",
    "move_member",
    "sort_by_initiative",
    "clear_encounter",
    "next_turn",
    "prev_turn",
    "apply_adjustment",
    "update_member",
    "toggle_flag",
    # Roster
    "Roster",
    "RosterController",
    # Sync
    "sync_member_from_pc",
    "sync_members",
    # Balance
    "BalanceEstimate",
    "difficulty_for",
    "estimate_balance",
    # Notifications
    "Notifier",
    "PainFlash",
    "PainFlashScheduler",
    "PainToast",
    "PainThresholdEvent",
    # Session
    "TrackerSession",
    "create_session",
]
