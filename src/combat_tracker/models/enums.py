"""Enumeration types for the Skirmish Combat Tracker.

This module defines the enumeration types used by the models and the
encounter engine: combatant origin, adjustment and movement modes,
difficulty labels and import outcomes.
"""

from __future__ import annotations

from enum import StrEnum


class CombatantSource(StrEnum):
    """Where a combatant came from.

    PC combatants are snapshots of a roster character and keep a weak
    reference to it; NPCs are authored directly in the encounter.
    """

    PC = "pc"
    NPC = "npc"


class AdjustMode(StrEnum):
    """Direction of a toughness adjustment."""

    HURT = "hurt"
    HEAL = "heal"

    @property
    def sign(self) -> int:
        """Multiplier applied to the adjustment amount."""
        return -1 if self is AdjustMode.HURT else 1


class MoveDirection(StrEnum):
    """Direction a member moves within the initiative order."""

    UP = "up"
    DOWN = "down"

    @property
    def offset(self) -> int:
        """Index offset of the swap target."""
        return -1 if self is MoveDirection.UP else 1


class Difficulty(StrEnum):
    """Qualitative encounter difficulty labels, easiest first."""

    TRIVIAL = "Trivial"
    EASY = "Easy"
    BALANCED = "Balanced"
    HARD = "Hard"
    DEADLY = "Deadly"
    OVERWHELMING = "Overwhelming"


class ImportStatus(StrEnum):
    """Outcome of an import attempt."""

    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


__all__ = [
    "CombatantSource",
    "AdjustMode",
    "MoveDirection",
    "Difficulty",
    "ImportStatus",
]
