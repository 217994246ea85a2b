"""Application-wide constants for the Skirmish Combat Tracker.

This module defines the numeric bounds, storage keys and defaults shared
by the models, the history store and the encounter engine.
"""

from __future__ import annotations

# =============================================================================
# Numeric Bounds
# =============================================================================

TOUGHNESS_MIN = 0
"""Lowest toughness any character or combatant can hold."""

TOUGHNESS_MAX = 999
"""Highest toughness any character or combatant can hold."""

MAX_ADJUSTMENT = 999
"""Upper bound for a single hurt/heal amount (matches the toughness ceiling)."""

DEFAULT_ADJUSTMENT = 1
"""Adjustment amount used when the caller does not supply one."""

# =============================================================================
# History & Persistence
# =============================================================================

MAX_HISTORY = 50
"""Maximum number of snapshots kept in a store's undo log."""

STORAGE_VERSION = 1
"""Schema version token embedded in every physical storage key."""

STORAGE_NAMESPACE = "sct"
"""Namespace prefix of the logical storage keys."""

CHARACTERS_KEY = f"{STORAGE_NAMESPACE}.characters"
"""Logical key of the persisted roster."""

ENCOUNTER_KEY = f"{STORAGE_NAMESPACE}.encounter"
"""Logical key of the persisted encounter state."""

EXPORT_VERSION = 1
"""Version written into export payloads."""

EXPORT_FILENAME_PREFIX = "symbaroum-combat"
"""Prefix of exported file names (followed by the ISO date)."""

# =============================================================================
# Attributes
# =============================================================================

ATTRIBUTE_KEYS = ("acc", "cun", "dis", "per", "qui", "res", "str", "vig")
"""The eight attribute symbols a character may carry."""

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_ARMOR = "Light (d4)"
"""Armor assigned to new characters and unnamed-armor NPCs."""

DEFAULT_NPC_NAME = "NPC"
"""Name used for NPCs authored with a blank name."""

DEFAULT_PC_NAME = "New PC"
"""Name of a freshly added roster entry."""

DEFAULT_TOUGHNESS = 10
DEFAULT_DEFENSE = 10

FLASH_DURATION_SECONDS = 1.6
"""How long a pain-threshold flash stays visible."""

TOAST_DURATION_SECONDS = 4.0
"""How long a pain-threshold toast stays visible."""


__all__ = [
    # Bounds
    "TOUGHNESS_MIN",
    "TOUGHNESS_MAX",
    "MAX_ADJUSTMENT",
    "DEFAULT_ADJUSTMENT",
    # History & persistence
    "MAX_HISTORY",
    "STORAGE_VERSION",
    "STORAGE_NAMESPACE",
    "CHARACTERS_KEY",
    "ENCOUNTER_KEY",
    "EXPORT_VERSION",
    "EXPORT_FILENAME_PREFIX",
    # Attributes
    "ATTRIBUTE_KEYS",
    # Defaults
    "DEFAULT_ARMOR",
    "DEFAULT_NPC_NAME",
    "DEFAULT_PC_NAME",
    "DEFAULT_TOUGHNESS",
    "DEFAULT_DEFENSE",
    "FLASH_DURATION_SECONDS",
    "TOAST_DURATION_SECONDS",
]
