"""Pydantic V2 schemas for the Skirmish Combat Tracker.

Submodules:
    enums: Enumeration types (CombatantSource, AdjustMode, Difficulty, ...)
    components: Frozen record base and the sparse attribute record
    entities: Roster characters, combatants and their factories
    game_state: The encounter snapshot
    defaults: Seed roster

Example:
    >>> from combat_tracker.models import Character, character_to_combatant
    >>> hero = Character(name="Thalia", toughness=12, defense=3)
    >>> member = character_to_combatant(hero)
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from combat_tracker.models.enums import (
    AdjustMode,
    CombatantSource,
    Difficulty,
    ImportStatus,
    MoveDirection,
)

# =============================================================================
# Components
# =============================================================================
from combat_tracker.models.components import (
    CharacterAttributes,
    TrackerModel,
    attributes_equal,
    clone_attributes,
    normalize_attributes,
)

# =============================================================================
# Entities
# =============================================================================
from combat_tracker.models.entities import (
    Character,
    Combatant,
    NpcDraft,
    StatBlock,
    build_new_character,
    build_npc,
    character_to_combatant,
    clamp,
    new_id,
)

# =============================================================================
# Encounter State
# =============================================================================
from combat_tracker.models.game_state import (
    EncounterState,
    default_encounter_state,
)
from combat_tracker.models.defaults import build_default_characters


__all__ = [
    # === Enumerations ===
    "CombatantSource",
    "AdjustMode",
    "MoveDirection",
    "Difficulty",
    "ImportStatus",
    # === Components ===
    "TrackerModel",
    "CharacterAttributes",
    "normalize_attributes",
    "attributes_equal",
    "clone_attributes",
    # === Entities ===
    "StatBlock",
    "Character",
    "Combatant",
    "NpcDraft",
    "new_id",
    "clamp",
    "build_new_character",
    "character_to_combatant",
    "build_npc",
    "build_default_characters",
    # === Encounter State ===
    "EncounterState",
    "default_encounter_state",
]
