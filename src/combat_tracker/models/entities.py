"""Roster characters, encounter combatants and their factories.

A Character is a roster entry persisted independently of any encounter.
A Combatant is a member of the live initiative list: either a snapshot of
a Character (``source=pc``, weakly linked through ``ref_id``) or an NPC
authored directly in the encounter.

Example:
    >>> pc = build_new_character().patch(name="Cassimei", toughness=12)
    >>> member = character_to_combatant(pc)
    >>> member.ref_id == pc.id
    True
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from pydantic import ConfigDict, Field, field_validator

from combat_tracker.core.constants import (
    DEFAULT_ARMOR,
    DEFAULT_DEFENSE,
    DEFAULT_NPC_NAME,
    DEFAULT_PC_NAME,
    DEFAULT_TOUGHNESS,
    TOUGHNESS_MAX,
    TOUGHNESS_MIN,
)
from combat_tracker.models.components import (
    CharacterAttributes,
    TrackerModel,
    clone_attributes,
    normalize_attributes,
)
from combat_tracker.models.enums import CombatantSource


def new_id(prefix: str) -> str:
    """Generate a short random identifier such as ``cmb_1f3a9c0e``."""
    return f"{prefix}_{uuid4().hex[:8]}"


def clamp(value: int, low: int, high: int) -> int:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


class StatBlock(TrackerModel):
    """Fields shared by roster characters and combatants.

    Toughness is clamped and attributes are normalised on every
    construction, including ``patch`` copies.
    """

    name: str = Field(default="", description="Display name")
    initiative: int = Field(default=0, description="Initiative value")
    toughness: int = Field(default=DEFAULT_TOUGHNESS, description="Current toughness")
    defense: int = Field(default=DEFAULT_DEFENSE, description="Defense value")
    armor: str = Field(default=DEFAULT_ARMOR, description="Armor description")
    pain_threshold: int | None = Field(default=None, description="Pain threshold")
    note: str = Field(default="", description="Free-text note")
    attributes: CharacterAttributes | None = Field(default=None, description="Attribute scores")

    @field_validator("toughness", mode="after")
    @classmethod
    def clamp_toughness(cls, value: int) -> int:
        return clamp(value, TOUGHNESS_MIN, TOUGHNESS_MAX)

    @field_validator("pain_threshold", mode="after")
    @classmethod
    def non_negative_threshold(cls, value: int | None) -> int | None:
        if value is None:
            return None
        return max(0, value)

    @field_validator("attributes", mode="before")
    @classmethod
    def normalize(cls, value: Any) -> CharacterAttributes | None:
        return normalize_attributes(value)

    @field_validator("note", "armor", mode="before")
    @classmethod
    def default_none_strings(cls, value: Any) -> Any:
        """Treat a null text field as empty."""
        return "" if value is None else value


class Character(StatBlock):
    """A player character on the roster.

    Attributes:
        id: Stable unique identifier.
        role: Free-text role or archetype.
    """

    id: str = Field(default_factory=lambda: new_id("pc"), description="Roster identifier")
    role: str = Field(default="", description="Role or archetype")


class Combatant(StatBlock):
    """A member of the live initiative list.

    Attributes:
        id: Encounter identifier, distinct from any Character id.
        source: Whether this is a PC snapshot or a directly authored NPC.
        ref_id: Weak reference to the originating Character (PCs only).
        prone: Prone status flag.
        flanked: Flanked status flag.
    """

    id: str = Field(default_factory=lambda: new_id("cmb"), description="Combatant identifier")
    source: CombatantSource = Field(default=CombatantSource.NPC, description="PC or NPC")
    ref_id: str | None = Field(default=None, description="Originating character id")
    prone: bool = Field(default=False, description="Prone status")
    flanked: bool = Field(default=False, description="Flanked status")

    @property
    def is_pc(self) -> bool:
        return self.source == CombatantSource.PC


class NpcDraft(TrackerModel):
    """User input for a new NPC before it joins the encounter."""

    model_config = ConfigDict(frozen=False)

    name: str = ""
    initiative: int = 0
    toughness: int = DEFAULT_TOUGHNESS
    defense: int = DEFAULT_DEFENSE
    armor: str = DEFAULT_ARMOR
    pain_threshold: int | None = None
    note: str = ""
    attributes: CharacterAttributes | None = None

    @field_validator("attributes", mode="before")
    @classmethod
    def normalize(cls, value: Any) -> CharacterAttributes | None:
        return normalize_attributes(value)


# =============================================================================
# Factory Functions
# =============================================================================


def build_new_character() -> Character:
    """Create a blank roster entry with the standard defaults."""
    return Character(name=DEFAULT_PC_NAME)


def character_to_combatant(pc: Character) -> Combatant:
    """Snapshot a roster character into a new encounter member.

    The combatant gets its own id; flags start cleared and attributes are
    copied so later roster edits only arrive through roster sync.
    """
    return Combatant(
        source=CombatantSource.PC,
        ref_id=pc.id,
        name=pc.name,
        initiative=pc.initiative,
        toughness=pc.toughness,
        defense=pc.defense,
        armor=pc.armor,
        pain_threshold=pc.pain_threshold,
        note=pc.note,
        attributes=clone_attributes(pc.attributes),
    )


def build_npc(draft: NpcDraft) -> Combatant:
    """Turn an NPC draft into an encounter member."""
    return Combatant(
        source=CombatantSource.NPC,
        name=draft.name.strip() or DEFAULT_NPC_NAME,
        initiative=draft.initiative,
        toughness=draft.toughness,
        defense=draft.defense,
        armor=draft.armor.strip() or DEFAULT_ARMOR,
        pain_threshold=draft.pain_threshold,
        note=draft.note.strip(),
        attributes=clone_attributes(draft.attributes),
    )


__all__ = [
    "StatBlock",
    "Character",
    "Combatant",
    "NpcDraft",
    "new_id",
    "clamp",
    "build_new_character",
    "character_to_combatant",
    "build_npc",
]
