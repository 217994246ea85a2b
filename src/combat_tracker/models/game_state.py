"""Encounter state model.

The encounter is an ordered tuple of combatants (the order *is* the
initiative order), the index of the active member and the round counter.

Models:
    EncounterState: Immutable snapshot of a live encounter.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from combat_tracker.models.components import TrackerModel
from combat_tracker.models.entities import Combatant


class EncounterState(TrackerModel):
    """Immutable snapshot of the initiative list.

    Attributes:
        members: Combatants in initiative order.
        turn_index: Index of the active member; meaningless when empty.
        round: Current round number (1-based).

    Example:
        >>> state = EncounterState()
        >>> state.active_member is None
        True
    """

    members: tuple[Combatant, ...] = Field(default=(), description="Initiative order")
    turn_index: int = Field(default=0, ge=0, description="Active member index")
    round: int = Field(default=1, ge=1, description="Current round")

    @model_validator(mode="before")
    @classmethod
    def clamp_turn_index(cls, data: Any) -> Any:
        """Pull a stored turn index back inside the member range."""
        if not isinstance(data, dict):
            return data
        members = data.get("members") or ()
        for key in ("turnIndex", "turn_index"):
            value = data.get(key)
            if isinstance(value, int) and not isinstance(value, bool) and members:
                data = {**data, key: max(0, min(value, len(members) - 1))}
        return data

    @property
    def is_empty(self) -> bool:
        return not self.members

    @property
    def active_member(self) -> Combatant | None:
        """The member whose turn it is, if any."""
        if 0 <= self.turn_index < len(self.members):
            return self.members[self.turn_index]
        return None

    def index_of(self, member_id: str) -> int | None:
        """Position of ``member_id`` in the initiative order, or None."""
        for index, member in enumerate(self.members):
            if member.id == member_id:
                return index
        return None

    def find(self, member_id: str) -> Combatant | None:
        index = self.index_of(member_id)
        return None if index is None else self.members[index]

    def has_character(self, character_id: str) -> bool:
        """Whether a PC snapshot of ``character_id`` is already present."""
        return any(m.ref_id == character_id for m in self.members)


def default_encounter_state() -> EncounterState:
    """The empty encounter: no members, turn 0, round 1."""
    return EncounterState()


__all__ = [
    "EncounterState",
    "default_encounter_state",
]
