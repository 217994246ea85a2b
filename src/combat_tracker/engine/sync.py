"""Roster to encounter synchronisation.

When a roster character changes, the PC snapshots in the encounter pick
up its identity fields (name, armor, defense, pain threshold and
attributes). Encounter-local fields (initiative, toughness, note and the
status flags) are left alone. Members whose character no longer exists
are left untouched.
"""

from __future__ import annotations

from collections.abc import Iterable

from combat_tracker.models.components import attributes_equal, clone_attributes
from combat_tracker.models.entities import Character, Combatant
from combat_tracker.models.game_state import EncounterState

SYNCED_FIELDS = ("name", "armor", "defense", "pain_threshold")


def sync_member_from_pc(member: Combatant, pc: Character) -> Combatant:
    """Refresh a PC snapshot from its roster character.

    Returns:
        ``member`` itself when nothing differs, otherwise an updated copy.
    """
    changes = {
        field: getattr(pc, field)
        for field in SYNCED_FIELDS
        if getattr(member, field) != getattr(pc, field)
    }
    if not attributes_equal(member.attributes, pc.attributes):
        changes["attributes"] = clone_attributes(pc.attributes)
    if not changes:
        return member
    return member.patch(**changes)


def sync_members(state: EncounterState, characters: Iterable[Character]) -> EncounterState:
    """Apply ``sync_member_from_pc`` to every linked PC member.

    Returns:
        ``state`` itself when no member changed.
    """
    by_id = {pc.id: pc for pc in characters}
    changed = False
    members = []
    for member in state.members:
        pc = by_id.get(member.ref_id) if member.is_pc and member.ref_id else None
        synced = member if pc is None else sync_member_from_pc(member, pc)
        changed = changed or synced is not member
        members.append(synced)
    if not changed:
        return state
    return state.patch(members=tuple(members))


__all__ = [
    "SYNCED_FIELDS",
    "sync_member_from_pc",
    "sync_members",
]
