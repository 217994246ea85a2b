"""Roster editing.

RosterController applies edits to the list of player characters through
its own HistoryStore, so roster changes are undone independently of the
encounter. Deleting a character never touches the encounter: PC members
that referenced it stay in place as orphaned snapshots.
"""

from __future__ import annotations

from typing import Any

from combat_tracker.core.constants import ATTRIBUTE_KEYS
from combat_tracker.core.exceptions import ValidationError
from combat_tracker.core.logging import get_logger
from combat_tracker.engine.history import HistoryStore
from combat_tracker.models.components import normalize_attributes
from combat_tracker.models.entities import Character, build_new_character

logger = get_logger(__name__)

Roster = tuple[Character, ...]


def _parse_attribute(value: Any) -> float | None:
    """Parse user input for one attribute; blank or non-numeric yields None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class RosterController:
    """Undoable edits over the persisted roster.

    Attributes:
        history: The store that owns the roster.
    """

    def __init__(self, history: HistoryStore[Roster]) -> None:
        self.history = history

    @property
    def characters(self) -> Roster:
        return self.history.present

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def get(self, character_id: str) -> Character | None:
        return next((pc for pc in self.characters if pc.id == character_id), None)

    def add_character(self, character: Character | None = None) -> Character:
        """Append a character (a blank "New PC" by default) and return it."""
        pc = character or build_new_character()
        self.history.set(lambda prev: prev + (pc,))
        logger.info("Character added", character_id=pc.id, name=pc.name)
        return pc

    def update_character(self, character_id: str, **changes: Any) -> bool:
        """Patch fields of one character.

        Unknown ids are ignored.

        Raises:
            ValidationError: If a change names an unknown field or the id.
        """
        if "id" in changes:
            raise ValidationError(
                "Character id cannot be changed",
                field_name="id",
                invalid_value=changes["id"],
            )
        unknown = sorted(set(changes) - set(Character.model_fields))
        if unknown:
            raise ValidationError(
                f"Unknown field(s) for Character: {', '.join(unknown)}",
                field_name=unknown[0],
            )

        def apply(prev: Roster) -> Roster:
            return tuple(pc.patch(**changes) if pc.id == character_id else pc for pc in prev)

        return self.history.set(apply)

    def set_attribute(self, character_id: str, key: str, value: Any) -> bool:
        """Set or clear one attribute from raw user input.

        Blank or non-numeric input removes the attribute.

        Raises:
            ValidationError: If ``key`` is not an attribute symbol.
        """
        if key not in ATTRIBUTE_KEYS:
            raise ValidationError(
                f"Unknown attribute: {key!r}",
                field_name="attributes",
                invalid_value=key,
            )
        pc = self.get(character_id)
        if pc is None:
            return False

        current = dict(pc.attributes.present()) if pc.attributes is not None else {}
        number = _parse_attribute(value)
        if number is None:
            current.pop(key, None)
        else:
            current[key] = number
        return self.update_character(character_id, attributes=normalize_attributes(current))

    def delete_character(self, character_id: str) -> bool:
        """Remove a character from the roster; encounter members are kept."""
        changed = self.history.set(
            lambda prev: tuple(pc for pc in prev if pc.id != character_id)
        )
        if changed:
            logger.info("Character deleted", character_id=character_id)
        return changed

    def replace_all(self, characters: Roster) -> bool:
        """Swap in a whole roster as one history entry."""
        return self.history.set(tuple(characters))

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()


__all__ = [
    "Roster",
    "RosterController",
]
