"""Turn-order state machine and encounter member operations.

The module has two layers:

- Pure transition functions that take an EncounterState and return the
  next one (or the same object when nothing changes).
- EncounterController, which applies those transitions through a
  HistoryStore so each change is undoable and persisted.

Turn/round axis, for ``n`` members::

    next: (i, r) -> ((i + 1) % n, r + 1 if i + 1 == n else r)
    prev: (i, r) -> ((i - 1 + n) % n, max(1, r - 1) if i == 0 else r)

Example:
    >>> state = add_members(EncounterState(), [Combatant(name="A"), Combatant(name="B")])
    >>> state = next_turn(next_turn(state))
    >>> state.turn_index, state.round
    (0, 2)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any, TypeVar

from combat_tracker.core.constants import (
    DEFAULT_ADJUSTMENT,
    MAX_ADJUSTMENT,
    TOUGHNESS_MAX,
    TOUGHNESS_MIN,
)
from combat_tracker.core.exceptions import EncounterError, ValidationError
from combat_tracker.core.logging import get_logger
from combat_tracker.engine.balance import BalanceEstimate, estimate_balance
from combat_tracker.engine.history import HistoryState, HistoryStore
from combat_tracker.engine.notifications import Notifier, PainThresholdEvent
from combat_tracker.engine.sync import sync_members
from combat_tracker.models.entities import (
    Character,
    Combatant,
    NpcDraft,
    build_npc,
    character_to_combatant,
    clamp,
)
from combat_tracker.models.enums import AdjustMode, MoveDirection
from combat_tracker.models.game_state import EncounterState, default_encounter_state

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)

EDITABLE_MEMBER_FIELDS = frozenset(
    {
        "name",
        "initiative",
        "toughness",
        "defense",
        "armor",
        "pain_threshold",
        "note",
        "attributes",
        "prone",
        "flanked",
    }
)
"""Member fields that may be patched directly; identity fields may not."""


def _coerce(enum_cls: type[E], value: Any, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid {field_name}: {value!r}",
            field_name=field_name,
            invalid_value=value,
        ) from exc


def _replace_member(state: EncounterState, index: int, member: Combatant) -> EncounterState:
    members = list(state.members)
    members[index] = member
    return state.patch(members=tuple(members))


# =============================================================================
# Membership Transitions
# =============================================================================


def add_members(state: EncounterState, combatants: Iterable[Combatant]) -> EncounterState:
    """Append combatants to the end of the initiative order.

    ``turn_index`` and ``round`` are left unchanged.

    Raises:
        EncounterError: If a combatant id is already in the encounter.
    """
    additions = tuple(combatants)
    if not additions:
        return state

    seen = {m.id for m in state.members}
    for member in additions:
        if member.id in seen:
            raise EncounterError(
                f"Combatant {member.id!r} is already in the encounter",
                combatant_id=member.id,
            )
        seen.add(member.id)

    return state.patch(members=state.members + additions)


def add_characters(state: EncounterState, characters: Iterable[Character]) -> EncounterState:
    """Add roster characters as PC combatants, skipping ones already present."""
    additions: list[Combatant] = []
    added_refs: set[str] = set()
    for pc in characters:
        if pc.id in added_refs or state.has_character(pc.id):
            continue
        added_refs.add(pc.id)
        additions.append(character_to_combatant(pc))
    return add_members(state, additions)


def add_npc(state: EncounterState, draft: NpcDraft) -> EncounterState:
    """Append an NPC built from ``draft``."""
    return add_members(state, [build_npc(draft)])


def remove_member(state: EncounterState, member_id: str) -> EncounterState:
    """Remove a member while keeping the active member where possible.

    Removing the active member leaves the pointer on the same slot (clamped
    to the new end). Removing anyone else keeps the pointer on whoever was
    active. An empty result resets to turn 0, round 1.
    """
    index = state.index_of(member_id)
    if index is None:
        return state

    members = state.members[:index] + state.members[index + 1 :]
    if not members:
        return state.patch(members=(), turn_index=0, round=1)

    if index == state.turn_index:
        turn_index = min(state.turn_index, len(members) - 1)
    else:
        active = state.active_member
        turn_index = 0
        if active is not None:
            for position, member in enumerate(members):
                if member.id == active.id:
                    turn_index = position
                    break

    return state.patch(members=members, turn_index=turn_index)


def move_member(
    state: EncounterState,
    member_id: str,
    direction: MoveDirection | str,
) -> EncounterState:
    """Swap a member with its neighbour, keeping the same member active.

    Raises:
        ValidationError: If ``direction`` is not ``up`` or ``down``.
    """
    step = _coerce(MoveDirection, direction, "direction").offset
    index = state.index_of(member_id)
    if index is None:
        return state
    target = index + step
    if target < 0 or target >= len(state.members):
        return state

    active = state.active_member
    members = list(state.members)
    members[index], members[target] = members[target], members[index]
    turn_index = 0
    if active is not None:
        turn_index = next((i for i, m in enumerate(members) if m.id == active.id), 0)
    return state.patch(members=tuple(members), turn_index=turn_index)


def sort_by_initiative(state: EncounterState) -> EncounterState:
    """Stable sort by initiative, highest first, starting a fresh round 1."""
    if state.is_empty:
        return state
    members = tuple(sorted(state.members, key=lambda m: m.initiative, reverse=True))
    return state.patch(members=members, turn_index=0, round=1)


def clear_encounter(state: EncounterState) -> EncounterState:
    """Reset to the empty encounter."""
    return default_encounter_state()


# =============================================================================
# Turn Transitions
# =============================================================================


def next_turn(state: EncounterState) -> EncounterState:
    """Advance to the next member, starting a new round on wrap-around."""
    count = len(state.members)
    if not count:
        return state
    turn_index = (state.turn_index + 1) % count
    round_number = state.round + 1 if turn_index == 0 else state.round
    return state.patch(turn_index=turn_index, round=round_number)


def prev_turn(state: EncounterState) -> EncounterState:
    """Step back one member; the round never drops below 1."""
    count = len(state.members)
    if not count:
        return state
    turn_index = (state.turn_index - 1 + count) % count
    round_number = max(1, state.round - 1) if turn_index == count - 1 else state.round
    return state.patch(turn_index=turn_index, round=round_number)


# =============================================================================
# Member Transitions
# =============================================================================


def apply_adjustment(
    state: EncounterState,
    member_id: str,
    amount: int | None,
    mode: AdjustMode | str,
) -> tuple[EncounterState, PainThresholdEvent | None]:
    """Hurt or heal a member.

    The amount is clamped to ``[0, MAX_ADJUSTMENT]``; zero is a no-op. A
    hurt whose raw amount meets the member's pain threshold knocks it
    prone and yields an event. Any heal clears prone.

    Returns:
        The next state and the pain-threshold event, if triggered.

    Raises:
        ValidationError: If ``mode`` is not ``hurt`` or ``heal``.
    """
    adjust_mode = _coerce(AdjustMode, mode, "mode")
    raw = DEFAULT_ADJUSTMENT if amount is None else int(amount)
    value = clamp(raw, 0, MAX_ADJUSTMENT)
    index = state.index_of(member_id)
    if value == 0 or index is None:
        return state, None

    member = state.members[index]
    changes: dict[str, Any] = {
        "toughness": clamp(member.toughness + adjust_mode.sign * value, TOUGHNESS_MIN, TOUGHNESS_MAX),
    }
    event = None
    if adjust_mode is AdjustMode.HURT:
        threshold = member.pain_threshold
        if threshold is not None and value >= threshold:
            changes["prone"] = True
            event = PainThresholdEvent(subject_name=member.name, amount=value)
    else:
        changes["prone"] = False

    updated = member.patch(**changes)
    if updated == member:
        return state, event
    return _replace_member(state, index, updated), event


def update_member(state: EncounterState, member_id: str, **changes: Any) -> EncounterState:
    """Patch editable fields of one member.

    Raises:
        ValidationError: If a change names a field that cannot be edited.
    """
    unknown = sorted(set(changes) - EDITABLE_MEMBER_FIELDS)
    if unknown:
        raise ValidationError(
            f"Cannot edit member field(s): {', '.join(unknown)}",
            field_name=unknown[0],
            invalid_value=changes[unknown[0]],
        )
    index = state.index_of(member_id)
    if index is None or not changes:
        return state

    member = state.members[index]
    updated = member.patch(**changes)
    if updated == member:
        return state
    return _replace_member(state, index, updated)


def toggle_flag(state: EncounterState, member_id: str, flag: str) -> EncounterState:
    """Flip ``prone`` or ``flanked`` on one member."""
    if flag not in ("prone", "flanked"):
        raise ValidationError(f"Unknown status flag: {flag!r}", field_name="flag", invalid_value=flag)
    member = state.find(member_id)
    if member is None:
        return state
    return update_member(state, member_id, **{flag: not getattr(member, flag)})


# =============================================================================
# Controller
# =============================================================================


class EncounterController:
    """Applies encounter transitions through an undoable history store.

    Each public mutation produces at most one history entry; transitions
    that change nothing produce none.

    Attributes:
        history: The store that owns the encounter state.
    """

    def __init__(
        self,
        history: HistoryStore[EncounterState],
        notifier: Notifier | None = None,
    ) -> None:
        self.history = history
        self._notifier = notifier

    # =========================================================================
    # Read Access
    # =========================================================================

    @property
    def state(self) -> EncounterState:
        return self.history.present

    @property
    def members(self) -> tuple[Combatant, ...]:
        return self.state.members

    @property
    def active_member(self) -> Combatant | None:
        return self.state.active_member

    @property
    def history_state(self) -> HistoryState[EncounterState]:
        return self.history.state

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def round_summary(self) -> str:
        """One-line status, e.g. ``Round 2 — Active: Thalia``."""
        state = self.state
        if state.is_empty:
            return "No combatants yet."
        active = state.active_member
        return f"Round {state.round} — Active: {active.name if active else '-'}"

    def balance(self) -> BalanceEstimate | None:
        """Difficulty estimate for the current members, computed on read."""
        return estimate_balance(self.state.members)

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_members(self, combatants: Sequence[Combatant]) -> bool:
        changed = self.history.set(lambda prev: add_members(prev, combatants))
        if changed:
            logger.info("Members added", count=len(combatants), total=len(self.members))
        return changed

    def add_characters(self, characters: Sequence[Character]) -> bool:
        """Add roster characters not already in the encounter."""
        before = len(self.members)
        changed = self.history.set(lambda prev: add_characters(prev, characters))
        if changed:
            logger.info("Characters added", count=len(self.members) - before)
        return changed

    def add_npc(self, draft: NpcDraft) -> Combatant:
        """Add an NPC and return the new member."""
        self.history.set(lambda prev: add_npc(prev, draft))
        member = self.members[-1]
        logger.info("NPC added", combatant=member.name, combatant_id=member.id)
        return member

    def remove_member(self, member_id: str) -> bool:
        changed = self.history.set(lambda prev: remove_member(prev, member_id))
        if changed:
            logger.info("Member removed", combatant_id=member_id)
        return changed

    def move_member(self, member_id: str, direction: MoveDirection | str) -> bool:
        return self.history.set(lambda prev: move_member(prev, member_id, direction))

    def sort_by_initiative(self) -> bool:
        changed = self.history.set(sort_by_initiative)
        if changed:
            logger.info("Initiative sorted", order=[m.name for m in self.members])
        return changed

    def next_turn(self) -> bool:
        changed = self.history.set(next_turn)
        if changed:
            self._log_turn("Next turn")
        return changed

    def prev_turn(self) -> bool:
        changed = self.history.set(prev_turn)
        if changed:
            self._log_turn("Previous turn")
        return changed

    def _log_turn(self, event: str) -> None:
        active = self.active_member
        logger.info(
            event,
            combatant=active.name if active else None,
            turn_index=self.state.turn_index,
            round=self.state.round,
        )

    def apply_adjustment(
        self,
        member_id: str,
        amount: int | None,
        mode: AdjustMode | str,
    ) -> PainThresholdEvent | None:
        """Hurt or heal a member, notifying once the change is committed.

        Returns:
            The pain-threshold event, if the rule triggered.
        """
        next_state, event = apply_adjustment(self.state, member_id, amount, mode)
        self.history.set(next_state)
        if event is not None:
            logger.info(
                "Pain threshold exceeded",
                combatant=event.subject_name,
                amount=event.amount,
                round=self.state.round,
            )
            if self._notifier is not None:
                # State is already committed when the notifier runs
                try:
                    self._notifier(event)
                except Exception as exc:
                    logger.warning(
                        "Pain threshold notification failed",
                        combatant=event.subject_name,
                        error=str(exc),
                    )
        return event

    def toggle_prone(self, member_id: str) -> bool:
        return self.history.set(lambda prev: toggle_flag(prev, member_id, "prone"))

    def toggle_flanked(self, member_id: str) -> bool:
        return self.history.set(lambda prev: toggle_flag(prev, member_id, "flanked"))

    def update_member(self, member_id: str, **changes: Any) -> bool:
        return self.history.set(lambda prev: update_member(prev, member_id, **changes))

    def clear(self) -> bool:
        changed = self.history.set(clear_encounter)
        if changed:
            logger.info("Encounter cleared")
        return changed

    def sync_from_roster(self, characters: Iterable[Character]) -> bool:
        """Refresh PC members from the roster; no history entry if unchanged."""
        roster = tuple(characters)
        return self.history.set(lambda prev: sync_members(prev, roster))

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()


__all__ = [
    "EDITABLE_MEMBER_FIELDS",
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
    "EncounterController",
]
