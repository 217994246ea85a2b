"""Tests for the turn-order state machine and encounter controller."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter

from combat_tracker.core.exceptions import EncounterError, ValidationError
from combat_tracker.engine import (
    EncounterController,
    HistoryStore,
    PainThresholdEvent,
    add_characters,
    add_members,
    apply_adjustment,
    move_member,
    next_turn,
    prev_turn,
    remove_member,
    sort_by_initiative,
    update_member,
)
from combat_tracker.models import (
    AdjustMode,
    Character,
    Combatant,
    CombatantSource,
    EncounterState,
    NpcDraft,
    default_encounter_state,
)
from combat_tracker.storage import MemoryStorage, VersionedStore


def names(state: EncounterState) -> list[str]:
    return [m.name for m in state.members]


def assert_index_in_range(state: EncounterState) -> None:
    if state.members:
        assert 0 <= state.turn_index < len(state.members)


@pytest.fixture
def controller() -> tuple[EncounterController, list[PainThresholdEvent]]:
    """Provide a controller over an empty encounter plus its received events."""
    events: list[PainThresholdEvent] = []
    history = HistoryStore(
        VersionedStore(MemoryStorage()),
        "sct.encounter",
        default_encounter_state,
        TypeAdapter(EncounterState),
    )
    return EncounterController(history, notifier=events.append), events


class TestMembership:
    """Tests for adding, removing and reordering members."""

    def test_add_keeps_turn_axis(self, sample_encounter: EncounterState, npc_factory) -> None:
        """Test appending never moves the turn pointer or round."""
        state = sample_encounter.patch(turn_index=2, round=3)

        after = add_members(state, [npc_factory("Wolf")])

        assert names(after)[-1] == "Wolf"
        assert (after.turn_index, after.round) == (2, 3)

    def test_add_duplicate_id_rejected(self, sample_encounter: EncounterState) -> None:
        """Test an id already in the encounter is refused."""
        with pytest.raises(EncounterError) as exc_info:
            add_members(sample_encounter, [sample_encounter.members[0]])

        assert exc_info.value.details["combatant_id"] == "cmb_aldo"

    def test_add_nothing_is_identity(self, sample_encounter: EncounterState) -> None:
        """Test adding an empty list returns the same state."""
        assert add_members(sample_encounter, []) is sample_encounter

    def test_add_characters_skips_present(
        self,
        sample_encounter: EncounterState,
        sample_roster: tuple[Character, ...],
    ) -> None:
        """Test only characters not yet in the encounter are added."""
        after = add_characters(sample_encounter, sample_roster)

        assert names(after) == ["Aldo", "Bryn", "Goblin", "Ogre", "Cato"]
        assert after.members[-1].ref_id == "pc_cato"
        assert add_characters(after, sample_roster) is after

    def test_remove_active_member(self, sample_encounter: EncounterState) -> None:
        """Test removing the active member keeps the slot."""
        state = sample_encounter.patch(turn_index=1)

        after = remove_member(state, "cmb_bryn")

        assert names(after) == ["Aldo", "Goblin", "Ogre"]
        assert after.active_member.name == "Goblin"

    def test_remove_active_last_member_clamps(self, sample_encounter: EncounterState) -> None:
        """Test removing the active last member clamps to the new end."""
        state = sample_encounter.patch(turn_index=3)

        after = remove_member(state, "cmb_ogre")

        assert after.turn_index == 2
        assert after.active_member.name == "Goblin"

    def test_remove_other_member_keeps_active(self, sample_encounter: EncounterState) -> None:
        """Test removing someone before the active member keeps who acts."""
        state = sample_encounter.patch(turn_index=2, round=4)

        after = remove_member(state, "cmb_aldo")

        assert after.active_member.name == "Goblin"
        assert (after.turn_index, after.round) == (1, 4)

    def test_remove_last_remaining(self, npc_factory) -> None:
        """Test an emptied encounter resets the turn axis."""
        state = EncounterState(members=(npc_factory("Wolf"),), turn_index=0, round=6)

        after = remove_member(state, "cmb_wolf")

        assert after == EncounterState()

    def test_remove_unknown_is_identity(self, sample_encounter: EncounterState) -> None:
        """Test removing an unknown id changes nothing."""
        assert remove_member(sample_encounter, "nobody") is sample_encounter

    @pytest.mark.parametrize(
        "member_id,direction,order",
        [
            ("cmb_bryn", "up", ["Bryn", "Aldo", "Goblin", "Ogre"]),
            ("cmb_bryn", "down", ["Aldo", "Goblin", "Bryn", "Ogre"]),
            ("cmb_aldo", "up", ["Aldo", "Bryn", "Goblin", "Ogre"]),
            ("cmb_ogre", "down", ["Aldo", "Bryn", "Goblin", "Ogre"]),
        ],
    )
    def test_move(
        self,
        sample_encounter: EncounterState,
        member_id: str,
        direction: str,
        order: list[str],
    ) -> None:
        """Test swaps with neighbours and boundary no-ops."""
        assert names(move_member(sample_encounter, member_id, direction)) == order

    def test_move_at_boundary_is_identity(self, sample_encounter: EncounterState) -> None:
        """Test a boundary move returns the same state."""
        assert move_member(sample_encounter, "cmb_aldo", "up") is sample_encounter

    def test_move_keeps_active_member(self, sample_encounter: EncounterState) -> None:
        """Test the active member stays active when it is moved."""
        state = sample_encounter.patch(turn_index=1)

        after = move_member(state, "cmb_bryn", "up")

        assert after.turn_index == 0
        assert after.active_member.name == "Bryn"

    def test_move_neighbour_of_active(self, sample_encounter: EncounterState) -> None:
        """Test moving another member past the active one follows the active id."""
        state = sample_encounter.patch(turn_index=1)

        after = move_member(state, "cmb_goblin", "up")

        assert after.active_member.name == "Bryn"
        assert after.turn_index == 2

    def test_move_invalid_direction(self, sample_encounter: EncounterState) -> None:
        """Test an unknown direction is a programmer error."""
        with pytest.raises(ValidationError):
            move_member(sample_encounter, "cmb_aldo", "sideways")


class TestSort:
    """Tests for sort_by_initiative."""

    def test_sort_scenario(self, npc_factory) -> None:
        """Test [A(3), B(7)] sorts to [B, A] at turn 0, round 1."""
        state = EncounterState(
            members=(npc_factory("A", initiative=3), npc_factory("B", initiative=7)),
            turn_index=1,
            round=4,
        )

        after = sort_by_initiative(state)

        assert names(after) == ["B", "A"]
        assert (after.turn_index, after.round) == (0, 1)

    def test_sort_is_stable(self, npc_factory) -> None:
        """Test ties keep their prior relative order."""
        state = EncounterState(
            members=(
                npc_factory("First", initiative=5),
                npc_factory("Low", initiative=1),
                npc_factory("Second", initiative=5),
                npc_factory("Third", initiative=5),
            )
        )

        assert names(sort_by_initiative(state)) == ["First", "Second", "Third", "Low"]

    def test_sort_empty_is_identity(self) -> None:
        """Test sorting nothing changes nothing."""
        state = EncounterState(round=3)
        assert sort_by_initiative(state) is state


class TestTurns:
    """Tests for the turn/round state machine."""

    def test_next_turn_advances(self, sample_encounter: EncounterState) -> None:
        """Test a plain step forward."""
        after = next_turn(sample_encounter)
        assert (after.turn_index, after.round) == (1, 1)

    @pytest.mark.parametrize("start", [0, 1, 2, 3])
    def test_full_cycle_increments_round_once(
        self,
        sample_encounter: EncounterState,
        start: int,
    ) -> None:
        """Test n steps return to the start index with exactly one more round."""
        state = sample_encounter.patch(turn_index=start, round=2)
        for _ in range(len(state.members)):
            state = next_turn(state)
            assert_index_in_range(state)

        assert (state.turn_index, state.round) == (start, 3)

    def test_prev_turn_wraps_and_decrements(self, sample_encounter: EncounterState) -> None:
        """Test stepping back past the start decrements the round."""
        after = prev_turn(sample_encounter.patch(round=3))
        assert (after.turn_index, after.round) == (3, 2)

    def test_prev_turn_round_floor(self, sample_encounter: EncounterState) -> None:
        """Test the round never drops below 1."""
        after = prev_turn(sample_encounter)
        assert (after.turn_index, after.round) == (3, 1)

    def test_prev_turn_plain(self, sample_encounter: EncounterState) -> None:
        """Test a plain step back keeps the round."""
        after = prev_turn(sample_encounter.patch(turn_index=2, round=2))
        assert (after.turn_index, after.round) == (1, 2)

    @pytest.mark.parametrize("step", [next_turn, prev_turn])
    def test_empty_is_identity(self, step) -> None:
        """Test navigation on an empty encounter changes nothing."""
        state = EncounterState()
        assert step(state) is state


class TestAdjustment:
    """Tests for hurt/heal adjustments and the pain-threshold rule."""

    def test_hurt_reduces_toughness(self, sample_encounter: EncounterState) -> None:
        """Test a hurt below the threshold."""
        after, event = apply_adjustment(sample_encounter, "cmb_aldo", 5, AdjustMode.HURT)

        member = after.find("cmb_aldo")
        assert member.toughness == 7
        assert member.prone is False
        assert event is None

    def test_hurt_at_threshold_knocks_prone(self, sample_encounter: EncounterState) -> None:
        """Test meeting the threshold sets prone and yields one event."""
        after, event = apply_adjustment(sample_encounter, "cmb_aldo", 6, "hurt")

        assert after.find("cmb_aldo").prone is True
        assert event == PainThresholdEvent(subject_name="Aldo", amount=6)
        assert event.message == "Aldo takes 6 damage and exceeds Pain Threshold"

    def test_hurt_below_threshold_leaves_prone(self, sample_encounter: EncounterState) -> None:
        """Test threshold - 1 does not change prone."""
        after, event = apply_adjustment(sample_encounter, "cmb_aldo", 5, "hurt")
        assert after.find("cmb_aldo").prone is False
        assert event is None

    def test_threshold_uses_raw_amount(self, sample_encounter: EncounterState) -> None:
        """Test the rule compares the amount, not the resulting toughness."""
        after, event = apply_adjustment(sample_encounter, "cmb_goblin", 50, "hurt")

        member = after.find("cmb_goblin")
        assert member.toughness == 0
        assert member.prone is True
        assert event.amount == 50

    def test_no_threshold_never_triggers(self, sample_encounter: EncounterState) -> None:
        """Test members without a threshold are never knocked prone."""
        after, event = apply_adjustment(sample_encounter, "cmb_ogre", 19, "hurt")
        assert after.find("cmb_ogre").prone is False
        assert event is None

    def test_heal_clears_prone(self, sample_encounter: EncounterState) -> None:
        """Test any heal removes prone."""
        state = update_member(sample_encounter, "cmb_aldo", prone=True, toughness=3)

        after, event = apply_adjustment(state, "cmb_aldo", 1, "heal")

        member = after.find("cmb_aldo")
        assert member.prone is False
        assert member.toughness == 4
        assert event is None

    @pytest.mark.parametrize("amount,expected", [(5000, 999), (None, 13)])
    def test_amount_clamp_and_default(
        self,
        sample_encounter: EncounterState,
        amount: int | None,
        expected: int,
    ) -> None:
        """Test the amount ceiling and the default amount of 1."""
        after, _ = apply_adjustment(sample_encounter, "cmb_aldo", amount, "heal")
        assert after.find("cmb_aldo").toughness == expected

    @pytest.mark.parametrize("amount", [0, -4])
    def test_zero_amount_is_identity(self, sample_encounter: EncounterState, amount: int) -> None:
        """Test a zero (or negative, clamped to zero) amount changes nothing."""
        after, event = apply_adjustment(sample_encounter, "cmb_aldo", amount, "hurt")
        assert after is sample_encounter
        assert event is None

    def test_unknown_member_is_identity(self, sample_encounter: EncounterState) -> None:
        """Test adjusting an unknown id changes nothing."""
        after, event = apply_adjustment(sample_encounter, "nobody", 3, "hurt")
        assert after is sample_encounter

    def test_invalid_mode(self, sample_encounter: EncounterState) -> None:
        """Test an unknown mode is a programmer error."""
        with pytest.raises(ValidationError):
            apply_adjustment(sample_encounter, "cmb_aldo", 3, "poison")


class TestUpdateMember:
    """Tests for direct field patches."""

    def test_patch_fields(self, sample_encounter: EncounterState) -> None:
        """Test editable fields are patched with validation."""
        after = update_member(sample_encounter, "cmb_ogre", name="Big Ogre", toughness=-5)

        member = after.find("cmb_ogre")
        assert member.name == "Big Ogre"
        assert member.toughness == 0

    @pytest.mark.parametrize("field", ["id", "source", "ref_id", "hit_points"])
    def test_rejects_non_editable_fields(self, sample_encounter: EncounterState, field: str) -> None:
        """Test identity and unknown fields are refused."""
        with pytest.raises(ValidationError):
            update_member(sample_encounter, "cmb_ogre", **{field: "x"})

    def test_unknown_member_is_identity(self, sample_encounter: EncounterState) -> None:
        """Test patching an unknown id changes nothing."""
        assert update_member(sample_encounter, "nobody", name="X") is sample_encounter


class TestEncounterController:
    """Tests for the history-backed controller."""

    def test_empty_next_turn_creates_no_history(self, controller) -> None:
        """Test next_turn on an empty encounter is a pure no-op."""
        ctrl, _ = controller

        assert ctrl.next_turn() is False
        assert (ctrl.state.turn_index, ctrl.state.round) == (0, 1)
        assert not ctrl.can_undo

    def test_each_mutation_is_one_entry(self, controller, npc_factory) -> None:
        """Test every committed operation adds exactly one history entry."""
        ctrl, _ = controller
        ctrl.add_members([npc_factory("Wolf", initiative=2), npc_factory("Bear", initiative=8)])
        ctrl.sort_by_initiative()
        ctrl.toggle_prone("cmb_wolf")
        ctrl.toggle_flanked("cmb_bear")
        ctrl.update_member("cmb_bear", note="angry")
        ctrl.next_turn()

        assert len(ctrl.history_state.past) == 6
        bear = ctrl.state.find("cmb_bear")
        assert bear.flanked is True and bear.note == "angry"
        assert ctrl.state.find("cmb_wolf").prone is True

    def test_add_npc(self, controller) -> None:
        """Test authoring an NPC from a draft."""
        ctrl, _ = controller

        member = ctrl.add_npc(NpcDraft(name=" Bandit ", toughness=7))

        assert member.name == "Bandit"
        assert member.source == CombatantSource.NPC
        assert ctrl.members == (member,)

    def test_pain_event_delivered_after_commit(self) -> None:
        """Test the notifier sees the committed state and gets one event."""
        events: list[PainThresholdEvent] = []
        seen_prone: list[bool] = []
        history = HistoryStore(VersionedStore(MemoryStorage()), "sct.encounter", default_encounter_state)

        def notifier(event: PainThresholdEvent) -> None:
            events.append(event)
            seen_prone.append(ctrl.state.find("cmb_x").prone)

        ctrl = EncounterController(history, notifier=notifier)
        ctrl.add_members([Combatant(id="cmb_x", name="Xan", toughness=10, pain_threshold=4)])

        event = ctrl.apply_adjustment("cmb_x", 4, "hurt")

        assert events == [event]
        assert seen_prone == [True]
        assert ctrl.state.find("cmb_x").toughness == 6

    def test_undo_adjustment(self, controller) -> None:
        """Test an adjustment can be undone bit for bit."""
        ctrl, _ = controller
        ctrl.add_members([Combatant(id="cmb_x", name="Xan", toughness=10, pain_threshold=4)])
        before = ctrl.state

        ctrl.apply_adjustment("cmb_x", 9, "hurt")
        assert ctrl.undo() is True

        assert ctrl.state == before
        assert ctrl.redo() is True
        assert ctrl.state.find("cmb_x").toughness == 1

    def test_clear(self, controller, npc_factory) -> None:
        """Test clearing resets to the empty encounter."""
        ctrl, _ = controller
        ctrl.add_members([npc_factory("Wolf")])
        ctrl.next_turn()

        assert ctrl.clear() is True
        assert ctrl.state == EncounterState()
        assert ctrl.clear() is False

    def test_round_summary(self, controller, npc_factory) -> None:
        """Test the status line."""
        ctrl, _ = controller
        assert ctrl.round_summary() == "No combatants yet."

        ctrl.add_members([npc_factory("Wolf"), npc_factory("Bear")])
        ctrl.next_turn()

        assert ctrl.round_summary() == "Round 1 — Active: Bear"

    def test_invariant_holds_across_operations(self, controller, npc_factory) -> None:
        """Test the turn index stays in range through a mixed sequence."""
        ctrl, _ = controller
        ctrl.add_members([npc_factory(n, initiative=i) for i, n in enumerate("ABCDE")])
        operations = [
            lambda: ctrl.next_turn(),
            lambda: ctrl.next_turn(),
            lambda: ctrl.next_turn(),
            lambda: ctrl.remove_member("cmb_e"),
            lambda: ctrl.move_member("cmb_a", "down"),
            lambda: ctrl.prev_turn(),
            lambda: ctrl.remove_member("cmb_d"),
            lambda: ctrl.sort_by_initiative(),
            lambda: ctrl.remove_member("cmb_c"),
            lambda: ctrl.undo(),
            lambda: ctrl.next_turn(),
        ]
        for operation in operations:
            operation()
            assert_index_in_range(ctrl.state)
