"""Tests for roster editing."""

from __future__ import annotations

import pytest

from combat_tracker.core.exceptions import ValidationError
from combat_tracker.engine import HistoryStore, RosterController
from combat_tracker.engine.session import ROSTER_ADAPTER
from combat_tracker.models import Character, CharacterAttributes
from combat_tracker.storage import MemoryStorage, VersionedStore


@pytest.fixture
def roster(sample_roster: tuple[Character, ...]) -> RosterController:
    """Provide a roster controller seeded with the sample roster."""
    history = HistoryStore(
        VersionedStore(MemoryStorage()),
        "sct.characters",
        lambda: sample_roster,
        ROSTER_ADAPTER,
    )
    return RosterController(history)


class TestRosterController:
    """Tests for RosterController."""

    def test_add_character(self, roster: RosterController) -> None:
        """Test adding a blank character appends one history entry."""
        pc = roster.add_character()

        assert roster.characters[-1] is pc
        assert pc.name == "New PC"
        assert roster.can_undo

    def test_update_character(self, roster: RosterController) -> None:
        """Test patching fields with validation."""
        assert roster.update_character("pc_cato", name="Cato the Bold", toughness=1200) is True

        pc = roster.get("pc_cato")
        assert pc.name == "Cato the Bold"
        assert pc.toughness == 999

    def test_update_unknown_id_is_noop(self, roster: RosterController) -> None:
        """Test an unknown id changes nothing."""
        assert roster.update_character("pc_nobody", name="X") is False
        assert not roster.can_undo

    @pytest.mark.parametrize("changes", [{"id": "pc_other"}, {"hit_points": 4}])
    def test_update_rejects_bad_fields(self, roster: RosterController, changes: dict) -> None:
        """Test id changes and unknown fields are refused."""
        with pytest.raises(ValidationError):
            roster.update_character("pc_cato", **changes)

    def test_same_value_is_noop(self, roster: RosterController) -> None:
        """Test re-applying the current value records nothing."""
        assert roster.update_character("pc_cato", name="Cato") is False
        assert not roster.can_undo

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("14", CharacterAttributes(res=15, per=11, acc=14)),
            (12.5, CharacterAttributes(res=15, per=11, acc=12.5)),
        ],
    )
    def test_set_attribute(
        self,
        roster: RosterController,
        value: object,
        expected: CharacterAttributes,
    ) -> None:
        """Test setting an attribute from raw input."""
        roster.set_attribute("pc_bryn", "acc", value)
        assert roster.get("pc_bryn").attributes == expected

    @pytest.mark.parametrize("value", ["", "  ", "abc", None])
    def test_set_attribute_blank_removes(self, roster: RosterController, value: object) -> None:
        """Test blank or non-numeric input removes the attribute."""
        roster.set_attribute("pc_bryn", "res", value)
        assert roster.get("pc_bryn").attributes == CharacterAttributes(per=11)

    def test_removing_last_attribute_collapses(self, roster: RosterController) -> None:
        """Test the record becomes None once empty."""
        roster.set_attribute("pc_bryn", "res", "")
        roster.set_attribute("pc_bryn", "per", "")

        assert roster.get("pc_bryn").attributes is None

    def test_set_unknown_attribute(self, roster: RosterController) -> None:
        """Test only the eight attribute symbols are accepted."""
        with pytest.raises(ValidationError):
            roster.set_attribute("pc_bryn", "luck", "3")

    def test_delete_and_undo(self, roster: RosterController) -> None:
        """Test deleting a character can be undone."""
        assert roster.delete_character("pc_aldo") is True
        assert roster.get("pc_aldo") is None

        assert roster.undo() is True
        assert roster.get("pc_aldo").name == "Aldo"
        assert roster.redo() is True
        assert roster.get("pc_aldo") is None

    def test_delete_unknown_is_noop(self, roster: RosterController) -> None:
        """Test deleting an unknown id records nothing."""
        assert roster.delete_character("pc_nobody") is False
