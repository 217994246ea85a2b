"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Skirmish Combat Tracker test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from combat_tracker.models import (
    Character,
    Combatant,
    CombatantSource,
    EncounterState,
    character_to_combatant,
)
from combat_tracker.storage import MemoryStorage, VersionedStore


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from combat_tracker.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "SCT_DEBUG": "true",
        "SCT_LOG_LEVEL": "DEBUG",
        "SCT_STORAGE_BACKEND": "memory",
        "SCT_HISTORY_LIMIT": "20",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def memory_port() -> MemoryStorage:
    """Provide an empty in-memory storage port."""
    return MemoryStorage()


@pytest.fixture
def versioned_store(memory_port: MemoryStorage) -> VersionedStore:
    """Provide a versioned store over the in-memory port."""
    return VersionedStore(memory_port)


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_roster() -> tuple[Character, ...]:
    """Provide a three-character roster with fixed ids."""
    return (
        Character(id="pc_aldo", name="Aldo", role="Warrior", initiative=5, toughness=12,
                  defense=6, armor="Medium (d8)", pain_threshold=6),
        Character(id="pc_bryn", name="Bryn", role="Mystic", initiative=9, toughness=9,
                  defense=8, pain_threshold=5, attributes={"res": 15, "per": 11}),
        Character(id="pc_cato", name="Cato", role="Rogue", initiative=7, toughness=10,
                  defense=10),
    )


def make_npc(name: str, *, initiative: int = 0, toughness: int = 10, **extra: object) -> Combatant:
    """Build an NPC combatant with a readable id."""
    return Combatant(
        id=f"cmb_{name.lower()}",
        source=CombatantSource.NPC,
        name=name,
        initiative=initiative,
        toughness=toughness,
        **extra,
    )


@pytest.fixture
def npc_factory():
    """Provide the NPC builder to tests that need ad-hoc combatants."""
    return make_npc


@pytest.fixture
def sample_encounter(sample_roster: tuple[Character, ...]) -> EncounterState:
    """Provide an encounter with two PCs and two NPCs, first member active."""
    pcs = tuple(
        character_to_combatant(pc).patch(id=f"cmb_{pc.name.lower()}")
        for pc in sample_roster[:2]
    )
    npcs = (
        make_npc("Goblin", initiative=6, toughness=8, pain_threshold=3),
        make_npc("Ogre", initiative=2, toughness=20, defense=4),
    )
    return EncounterState(members=pcs + npcs)
