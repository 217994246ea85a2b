"""Seed roster used when no saved roster exists.

Contains the starting party a fresh installation shows on first load.
"""

from __future__ import annotations

from combat_tracker.models.entities import Character


# =============================================================================
# Starting Party
# =============================================================================

DEFAULT_CHARACTERS = (
    {
        "id": "pc_default_cassimei",
        "name": "Cassimei",
        "role": "Bard",
        "defense": 8,
        "armor": "Light (d4)",
        "note": "Charming storyteller",
    },
    {
        "id": "pc_default_thalia",
        "name": "Thalia",
        "role": "Wizard",
        "defense": 3,
        "armor": "Light (d4)",
        "note": "Mystic scholar",
    },
    {
        "id": "pc_default_vigoi",
        "name": "Vigoi",
        "role": "Warrior",
        "defense": 0,
        "armor": "Medium (d8)",
        "note": "Placeholder stats",
    },
    {
        "id": "pc_default_ymma",
        "name": "Ymma",
        "role": "Goblin",
        "defense": 0,
        "armor": "Light (d4)",
        "note": "Placeholder stats",
    },
)


def build_default_characters() -> tuple[Character, ...]:
    """Build the starting roster (initiative 0, toughness 10, no threshold)."""
    return tuple(Character(initiative=0, toughness=10, **data) for data in DEFAULT_CHARACTERS)


__all__ = [
    "DEFAULT_CHARACTERS",
    "build_default_characters",
]
