"""Encounter difficulty estimate.

Compares the NPC side against the PC side on total toughness, head count
and mean defense, and maps the weighted score to a difficulty label. The
estimate is derived on read and never stored.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from combat_tracker.models.entities import Combatant
from combat_tracker.models.enums import CombatantSource, Difficulty

TOUGHNESS_WEIGHT = 0.5
NUMBERS_WEIGHT = 0.3
DEFENSE_WEIGHT = 0.2

# (exclusive upper bound, label), checked in order
DIFFICULTY_THRESHOLDS: tuple[tuple[float, Difficulty], ...] = (
    (0.5, Difficulty.TRIVIAL),
    (0.8, Difficulty.EASY),
    (1.2, Difficulty.BALANCED),
    (1.6, Difficulty.HARD),
    (2.0, Difficulty.DEADLY),
)


@dataclass(frozen=True)
class BalanceEstimate:
    """Side totals, ratios and the resulting label."""

    pc_count: int
    npc_count: int
    pc_toughness: int
    npc_toughness: int
    pc_defense: int
    npc_defense: int
    toughness_ratio: float
    numbers_ratio: float
    defense_ratio: float
    score: float
    label: Difficulty


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return math.floor(value + 0.5)


def difficulty_for(score: float) -> Difficulty:
    """Map a weighted score to its difficulty label."""
    for upper, label in DIFFICULTY_THRESHOLDS:
        if score < upper:
            return label
    return Difficulty.OVERWHELMING


def estimate_balance(members: Iterable[Combatant]) -> BalanceEstimate | None:
    """Estimate how hard the NPC side is for the PC side.

    Args:
        members: Current encounter members.

    Returns:
        The estimate, or None if either side has no members.
    """
    roster = tuple(members)
    pcs = [m for m in roster if m.source == CombatantSource.PC]
    npcs = [m for m in roster if m.source == CombatantSource.NPC]
    if not pcs or not npcs:
        return None

    pc_toughness = sum(m.toughness for m in pcs)
    npc_toughness = sum(m.toughness for m in npcs)
    pc_defense = round_half_up(sum(m.defense for m in pcs) / len(pcs))
    npc_defense = round_half_up(sum(m.defense for m in npcs) / len(npcs))

    # Zero PC denominators are floored at 1
    toughness_ratio = npc_toughness / max(pc_toughness, 1)
    numbers_ratio = len(npcs) / len(pcs)
    defense_ratio = npc_defense / max(pc_defense, 1)
    score = (
        TOUGHNESS_WEIGHT * toughness_ratio
        + NUMBERS_WEIGHT * numbers_ratio
        + DEFENSE_WEIGHT * defense_ratio
    )

    return BalanceEstimate(
        pc_count=len(pcs),
        npc_count=len(npcs),
        pc_toughness=pc_toughness,
        npc_toughness=npc_toughness,
        pc_defense=pc_defense,
        npc_defense=npc_defense,
        toughness_ratio=toughness_ratio,
        numbers_ratio=numbers_ratio,
        defense_ratio=defense_ratio,
        score=score,
        label=difficulty_for(score),
    )


__all__ = [
    "BalanceEstimate",
    "DIFFICULTY_THRESHOLDS",
    "round_half_up",
    "difficulty_for",
    "estimate_balance",
]
