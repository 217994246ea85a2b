"""Shared record base and the sparse attribute record.

Every persisted record in the tracker derives from TrackerModel: an
immutable pydantic model whose JSON form uses the camelCase keys of the
export format. Records are never mutated in place; ``patch`` builds a
validated copy so clamps and normalisation run on every write.

The attribute record is a fixed set of eight nullable numbers. An
attribute map with nothing usable in it collapses to ``None``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from combat_tracker.core.constants import ATTRIBUTE_KEYS
from combat_tracker.core.exceptions import ValidationError


# =============================================================================
# Base Record
# =============================================================================


class TrackerModel(BaseModel):
    """Base class for all tracker records.

    Records are frozen so history snapshots can be shared safely between
    the past, present and future stacks.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def patch(self, **changes: Any) -> Self:
        """Return a validated copy with ``changes`` applied.

        Unlike ``model_copy(update=...)`` this re-runs every validator.
        Returns ``self`` when ``changes`` is empty.

        Raises:
            ValidationError: If a change names a field the record lacks.
        """
        fields = type(self).model_fields
        unknown = sorted(set(changes) - set(fields))
        if unknown:
            raise ValidationError(
                f"Unknown field(s) for {type(self).__name__}: {', '.join(unknown)}",
                field_name=unknown[0],
            )
        if not changes:
            return self
        data = {name: getattr(self, name) for name in fields}
        data.update(changes)
        return type(self).model_validate(data)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to the camelCase JSON-compatible form."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Attributes
# =============================================================================


class CharacterAttributes(TrackerModel):
    """Optional attribute scores, one slot per attribute symbol."""

    model_config = ConfigDict(allow_inf_nan=False)

    acc: float | None = None
    cun: float | None = None
    dis: float | None = None
    per: float | None = None
    qui: float | None = None
    res: float | None = None
    str: float | None = None
    vig: float | None = None

    def present(self) -> dict[Any, float]:
        """Return only the attributes that carry a value."""
        values = {key: getattr(self, key) for key in ATTRIBUTE_KEYS}
        return {key: value for key, value in values.items() if value is not None}


def _finite_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_attributes(value: Any) -> CharacterAttributes | None:
    """Normalise any attribute input to a record or ``None``.

    Missing, null, non-numeric and non-finite entries are dropped, keys
    outside the attribute set are ignored, and an empty result becomes
    ``None``.

    Args:
        value: A CharacterAttributes, a mapping of symbol to number, or None.

    Returns:
        The normalised record, or None when no attribute has a value.

    Raises:
        ValueError: If ``value`` is neither a record nor a mapping.
    """
    if value is None:
        return None
    if isinstance(value, CharacterAttributes):
        raw: Mapping[str, Any] = {key: getattr(value, key) for key in ATTRIBUTE_KEYS}
    elif isinstance(value, Mapping):
        raw = value
    else:
        raise ValueError(f"attributes must be a mapping, got {type(value).__name__}")

    cleaned = {}
    for key in ATTRIBUTE_KEYS:
        number = _finite_number(raw.get(key))
        if number is not None:
            cleaned[key] = number
    if not cleaned:
        return None
    if isinstance(value, CharacterAttributes) and len(cleaned) == len(value.present()):
        return value
    return CharacterAttributes(**cleaned)


def attributes_equal(
    a: CharacterAttributes | None,
    b: CharacterAttributes | None,
) -> bool:
    """Compare two attribute records slot by slot (missing equals None)."""
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    return all(getattr(a, key) == getattr(b, key) for key in ATTRIBUTE_KEYS)


def clone_attributes(value: Any) -> CharacterAttributes | None:
    """Normalise ``value`` into a record independent of its source."""
    normalized = normalize_attributes(value)
    return normalized.model_copy() if normalized is not None else None


__all__ = [
    "TrackerModel",
    "CharacterAttributes",
    "normalize_attributes",
    "attributes_equal",
    "clone_attributes",
]
