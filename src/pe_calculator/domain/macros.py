"""Domain models for macro entries."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID, uuid4

from pe_calculator.errors import InvalidInputError


class MacroField(StrEnum):
    """Editable gram fields of an entry."""

    PROTEIN = "protein"
    FAT = "fat"
    TOTAL_CARB = "total_carb"
    FIBER = "fiber"


SERVINGS = "servings"

# Upper bounds keep every scaled amount and aggregate sum finite.
MAX_GRAMS = 1_000_000.0
MAX_SERVINGS = 10_000.0


@dataclass(frozen=True)
class MacroAmounts:
    """Gram amounts of protein, fat, total carbohydrate and fiber."""

    protein_g: float = 0.0
    fat_g: float = 0.0
    total_carb_g: float = 0.0
    fiber_g: float = 0.0

    def get(self, macro: MacroField) -> float:
        """Return the amount for a single field."""
        return getattr(self, _ATTRIBUTES[macro])

    def scaled(self, factor: float) -> "MacroAmounts":
        """Return the amounts multiplied by a serving factor."""
        return MacroAmounts(
            protein_g=self.protein_g * factor,
            fat_g=self.fat_g * factor,
            total_carb_g=self.total_carb_g * factor,
            fiber_g=self.fiber_g * factor,
        )


@dataclass(frozen=True)
class MacroEntry:
    """Snapshot of one food item in the collection."""

    id: UUID
    label: str = ""
    per_serving: MacroAmounts = field(default_factory=MacroAmounts)
    servings: float = 1.0

    @classmethod
    def create(
        cls,
        initial: Mapping[MacroField | str, object] | None = None,
        *,
        label: str = "",
        servings: object = 1.0,
    ) -> "MacroEntry":
        """Create an entry with a fresh id; omitted gram fields default to zero."""
        values = {macro: 0.0 for macro in MacroField}
        for key, value in (initial or {}).items():
            macro = parse_field(key)
            values[macro] = validate_grams(macro, value)
        return cls(
            id=uuid4(),
            label=label,
            per_serving=MacroAmounts(
                protein_g=values[MacroField.PROTEIN],
                fat_g=values[MacroField.FAT],
                total_carb_g=values[MacroField.TOTAL_CARB],
                fiber_g=values[MacroField.FIBER],
            ),
            servings=validate_grams(SERVINGS, servings),
        )

    @property
    def amounts(self) -> MacroAmounts:
        """Amounts actually used, per-serving values times servings."""
        return self.per_serving.scaled(self.servings)


_ATTRIBUTES = {
    MacroField.PROTEIN: "protein_g",
    MacroField.FAT: "fat_g",
    MacroField.TOTAL_CARB: "total_carb_g",
    MacroField.FIBER: "fiber_g",
}


def parse_field(key: MacroField | str) -> MacroField:
    """Resolve a field identifier, rejecting unknown names."""
    try:
        return MacroField(key)
    except ValueError:
        raise InvalidInputError(str(key), None, "unknown field") from None


def validate_grams(name: str, value: object) -> float:
    """Return value as a float if it is a finite, non-negative, bounded number."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidInputError(name, value, "not a number")
    try:
        number = float(value)
    except OverflowError:
        raise InvalidInputError(name, value, "not finite") from None
    if not math.isfinite(number):
        raise InvalidInputError(name, value, "not finite")
    if number < 0:
        raise InvalidInputError(name, value, "negative")
    limit = MAX_SERVINGS if name == SERVINGS else MAX_GRAMS
    if number > limit:
        raise InvalidInputError(name, value, "too large")
    return number
