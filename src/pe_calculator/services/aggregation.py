"""Aggregation of entries into a single synthetic entry."""

import math
from collections.abc import Iterable

from pe_calculator.domain.macros import MacroAmounts
from pe_calculator.domain.ratios import DerivedValues
from pe_calculator.services.derivation import derive


def compute_aggregate(amounts: Iterable[MacroAmounts]) -> MacroAmounts:
    """Sum amounts field by field; an empty collection sums to zero.

    Sums are exactly rounded so the result does not depend on entry order.
    """
    items = list(amounts)
    return MacroAmounts(
        protein_g=math.fsum(item.protein_g for item in items),
        fat_g=math.fsum(item.fat_g for item in items),
        total_carb_g=math.fsum(item.total_carb_g for item in items),
        fiber_g=math.fsum(item.fiber_g for item in items),
    )


def derive_aggregate(amounts: Iterable[MacroAmounts]) -> DerivedValues:
    """Sum the amounts, then derive exactly as for a single entry."""
    return derive(compute_aggregate(amounts))
