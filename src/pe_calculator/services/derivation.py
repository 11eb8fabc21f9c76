"""Derivation rules for net carbs, energy and the P:E ratio."""

from pe_calculator.domain.macros import MacroAmounts
from pe_calculator.domain.ratios import DerivedValues, Ratio


def net_carbs(total_carb_g: float, fiber_g: float) -> float:
    """Return total carbs minus fiber, floored at zero.

    Labels sometimes report slightly more fiber than total carbohydrate due to
    rounding, so a negative difference is clamped instead of rejected.
    """
    return max(0.0, total_carb_g - fiber_g)


def energy(fat_g: float, net_carb_g: float) -> float:
    """Return energy grams, the sum of fat and net carbs."""
    return fat_g + net_carb_g


def pe_ratio(protein_g: float, energy_g: float) -> Ratio:
    """Return protein divided by energy.

    Zero energy yields an undefined ratio when there is no protein either,
    and an infinite one for pure protein.
    """
    if energy_g == 0:
        if protein_g == 0:
            return Ratio.undefined()
        return Ratio.infinite()
    return Ratio.finite(protein_g / energy_g)


def derive(amounts: MacroAmounts) -> DerivedValues:
    """Compute derived values for an entry or aggregate."""
    net_carb_g = net_carbs(amounts.total_carb_g, amounts.fiber_g)
    energy_g = energy(amounts.fat_g, net_carb_g)
    return DerivedValues(
        net_carb_g=net_carb_g,
        energy_g=energy_g,
        ratio=pe_ratio(amounts.protein_g, energy_g),
    )
