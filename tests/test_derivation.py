"""Tests for the derivation rules."""

import itertools

from pe_calculator.domain.macros import MacroAmounts
from pe_calculator.domain.ratios import Ratio, RatioKind
from pe_calculator.services.derivation import derive, energy, net_carbs, pe_ratio

_SAMPLE_GRAMS = (0.0, 0.5, 3.0, 12.25, 40.0)


def test_protein_heavy_entry_with_fiber_cancelling_carbs() -> None:
    derived = derive(
        MacroAmounts(protein_g=30, fat_g=10, total_carb_g=5, fiber_g=5)
    )

    assert derived.net_carb_g == 0
    assert derived.energy_g == 10
    assert derived.ratio == Ratio.finite(3.0)


def test_fiber_above_total_carb_is_clamped() -> None:
    derived = derive(
        MacroAmounts(protein_g=20, fat_g=0, total_carb_g=10, fiber_g=15)
    )

    assert derived.net_carb_g == 0
    assert derived.energy_g == 0
    assert derived.ratio == Ratio.infinite()
    assert derived.ratio.value is None


def test_all_zero_entry_has_undefined_ratio() -> None:
    derived = derive(MacroAmounts())

    assert derived.net_carb_g == 0
    assert derived.energy_g == 0
    assert derived.ratio.kind is RatioKind.UNDEFINED
    assert not derived.ratio.is_finite


def test_zero_protein_with_energy_is_finite_zero() -> None:
    assert pe_ratio(0, 12) == Ratio.finite(0.0)


def test_net_carbs_never_negative() -> None:
    for total_carb, fiber in itertools.product(_SAMPLE_GRAMS, repeat=2):
        value = net_carbs(total_carb, fiber)
        assert value >= 0
        assert value == max(0.0, total_carb - fiber)


def test_energy_bounds_fat_and_net_carbs() -> None:
    for fat, net in itertools.product(_SAMPLE_GRAMS, repeat=2):
        value = energy(fat, net)
        assert value >= fat
        assert value >= net


def test_ratio_matches_protein_over_energy() -> None:
    for protein, fat, total_carb, fiber in itertools.product(
        _SAMPLE_GRAMS, repeat=4
    ):
        derived = derive(
            MacroAmounts(
                protein_g=protein, fat_g=fat, total_carb_g=total_carb, fiber_g=fiber
            )
        )
        if derived.energy_g == 0:
            expected = Ratio.undefined() if protein == 0 else Ratio.infinite()
            assert derived.ratio == expected
        else:
            assert derived.ratio == Ratio.finite(protein / derived.energy_g)


def test_scaled_amounts_multiply_every_field() -> None:
    amounts = MacroAmounts(protein_g=10, fat_g=2, total_carb_g=4, fiber_g=1)

    scaled = amounts.scaled(2.5)

    assert scaled == MacroAmounts(
        protein_g=25, fat_g=5, total_carb_g=10, fiber_g=2.5
    )
    assert derive(scaled).ratio == derive(amounts).ratio
