"""Unit tests for the gauge boost calculator."""

from decimal import Decimal

import pytest

from src.protocols.curve.boost import calculate_boost
from src.protocols.curve.config import MAX_BOOST


class TestCalculateBoost:
    """Tests for calculate_boost."""

    def test_zero_gauge_balance_returns_max_boost(self):
        assert calculate_boost(0, 0) == MAX_BOOST
        assert calculate_boost(10**21, 0) == MAX_BOOST

    def test_negative_gauge_balance_returns_max_boost(self):
        assert calculate_boost(10**18, -1) == MAX_BOOST

    def test_custom_max_boost(self):
        assert calculate_boost(0, 0, Decimal("3")) == Decimal("3")

    def test_fully_boosted_depositor(self):
        # working balance equals gauge balance
        assert calculate_boost(10**21, 10**21) == Decimal("2.5")

    def test_unboosted_depositor(self):
        # working balance is 40% of gauge balance
        assert calculate_boost(4 * 10**20, 10**21) == Decimal("1")

    def test_partial_boost(self):
        boost = calculate_boost(7 * 10**20, 10**21)
        assert boost == Decimal("1.75")

    @pytest.mark.parametrize(
        "working",
        [Decimal("NaN"), Decimal("Infinity")],
    )
    def test_degenerate_ratio_clamps_to_one(self, working):
        boost = calculate_boost(working, 10**21)
        assert boost == Decimal("1")
        assert boost.is_finite()

    def test_never_nan_for_non_negative_inputs(self):
        for working in (0, 1, 10**18, 10**30):
            for gauge in (0, 1, 10**18, 10**30):
                assert calculate_boost(working, gauge).is_finite()
