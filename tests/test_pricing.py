"""
Unit tests for reserve normalization, price derivation and pair ordering.
"""

from decimal import Decimal

import pytest

from conftest import OTHER, PAIR, PAIR_2, TOKEN, WETH
from models import LiquidityEntry, PairRecord, TokenInfo, TokenLookup
from pricing import (
    attribute_reserves,
    compute_price,
    counter_token,
    format_price,
    format_units,
    liquidity_value_in_native,
    sort_entries,
)


def make_entry(pair_address, counter, target_reserve, counter_reserve="1"):
    return LiquidityEntry(
        pair=PairRecord(pair_address, TOKEN, counter, 0, 0),
        target=TokenLookup(TokenInfo(TOKEN, "T", "Target", 18)),
        counter=TokenLookup(TokenInfo(counter, "C", "Counter", 18)),
        target_reserve=Decimal(target_reserve),
        counter_reserve=Decimal(counter_reserve),
        price=None,
    )


class TestFormatUnits:
    def test_uses_token_decimals(self):
        assert format_units(5_000_000, 6) == Decimal("5")
        assert format_units(2_500_000_000_000_000_000, 18) == Decimal("2.5")

    def test_zero_decimals(self):
        assert format_units(42, 0) == Decimal("42")

    def test_keeps_full_precision_of_large_reserves(self):
        assert str(format_units(10**30 + 1, 18)) == "1000000000000.000000000000000001"

    def test_rejects_negative_decimals(self):
        with pytest.raises(ValueError):
            format_units(1, -1)


class TestAttributeReserves:
    def test_target_is_token0(self):
        pair = PairRecord(PAIR, TOKEN, WETH, 10, 20)
        assert attribute_reserves(pair, TOKEN) == (10, 20)
        assert counter_token(pair, TOKEN) == WETH

    def test_target_is_token1(self):
        pair = PairRecord(PAIR, WETH, TOKEN, 10, 20)
        assert attribute_reserves(pair, TOKEN) == (20, 10)
        assert counter_token(pair, TOKEN) == WETH

    def test_comparison_ignores_case(self):
        checksummed = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
        pair = PairRecord(PAIR, checksummed, TOKEN, 7, 9)
        assert attribute_reserves(pair, checksummed.lower()) == (7, 9)

    def test_swapped_roles_swap_reserves(self):
        pair = PairRecord(PAIR, TOKEN, WETH, 10, 20)
        target_side = attribute_reserves(pair, TOKEN)
        counter_side = attribute_reserves(pair, WETH)
        assert target_side == tuple(reversed(counter_side))

    def test_unrelated_token_raises(self):
        pair = PairRecord(PAIR, TOKEN, WETH, 10, 20)
        with pytest.raises(ValueError):
            attribute_reserves(pair, OTHER)


class TestComputePrice:
    def test_counter_per_target(self):
        assert compute_price(Decimal("5.0"), Decimal("2.5")) == Decimal("0.5")

    def test_zero_target_reserve_is_unavailable(self):
        assert compute_price(Decimal("0"), Decimal("2.5")) is None

    def test_zero_counter_reserve_is_zero_price(self):
        assert compute_price(Decimal("3"), Decimal("0")) == Decimal("0")

    def test_format_price(self):
        assert format_price(None) == "N/A"
        assert format_price(Decimal("0.5"), places=4) == "0.5000"


class TestLiquidityValue:
    def test_twice_the_native_reserve(self):
        entry = make_entry(PAIR, WETH, "100", counter_reserve="2.5")
        assert liquidity_value_in_native(entry, WETH) == Decimal("5.0")

    def test_undefined_for_other_counters(self):
        entry = make_entry(PAIR, OTHER, "100", counter_reserve="2.5")
        assert liquidity_value_in_native(entry, WETH) is None


class TestSortEntries:
    def test_primary_counter_first(self):
        deep_other = make_entry(PAIR, OTHER, "1000")
        shallow_weth = make_entry(PAIR_2, WETH, "1")

        ordered = sort_entries([deep_other, shallow_weth], primary=WETH)

        assert ordered == [shallow_weth, deep_other]

    def test_reserve_order_without_primary(self):
        deep_other = make_entry(PAIR, OTHER, "1000")
        shallow_weth = make_entry(PAIR_2, WETH, "1")

        ordered = sort_entries([shallow_weth, deep_other])

        assert ordered == [deep_other, shallow_weth]

    def test_ties_are_broken_by_pair_address(self):
        first = make_entry(PAIR, OTHER, "5")
        second = make_entry(PAIR_2, OTHER, "5")
        assert sort_entries([second, first]) == [first, second]
