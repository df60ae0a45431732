"""Tests for pool snapshot and quote models."""

import pytest
from pydantic import ValidationError

from poolmath.math.fixed_point import FixedPoint64
from poolmath.models import (
    SwapKind,
    SwapQuote,
    SwapRequest,
    WeightedPoolState,
    WeightFormat,
)
from poolmath.pools.weights import FixedPointWeights, PercentWeights
from tests.helpers import MAX_U64, make_stable_pool, make_weighted_pool


class TestUint64:
    """Tests for balance and amount validation."""

    def test_string_and_int_accepted(self):
        pool = make_stable_pool(["1000", 2000])
        assert pool.balances == [1000, 2000]

    def test_max_accepted(self):
        assert make_stable_pool([MAX_U64, MAX_U64]).balances == [MAX_U64, MAX_U64]

    def test_overflow_rejected(self):
        with pytest.raises(ValidationError, match="overflow"):
            make_stable_pool([MAX_U64 + 1, 1])

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            make_stable_pool([-1, 1])

    def test_bool_rejected(self):
        with pytest.raises(ValidationError):
            make_stable_pool([True, 1])

    def test_non_numeric_string_rejected(self):
        with pytest.raises(ValidationError):
            make_stable_pool(["abc", 1])


class TestWeightedPoolState:
    """Tests for weighted pool snapshots."""

    def test_percent_weights(self):
        pool = make_weighted_pool([100, 200], [80, 20])
        assert pool.weight_format is WeightFormat.PERCENT
        assert pool.weight_set() == PercentWeights.of([80, 20])

    def test_fraction_weights(self):
        pool = make_weighted_pool([100, 200], ["0.8", "0.2"], weight_format="fraction")
        weights = pool.weight_set()
        assert isinstance(weights, FixedPointWeights)
        assert weights.values[1] == FixedPoint64.from_rational(1, 5)

    def test_populate_by_name(self):
        pool = WeightedPoolState(
            balances=[1, 1], weights=["0.5", "0.5"], weight_format=WeightFormat.FRACTION
        )
        assert pool.weight_format is WeightFormat.FRACTION

    def test_weights_must_sum_to_100(self):
        with pytest.raises(ValidationError, match="sum"):
            make_weighted_pool([100, 200], [80, 10])

    def test_fractions_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="sum"):
            make_weighted_pool([100, 200], ["0.5", "0.4"], weight_format="fraction")

    def test_fractional_percent_rejected(self):
        with pytest.raises(ValidationError, match="whole number"):
            make_weighted_pool([100, 200], ["50.5", "49.5"])

    def test_negative_fraction_rejected(self):
        with pytest.raises(ValidationError):
            make_weighted_pool([100, 200], ["1.1", "-0.1"], weight_format="fraction")

    def test_length_mismatch(self):
        with pytest.raises(ValidationError):
            make_weighted_pool([100, 200, 300], [50, 50])

    def test_single_asset_rejected(self):
        with pytest.raises(ValidationError):
            make_weighted_pool([100], [100])

    def test_frozen(self):
        pool = make_weighted_pool([100, 200], [50, 50])
        with pytest.raises(ValidationError):
            pool.balances = [1, 2]


class TestStablePoolState:
    def test_valid(self):
        pool = make_stable_pool([1, 2, 3, 4], amplification=200)
        assert pool.amplification == 200

    def test_too_many_coins(self):
        with pytest.raises(ValidationError):
            make_stable_pool([1, 2, 3, 4, 5])

    def test_too_few_coins(self):
        with pytest.raises(ValidationError):
            make_stable_pool([1])

    def test_zero_amplification(self):
        with pytest.raises(ValidationError):
            make_stable_pool([1, 2], amplification=0)


class TestSwapRequest:
    def test_from_aliases(self):
        request = SwapRequest.model_validate(
            {"kind": "buy", "indexIn": 1, "indexOut": 0, "amount": "500"}
        )
        assert request.kind is SwapKind.BUY
        assert (request.index_in, request.index_out, request.amount) == (1, 0, 500)

    def test_same_index_rejected(self):
        with pytest.raises(ValidationError, match="differ"):
            SwapRequest(kind=SwapKind.SELL, index_in=0, index_out=0, amount=1)

    def test_negative_index_rejected(self):
        with pytest.raises(ValidationError):
            SwapRequest(kind=SwapKind.SELL, index_in=-1, index_out=0, amount=1)


class TestSwapQuote:
    def test_serializes_by_alias(self):
        quote = SwapQuote(kind=SwapKind.SELL, amount_in=18, amount_out=93)
        assert quote.model_dump(mode="json", by_alias=True) == {
            "kind": "sell",
            "amountIn": 18,
            "amountOut": 93,
        }
