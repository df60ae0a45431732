"""Pydantic models for pool snapshots and quotes.

These validate what an external pool contract hands the engine: normalized
u64 balances, weights or an amplification factor, and a swap request.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, model_validator

from poolmath.constants import MAX_STABLE_COINS, MAX_U64, MIN_STABLE_COINS
from poolmath.math.fixed_point import FixedPoint64
from poolmath.pools.errors import InvalidInputs
from poolmath.pools.weights import FixedPointWeights, PercentWeights, WeightSet


def validate_uint64(value: Any) -> int:
    """Validate that a value is a u64 amount given as int or decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint64 must be an integer, got bool")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint64 must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"Uint64 must be string or int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Uint64 cannot be negative: {value}")
    if value > MAX_U64:
        raise ValueError(f"Uint64 overflow: {value} > 2^64-1")
    return value


# 64-bit unsigned amount (int or decimal string)
Uint64 = Annotated[
    int,
    BeforeValidator(validate_uint64),
    Field(description="64-bit unsigned integer amount"),
]


class WeightFormat(str, Enum):
    """How a weighted pool expresses its weights."""

    PERCENT = "percent"
    FRACTION = "fraction"


class SwapKind(str, Enum):
    """Whether the request fixes the input (sell) or the output (buy)."""

    SELL = "sell"
    BUY = "buy"


class WeightedPoolState(BaseModel):
    """Snapshot of a weighted pool.

    Percentage weights must be whole numbers summing to 100; fraction weights
    are decimals summing to 1 and are rounded down into Q64.64.
    """

    balances: list[Uint64] = Field(min_length=2)
    weights: list[Decimal] = Field(min_length=2)
    weight_format: WeightFormat = Field(default=WeightFormat.PERCENT, alias="weightFormat")

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def _check_weights(self) -> WeightedPoolState:
        if len(self.weights) != len(self.balances):
            raise ValueError(f"Got {len(self.balances)} balances but {len(self.weights)} weights")
        try:
            self.weight_set().validate()
        except InvalidInputs as err:
            raise ValueError(str(err)) from err
        return self

    def weight_set(self) -> WeightSet:
        if self.weight_format is WeightFormat.PERCENT:
            for weight in self.weights:
                if weight != weight.to_integral_value():
                    raise ValueError(f"Percentage weight must be a whole number: {weight}")
            return PercentWeights.of([int(w) for w in self.weights])
        for weight in self.weights:
            if weight < 0:
                raise ValueError(f"Fraction weight cannot be negative: {weight}")
        return FixedPointWeights.of([FixedPoint64.from_decimal(w) for w in self.weights])


class StablePoolState(BaseModel):
    """Snapshot of a stable pool."""

    balances: list[Uint64] = Field(min_length=MIN_STABLE_COINS, max_length=MAX_STABLE_COINS)
    amplification: int = Field(ge=1)

    model_config = {"frozen": True}


class SwapRequest(BaseModel):
    """A swap against one pool: sell a fixed input or buy a fixed output."""

    kind: SwapKind
    index_in: int = Field(ge=0, alias="indexIn")
    index_out: int = Field(ge=0, alias="indexOut")
    amount: Uint64

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def _check_distinct(self) -> SwapRequest:
        if self.index_in == self.index_out:
            raise ValueError("index_in and index_out must differ")
        return self


class SwapQuote(BaseModel):
    """Computed counterpart of a swap request."""

    kind: SwapKind
    amount_in: int = Field(alias="amountIn")
    amount_out: int = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class DepositQuote(BaseModel):
    """LP tokens issued for a deposit and the unabsorbed remainder per asset."""

    issued: int
    refunds: list[int]
