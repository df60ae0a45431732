"""Weight representations for weighted pools.

A weighted pool carries its weights either as Q64.64 fractions summing to 1.0
(pools whose weights move continuously, e.g. liquidity bootstrapping) or as
integer percentages summing to 100. The weighted math is written once against
WeightSet; each representation supplies its own swap-exponent ratio.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from poolmath.constants import PERCENT_WEIGHT_TOTAL
from poolmath.math.fixed_point import FixedPoint64, Rounding

from .errors import InvalidInputs, ZeroWeightRatio

# =============================================================================
# Weight ratios (swap exponents)
# =============================================================================


@dataclass(frozen=True)
class FixedPointRatio:
    """Exponent w_a / w_b already reduced to a Q64.64 value."""

    value: FixedPoint64

    def is_zero(self) -> bool:
        return self.value.is_zero()

    def as_fixed_point(self) -> FixedPoint64:
        return self.value

    def pow_up(self, base: FixedPoint64) -> FixedPoint64:
        return base.pow_up(self.value)


@dataclass(frozen=True)
class IntegerRatio:
    """Exponent numerator / denominator kept as exact integers.

    Integral exponents (e.g. 80 / 20) are raised exactly with a
    single upward rounding; anything else goes through pow_up with the exponent
    rounded in the direction that keeps the power conservative.
    """

    numerator: int
    denominator: int
    rounding: Rounding

    def is_zero(self) -> bool:
        return self.numerator == 0

    def as_fixed_point(self) -> FixedPoint64:
        return FixedPoint64.from_rational(self.numerator, self.denominator, self.rounding)

    def pow_up(self, base: FixedPoint64) -> FixedPoint64:
        if self.numerator % self.denominator == 0:
            return base.pow_int_up(self.numerator // self.denominator)
        return base.pow_up(self.as_fixed_point())


WeightRatio = FixedPointRatio | IntegerRatio


# =============================================================================
# Weight sets
# =============================================================================


class WeightSet(ABC):
    """Per-asset weights of a weighted pool."""

    @abstractmethod
    def __len__(self) -> int: ...

    @abstractmethod
    def exponent(self, index: int) -> FixedPoint64:
        """Weight of asset `index` as a Q64.64 fraction of the total."""
        ...

    @abstractmethod
    def ratio(self, numerator: int, denominator: int, rounding: Rounding) -> WeightRatio:
        """Swap exponent weights[numerator] / weights[denominator].

        Raises:
            ZeroWeightRatio: If the denominator weight is zero
        """
        ...

    @abstractmethod
    def validate(self) -> None:
        """Raise InvalidInputs unless the weights are non-negative and sum to one."""
        ...

    def exponents(self) -> list[FixedPoint64]:
        return [self.exponent(i) for i in range(len(self))]


@dataclass(frozen=True)
class FixedPointWeights(WeightSet):
    """Weights as Q64.64 fractions.

    Fractions built with from_rational round down, so the sum may fall short
    of 1.0 by up to one raw unit per asset.
    """

    values: tuple[FixedPoint64, ...]

    @classmethod
    def of(cls, weights: Sequence[FixedPoint64]) -> FixedPointWeights:
        return cls(tuple(weights))

    def __len__(self) -> int:
        return len(self.values)

    def exponent(self, index: int) -> FixedPoint64:
        return self.values[index]

    def ratio(self, numerator: int, denominator: int, rounding: Rounding) -> FixedPointRatio:
        w_num = self.values[numerator]
        w_den = self.values[denominator]
        if w_den.is_zero():
            raise ZeroWeightRatio(f"weight at index {denominator} is zero")
        if w_num.is_zero():
            return FixedPointRatio(w_num)
        # A non-zero weight is floored, so its true value lies in [w, w + 1 raw).
        # The ratio is bracketed over that range in the requested direction.
        if rounding is Rounding.DOWN:
            ratio = FixedPoint64.from_rational(w_num.value, w_den.value + 1, Rounding.DOWN)
        else:
            ratio = FixedPoint64.from_rational(w_num.value + 1, w_den.value, Rounding.UP)
        return FixedPointRatio(ratio)

    def validate(self) -> None:
        for i, weight in enumerate(self.values):
            if not isinstance(weight, FixedPoint64):
                raise InvalidInputs(f"weight at index {i} is not a FixedPoint64: {weight!r}")
            if weight.value < 0 or weight.value > FixedPoint64.ONE:
                raise InvalidInputs(f"weight at index {i} outside [0, 1]: {weight}")
        total = sum(w.value for w in self.values)
        if abs(total - FixedPoint64.ONE) > len(self.values):
            raise InvalidInputs(f"weights must sum to 1.0, got {FixedPoint64(total)}")


@dataclass(frozen=True)
class PercentWeights(WeightSet):
    """Weights as integer percentages summing to 100."""

    values: tuple[int, ...]

    @classmethod
    def of(cls, weights: Sequence[int]) -> PercentWeights:
        return cls(tuple(weights))

    def __len__(self) -> int:
        return len(self.values)

    def exponent(self, index: int) -> FixedPoint64:
        return FixedPoint64.from_rational(self.values[index], PERCENT_WEIGHT_TOTAL)

    def ratio(self, numerator: int, denominator: int, rounding: Rounding) -> IntegerRatio:
        w_den = self.values[denominator]
        if w_den == 0:
            raise ZeroWeightRatio(f"weight at index {denominator} is zero")
        return IntegerRatio(self.values[numerator], w_den, rounding)

    def validate(self) -> None:
        for i, weight in enumerate(self.values):
            if not isinstance(weight, int) or isinstance(weight, bool):
                raise InvalidInputs(f"weight at index {i} is not an integer: {weight!r}")
            if weight < 0:
                raise InvalidInputs(f"weight at index {i} is negative: {weight}")
        total = sum(self.values)
        if total != PERCENT_WEIGHT_TOTAL:
            raise InvalidInputs(
                f"percentage weights must sum to {PERCENT_WEIGHT_TOTAL}, got {total}"
            )
