"""Factory functions for creating test objects.

Usage:
    from tests.helpers import fraction_weights, make_weighted_pool

    weights = fraction_weights(80, 20)  # [0.8, 0.2] as Q64.64
"""

from poolmath.math.fixed_point import FixedPoint64
from poolmath.models import StablePoolState, WeightedPoolState


def fraction(numerator: int, denominator: int) -> FixedPoint64:
    """numerator / denominator as Q64.64, rounded down."""
    return FixedPoint64.from_rational(numerator, denominator)


def fraction_weights(*percents: int) -> list[FixedPoint64]:
    """Q64.64 fraction weights equivalent to the given percentages."""
    return [fraction(p, 100) for p in percents]


def make_weighted_pool(
    balances: list[int],
    weights: list[int] | list[str],
    weight_format: str = "percent",
) -> WeightedPoolState:
    return WeightedPoolState.model_validate(
        {"balances": balances, "weights": weights, "weightFormat": weight_format}
    )


def make_stable_pool(balances: list[int], amplification: int = 100) -> StablePoolState:
    return StablePoolState(balances=balances, amplification=amplification)
