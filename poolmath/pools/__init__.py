"""Weighted and stable pool invariant engines.

Both engines expose functions with the same operation names, so they are
used through their modules:

    from poolmath.pools import stable_math, weighted_math

    weighted_math.calc_out_given_in(0, 1, 18, [18, 100], weights)
    stable_math.calc_out_given_in(100, 0, 1, 1_000, [10**6, 10**6])
"""

from . import stable_math, weighted_math

# Errors
from .errors import (
    DNotConverge,
    InvalidInputs,
    InvalidNumCoins,
    InvariantDecrease,
    Overflow,
    PoolMathError,
    ValuesTooLarge,
    YNotConverge,
    YNotDecreasing,
    YNotIncreasing,
    ZeroWeightRatio,
)

# Weight representations
from .weights import FixedPointWeights, PercentWeights, WeightSet

__all__ = [
    # Engines
    "weighted_math",
    "stable_math",
    # Weight representations
    "WeightSet",
    "FixedPointWeights",
    "PercentWeights",
    # Errors
    "PoolMathError",
    "InvalidInputs",
    "InvalidNumCoins",
    "Overflow",
    "ValuesTooLarge",
    "ZeroWeightRatio",
    "DNotConverge",
    "YNotConverge",
    "YNotDecreasing",
    "YNotIncreasing",
    "InvariantDecrease",
]
