"""Invariant engine error classes.

Every failure aborts the whole operation; none of these is ever downgraded to
a clamped result.
"""


class PoolMathError(Exception):
    """Base error for invariant engine operations."""

    pass


class InvalidInputs(PoolMathError):
    """Mismatched lengths, too few assets, bad indices, zero balances or bad weights."""

    pass


class InvalidNumCoins(PoolMathError):
    """Stable pools support 2, 3 or 4 coins."""

    pass


class Overflow(PoolMathError):
    """An amount would exceed the u64 amount type."""

    pass


class ValuesTooLarge(PoolMathError):
    """Requested amount exceeds the pool balance, or a result exceeds the amount type."""

    pass


class ZeroWeightRatio(PoolMathError):
    """Weight ratio used as a swap exponent is zero or undefined."""

    pass


class DNotConverge(PoolMathError):
    """Newton-Raphson iteration for stable invariant D did not converge."""

    pass


class YNotConverge(PoolMathError):
    """Newton-Raphson iteration for stable balance y did not converge."""

    pass


class YNotDecreasing(PoolMathError):
    """Solved output balance did not decrease on a sell."""

    pass


class YNotIncreasing(PoolMathError):
    """Solved input balance did not increase on a buy."""

    pass


class InvariantDecrease(PoolMathError):
    """Post-operation invariant fell below the pre-operation invariant beyond tolerance."""

    pass
