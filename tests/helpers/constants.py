"""Common pool parameters for tests."""

from poolmath.constants import MAX_U64

# A 1M/1M stable pool with a typical amplification
BALANCED_STABLE_BALANCES = [1_000_000, 1_000_000]
STABLE_AMP = 100

__all__ = ["BALANCED_STABLE_BALANCES", "MAX_U64", "STABLE_AMP"]
