"""Test helpers module for shared test utilities.

- constants: pool balances and amounts used across tests
- factories: weight and pool factory functions
"""

from tests.helpers.constants import BALANCED_STABLE_BALANCES, MAX_U64, STABLE_AMP
from tests.helpers.factories import fraction, fraction_weights, make_stable_pool, make_weighted_pool

__all__ = [
    # Constants
    "BALANCED_STABLE_BALANCES",
    "MAX_U64",
    "STABLE_AMP",
    # Factories
    "fraction",
    "fraction_weights",
    "make_stable_pool",
    "make_weighted_pool",
]
