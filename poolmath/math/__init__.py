"""Mathematical primitives for the invariant engines.

This package provides:
- FixedPoint64: Q64.64 fixed-point arithmetic with explicit rounding
- numeric helpers: mul_div, abs_diff, fixed-arity sorts
- newton_iterate: bounded Newton-Raphson with a tagged result
"""

from poolmath.math.fixed_point import FixedPoint64, Rounding
from poolmath.math.newton import Converged, Failed, newton_iterate

__all__ = ["FixedPoint64", "Rounding", "Converged", "Failed", "newton_iterate"]
