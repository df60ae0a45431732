"""Bounded Newton-Raphson iteration.

Solvers never loop unboundedly: newton_iterate runs at most max_iterations
steps and reports the outcome as a tagged result instead of raising, so each
engine decides which error a failed solve maps to.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .numeric import abs_diff


@dataclass(frozen=True)
class Converged:
    """Two successive iterates were within the convergence threshold."""

    value: int
    iterations: int


@dataclass(frozen=True)
class Failed:
    """The solve stopped without converging.

    Attributes:
        reason: Why the iteration stopped
        last_value: Last iterate before stopping
        iterations: Number of steps taken
    """

    reason: str
    last_value: int
    iterations: int


NewtonResult = Converged | Failed


def newton_iterate(
    step: Callable[[int], int | None],
    initial: int,
    *,
    threshold: int,
    max_iterations: int,
) -> NewtonResult:
    """Iterate x <- step(x) from initial until |x_k - x_{k-1}| <= threshold.

    Args:
        step: One Newton step. Returns None when the step is undefined
            (e.g. a non-positive denominator).
        initial: Starting iterate
        threshold: Absolute convergence threshold
        max_iterations: Iteration cap

    Returns:
        Converged with the last iterate, or Failed
    """
    current = initial
    for iteration in range(1, max_iterations + 1):
        candidate = step(current)
        if candidate is None:
            return Failed("degenerate Newton step", current, iteration)
        if abs_diff(candidate, current) <= threshold:
            return Converged(candidate, iteration)
        current = candidate
    return Failed(f"no convergence after {max_iterations} iterations", current, max_iterations)
