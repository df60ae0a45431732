"""Engine configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from poolmath.constants import (
    CONVERGENCE_THRESHOLD,
    MAX_NEWTON_ITERATIONS,
    STABLE_INVARIANT_TOLERANCE,
    WEIGHTED_INVARIANT_TOLERANCE_RAW,
    Y_BIAS,
)

ENV_PREFIX = "POOLMATH_"


@dataclass(frozen=True)
class EngineConfig:
    """Centralized numeric parameters for the invariant engines.

    The defaults are the values every pool is expected to run with. They are
    tied to the integer scale of normalized amounts; a caller that rescales
    balances has to re-derive them rather than reuse the literals.

    Attributes:
        convergence_threshold: Newton-Raphson stops once two iterates differ
            by at most this many units (default: 3)
        max_iterations: Newton-Raphson iteration cap (default: 100)
        y_bias: Added to the solved stable balance (default: 10)
        stable_invariant_tolerance: Allowed post-swap shortfall of the stable
            invariant D, in invariant units (default: 5)
        weighted_invariant_tolerance_raw: Allowed post-swap shortfall of the
            weighted invariant K, in raw Q64.64 units (default: 2^16, about
            3.6e-15 of one invariant unit)
    """

    convergence_threshold: int = CONVERGENCE_THRESHOLD
    max_iterations: int = MAX_NEWTON_ITERATIONS
    y_bias: int = Y_BIAS
    stable_invariant_tolerance: int = STABLE_INVARIANT_TOLERANCE
    weighted_invariant_tolerance_raw: int = WEIGHTED_INVARIANT_TOLERANCE_RAW

    def __post_init__(self) -> None:
        if self.convergence_threshold < 0:
            raise ValueError(
                f"convergence_threshold must be non-negative, got {self.convergence_threshold}"
            )
        if self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.y_bias < 0:
            raise ValueError(f"y_bias must be non-negative, got {self.y_bias}")
        if self.stable_invariant_tolerance < 0:
            raise ValueError("stable_invariant_tolerance must be non-negative")
        if self.weighted_invariant_tolerance_raw < 0:
            raise ValueError("weighted_invariant_tolerance_raw must be non-negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from POOLMATH_* environment variables.

        Unset variables keep their defaults, e.g. POOLMATH_MAX_ITERATIONS=50.

        Raises:
            ValueError: If a variable is not a decimal integer
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, int] = {}
        for name in (
            "convergence_threshold",
            "max_iterations",
            "y_bias",
            "stable_invariant_tolerance",
            "weighted_invariant_tolerance_raw",
        ):
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            try:
                overrides[name] = int(raw)
            except ValueError as err:
                raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer: '{raw}'") from err
        return cls(**overrides)


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
