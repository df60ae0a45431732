"""Pytest configuration and fixtures."""

import pytest

from poolmath.config import EngineConfig
from poolmath.math.fixed_point import FixedPoint64
from tests.helpers import fraction_weights


@pytest.fixture
def weights_80_20() -> list[FixedPoint64]:
    """Fraction weights 0.8 / 0.2."""
    return fraction_weights(80, 20)


@pytest.fixture
def weights_20_80() -> list[FixedPoint64]:
    """Fraction weights 0.2 / 0.8."""
    return fraction_weights(20, 80)


@pytest.fixture
def single_iteration_config() -> EngineConfig:
    """A config that allows exactly one Newton step."""
    return EngineConfig(max_iterations=1)
