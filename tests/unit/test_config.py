"""Tests for engine configuration."""

from dataclasses import FrozenInstanceError

import pytest

from poolmath.config import DEFAULT_ENGINE_CONFIG, EngineConfig


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.convergence_threshold == 3
        assert config.max_iterations == 100
        assert config.y_bias == 10
        assert config.stable_invariant_tolerance == 5
        assert config.weighted_invariant_tolerance_raw == 1 << 16

    def test_default_instance(self):
        assert DEFAULT_ENGINE_CONFIG == EngineConfig()

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            DEFAULT_ENGINE_CONFIG.max_iterations = 5  # type: ignore[misc]

    def test_zero_iterations_rejected(self):
        with pytest.raises(ValueError, match="max_iterations"):
            EngineConfig(max_iterations=0)

    def test_negative_values_rejected(self):
        for field in (
            "convergence_threshold",
            "y_bias",
            "stable_invariant_tolerance",
            "weighted_invariant_tolerance_raw",
        ):
            with pytest.raises(ValueError, match=field):
                EngineConfig(**{field: -1})


class TestFromEnv:
    def test_empty_environment_gives_defaults(self):
        assert EngineConfig.from_env({}) == EngineConfig()

    def test_overrides(self):
        config = EngineConfig.from_env(
            {"POOLMATH_MAX_ITERATIONS": "50", "POOLMATH_Y_BIAS": "0", "OTHER": "x"}
        )
        assert config.max_iterations == 50
        assert config.y_bias == 0
        assert config.convergence_threshold == 3

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("POOLMATH_STABLE_INVARIANT_TOLERANCE", "7")
        assert EngineConfig.from_env().stable_invariant_tolerance == 7

    def test_non_integer_rejected(self):
        with pytest.raises(ValueError, match="POOLMATH_CONVERGENCE_THRESHOLD"):
            EngineConfig.from_env({"POOLMATH_CONVERGENCE_THRESHOLD": "three"})

    def test_invalid_value_rejected(self):
        with pytest.raises(ValueError, match="max_iterations"):
            EngineConfig.from_env({"POOLMATH_MAX_ITERATIONS": "0"})
