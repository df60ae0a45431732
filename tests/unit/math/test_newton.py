"""Tests for bounded Newton-Raphson iteration."""

from poolmath.math.newton import Converged, Failed, newton_iterate


def _isqrt_step(n: int):
    def step(x: int) -> int:
        return (x + n // x) // 2

    return step


class TestNewtonIterate:
    def test_converges(self):
        """Integer square root of 10^12 converges to 10^6."""
        result = newton_iterate(_isqrt_step(10**12), 10**12, threshold=0, max_iterations=100)
        assert isinstance(result, Converged)
        assert result.value == 10**6

    def test_threshold_stops_early(self):
        strict = newton_iterate(_isqrt_step(10**12), 10**12, threshold=0, max_iterations=100)
        loose = newton_iterate(_isqrt_step(10**12), 10**12, threshold=3, max_iterations=100)
        assert isinstance(strict, Converged)
        assert isinstance(loose, Converged)
        assert loose.iterations <= strict.iterations
        assert abs(loose.value - 10**6) <= 3

    def test_cap_reached(self):
        result = newton_iterate(lambda x: x + 10, 0, threshold=3, max_iterations=100)
        assert isinstance(result, Failed)
        assert result.iterations == 100
        assert result.last_value == 1000

    def test_degenerate_step(self):
        result = newton_iterate(lambda x: None, 42, threshold=3, max_iterations=100)
        assert isinstance(result, Failed)
        assert result.last_value == 42
        assert result.iterations == 1
        assert "degenerate" in result.reason

    def test_immediate_convergence(self):
        result = newton_iterate(lambda x: x, 7, threshold=3, max_iterations=1)
        assert result == Converged(value=7, iterations=1)
