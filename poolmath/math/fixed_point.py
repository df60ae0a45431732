"""Q64.64 fixed-point math library.

Values are unsigned integers scaled by 2^64: 64 integer bits and 64
fractional bits. Every operation that loses precision names its rounding
direction, and decoding to an integer goes through a single primitive,
FixedPoint64.to_int(rounding).

Powers are evaluated in a high-precision decimal context and rounded into
Q64.64 in the requested direction. pow_up() adds one raw unit on top of the
rounded-up result so callers that need an over-estimate always get one.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal, localcontext
from decimal import Overflow as DecimalOverflow
from enum import Enum
from typing import ClassVar

__all__ = [
    # Classes
    "FixedPoint64",
    "Rounding",
    # Errors
    "FixedPointError",
    "FixedPointOverflow",
    "FixedPointUnderflow",
    # Functions
    "pow_raw",
    "pow_product_raw",
    # Constants
    "FRACTIONAL_BITS",
    "ONE_64",
    "MAX_RAW",
]

# =============================================================================
# Constants
# =============================================================================

FRACTIONAL_BITS = 64
ONE_64 = 1 << FRACTIONAL_BITS

# Largest raw value: 64 integer bits + 64 fractional bits
MAX_RAW = (1 << 128) - 1

# Significant digits for power evaluation. A raw Q64.64 value converts to a
# decimal with at most 39 + 64 digits, so conversions in this context are exact.
_POW_PRECISION = 120

_ONE_DEC = Decimal(ONE_64)
_MAX_RAW_DEC = Decimal(MAX_RAW)


# =============================================================================
# Error classes
# =============================================================================


class FixedPointError(ArithmeticError):
    """Base error for fixed-point operations."""

    pass


class FixedPointOverflow(FixedPointError):
    """Result does not fit in Q64.64."""

    pass


class FixedPointUnderflow(FixedPointError):
    """Checked subtraction would go below zero."""

    pass


class Rounding(Enum):
    """Direction in which an inexact result is rounded."""

    DOWN = "down"
    UP = "up"

    @property
    def decimal_mode(self) -> str:
        return ROUND_FLOOR if self is Rounding.DOWN else ROUND_CEILING


# =============================================================================
# Power functions
# =============================================================================


def _to_decimal(raw: int) -> Decimal:
    """Exact decimal value of a raw Q64.64 integer (inside a _POW_PRECISION context)."""
    return Decimal(raw) / _ONE_DEC


def _to_raw(value: Decimal, rounding: Rounding) -> int:
    scaled = value * _ONE_DEC
    if scaled > _MAX_RAW_DEC:
        raise FixedPointOverflow(f"Result {value} does not fit in Q64.64")
    return int(scaled.to_integral_value(rounding=rounding.decimal_mode))


def pow_raw(x: int, y: int, rounding: Rounding = Rounding.DOWN) -> int:
    """Compute x^y where both are raw Q64.64 values.

    Args:
        x: Base (non-negative, raw Q64.64)
        y: Exponent (non-negative, raw Q64.64)
        rounding: Direction used when the power is not exactly representable

    Returns:
        x^y as raw Q64.64

    Raises:
        FixedPointOverflow: If the result exceeds the Q64.64 range
    """
    if x < 0 or y < 0:
        raise ValueError(f"pow_raw requires non-negative operands, got {x}, {y}")
    if y == 0:
        return ONE_64
    if x == 0:
        return 0

    with localcontext() as ctx:
        ctx.prec = _POW_PRECISION
        try:
            result = _to_decimal(x) ** _to_decimal(y)
        except DecimalOverflow as exc:
            raise FixedPointOverflow(f"Power {x}^{y} (raw) overflows") from exc
        return _to_raw(result, rounding)


def pow_product_raw(bases: Sequence[int], exponents: Sequence[int]) -> int:
    """Compute prod(bases[i] ^ exponents[i]) for raw Q64.64 values, rounded down.

    The product is accumulated at working precision starting from 1.0 and
    decoded once, so the result is within one raw unit of the exact value.

    Raises:
        ValueError: If the sequences have different lengths
        FixedPointOverflow: If the result exceeds the Q64.64 range
    """
    if len(bases) != len(exponents):
        raise ValueError(f"Got {len(bases)} bases but {len(exponents)} exponents")

    with localcontext() as ctx:
        ctx.prec = _POW_PRECISION
        accumulator = Decimal(1)
        try:
            for base, exponent in zip(bases, exponents):
                if exponent == 0:
                    continue
                accumulator *= _to_decimal(base) ** _to_decimal(exponent)
        except DecimalOverflow as exc:
            raise FixedPointOverflow("Power product overflows") from exc
        return _to_raw(accumulator, Rounding.DOWN)


# =============================================================================
# FixedPoint64 class
# =============================================================================


class FixedPoint64:
    """Q64.64 fixed-point number stored as int.

    All values are stored as integers scaled by 2^64.
    Example: 0.5 is stored as 2^63
    """

    ONE: ClassVar[int] = ONE_64

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(self, value: int) -> None:
        """Create from raw scaled value."""
        self.value = value

    @classmethod
    def from_int(cls, i: int) -> FixedPoint64:
        """Create from integer (will be scaled by 2^64)."""
        return cls(i << FRACTIONAL_BITS)

    @classmethod
    def from_rational(
        cls, numerator: int, denominator: int, rounding: Rounding = Rounding.DOWN
    ) -> FixedPoint64:
        """Create numerator / denominator, rounded in the given direction."""
        if denominator == 0:
            raise ZeroDivisionError("FixedPoint64.from_rational with zero denominator")
        scaled = numerator << FRACTIONAL_BITS
        if rounding is Rounding.DOWN:
            return cls(scaled // denominator)
        return cls(-(-scaled // denominator))

    @classmethod
    def from_decimal(cls, d: Decimal, rounding: Rounding = Rounding.DOWN) -> FixedPoint64:
        """Create from a non-negative decimal, rounded in the given direction."""
        if d < 0:
            raise ValueError(f"FixedPoint64.from_decimal requires non-negative input, got {d}")
        with localcontext() as ctx:
            ctx.prec = _POW_PRECISION
            return cls(int((d * _ONE_DEC).to_integral_value(rounding=rounding.decimal_mode)))

    def to_decimal(self) -> Decimal:
        """Convert to Decimal for display."""
        with localcontext() as ctx:
            ctx.prec = _POW_PRECISION
            return _to_decimal(self.value)

    def to_int(self, rounding: Rounding) -> int:
        """Decode to an integer, rounding the fractional part in the given direction."""
        if rounding is Rounding.DOWN:
            return self.value >> FRACTIONAL_BITS
        return -(-self.value >> FRACTIONAL_BITS)

    def is_zero(self) -> bool:
        return self.value == 0

    def mul_down(self, other: FixedPoint64) -> FixedPoint64:
        """Multiply with floor rounding: (a * b) >> 64"""
        return FixedPoint64((self.value * other.value) >> FRACTIONAL_BITS)

    def mul_int(self, n: int) -> FixedPoint64:
        """Multiply by a plain integer (exact)."""
        return FixedPoint64(self.value * n)

    def complement(self) -> FixedPoint64:
        """Return 1 - self. Clamps to 0 if self > 1."""
        return FixedPoint64(max(0, self.ONE - self.value))

    def add(self, other: FixedPoint64) -> FixedPoint64:
        return FixedPoint64(self.value + other.value)

    def checked_sub(self, other: FixedPoint64) -> FixedPoint64:
        """Subtract other from self.

        Raises:
            FixedPointUnderflow: If other > self
        """
        result = self.value - other.value
        if result < 0:
            raise FixedPointUnderflow(f"{self!r} - {other!r} is negative")
        return FixedPoint64(result)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint64):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint64):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint64):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint64):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint64):
            return NotImplemented
        return self.value >= other.value

    def __repr__(self) -> str:
        return f"FixedPoint64({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())

    def pow_up(self, exp: FixedPoint64) -> FixedPoint64:
        """Compute self^exp, strictly above the exact power."""
        raw = pow_raw(self.value, exp.value, Rounding.UP)
        if raw + 1 > MAX_RAW:
            raise FixedPointOverflow(f"pow_up result {raw} + 1 does not fit in Q64.64")
        return FixedPoint64(raw + 1)

    def pow_int_up(self, n: int) -> FixedPoint64:
        """Compute self^n for a non-negative integer n, rounded up once.

        The product of the raw values is exact; only the final rescale rounds,
        so the result is the smallest raw value not below the exact power.
        """
        if n < 0:
            raise ValueError(f"pow_int_up requires a non-negative exponent, got {n}")
        if n == 0:
            return FixedPoint64(self.ONE)
        scale = FRACTIONAL_BITS * (n - 1)
        raw = -(-(self.value**n) >> scale)
        if raw > MAX_RAW:
            raise FixedPointOverflow(f"{self!r}^{n} does not fit in Q64.64")
        return FixedPoint64(raw)
