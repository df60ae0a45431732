"""Integer helpers shared by the weighted and stable engines."""

from __future__ import annotations

from collections.abc import Sequence


def mul_div(a: int, b: int, c: int) -> int:
    """Compute floor(a * b / c) without intermediate truncation.

    Raises:
        ZeroDivisionError: If c is zero
    """
    if c == 0:
        raise ZeroDivisionError(f"mul_div by zero: {a} * {b} / 0")
    return (a * b) // c


def abs_diff(a: int, b: int) -> int:
    return a - b if a >= b else b - a


# Sorting networks for the fixed pool arities


def sort_2(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a <= b else (b, a)


def sort_3(a: int, b: int, c: int) -> tuple[int, int, int]:
    a, b = sort_2(a, b)
    b, c = sort_2(b, c)
    a, b = sort_2(a, b)
    return a, b, c


def sort_4(a: int, b: int, c: int, d: int) -> tuple[int, int, int, int]:
    a, b = sort_2(a, b)
    c, d = sort_2(c, d)
    a, c = sort_2(a, c)
    b, d = sort_2(b, d)
    b, c = sort_2(b, c)
    return a, b, c, d


def sort_ascending(values: Sequence[int]) -> tuple[int, ...]:
    """Sort 1 to 4 values ascending with the fixed-arity networks.

    Raises:
        ValueError: For any other length
    """
    n = len(values)
    if n == 1:
        return (values[0],)
    if n == 2:
        return sort_2(values[0], values[1])
    if n == 3:
        return sort_3(values[0], values[1], values[2])
    if n == 4:
        return sort_4(values[0], values[1], values[2], values[3])
    raise ValueError(f"sort_ascending supports 1 to 4 values, got {n}")
