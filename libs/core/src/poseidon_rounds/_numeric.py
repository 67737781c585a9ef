"""Numeric coercions shared by the security predicates.

The bound formulas mix integer parameters with float logarithms. Every
float -> int conversion goes through `ceil_nat` or `floor_nat` so that all
predicate variants round the same way: standard floor/ceiling first, then a
clamp to a non-negative integer.
"""

from __future__ import annotations

import math


def as_float(x: int | float) -> float:
    """Promote an integer parameter to float (big primes included)."""
    return float(x)


def ceil_nat(x: float) -> int:
    return max(0, int(math.ceil(x)))


def floor_nat(x: float) -> int:
    return max(0, int(math.floor(x)))


def fmin(*xs: int | float) -> float:
    return min(as_float(x) for x in xs)


def imax(*xs: int) -> int:
    return max(int(x) for x in xs)


def log_base(base: int | float, x: int | float) -> float:
    """log_base(x), computed as `math.log(x, base)` like the reference script.

    Precondition: `x > 0`, `base > 0` and `base != 1`. Violations raise
    `ValueError` / `ZeroDivisionError` from `math.log`.
    """
    return math.log(x, base)
