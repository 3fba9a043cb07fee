"""Numeric helpers shared by the grid and particle simulations."""

from __future__ import annotations

import math
from typing import Union

Number = Union[int, float]


def round_away(x: Number) -> int:
    """Round away from zero: floor for negatives, ceiling otherwise."""
    return math.floor(x) if x < 0 else math.ceil(x)


def _is_int(value: Number) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def wrap_mod(a: Number, b: Number) -> Number:
    """Remainder with the sign of the dividend, shifted up by ``b`` when negative.

    For a positive modulus this yields a value in ``[0, b)``.
    """
    if b == 0:
        raise ZeroDivisionError("modulus must be non-zero")
    if _is_int(a) and _is_int(b):
        remainder = abs(a) % abs(b)
        if a < 0:
            remainder = -remainder
    else:
        remainder = math.fmod(a, b)
    if remainder < 0:
        remainder += b
    return remainder