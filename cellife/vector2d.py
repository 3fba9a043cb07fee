"""Small immutable 2D vector used for grid cells and particle positions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Union

Number = Union[int, float]


def _is_int(value: Number) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _divide(a: Number, b: Number) -> Number:
    """Divide like fixed-width arithmetic: integers truncate toward zero."""
    if _is_int(a) and _is_int(b):
        quotient = abs(a) // abs(b)
        return quotient if (a < 0) == (b < 0) else -quotient
    return a / b


def _format_component(value: Number) -> str:
    if _is_int(value):
        return str(value)
    return f"{value:.6f}"


@dataclass(frozen=True)
class Vec2:
    """A two-component vector with element-wise and scalar arithmetic."""

    x: Number
    y: Number

    def _components(self, other: object) -> tuple[Number, Number] | None:
        if isinstance(other, Vec2):
            return other.x, other.y
        if isinstance(other, (int, float)) and not isinstance(other, bool):
            return other, other
        return None

    def __add__(self, other: object) -> Vec2:
        parts = self._components(other)
        if parts is None:
            return NotImplemented
        return Vec2(self.x + parts[0], self.y + parts[1])

    def __radd__(self, other: object) -> Vec2:
        return self.__add__(other)

    def __sub__(self, other: object) -> Vec2:
        parts = self._components(other)
        if parts is None:
            return NotImplemented
        return Vec2(self.x - parts[0], self.y - parts[1])

    def __mul__(self, other: object) -> Vec2:
        parts = self._components(other)
        if parts is None:
            return NotImplemented
        return Vec2(self.x * parts[0], self.y * parts[1])

    def __rmul__(self, other: object) -> Vec2:
        return self.__mul__(other)

    def __truediv__(self, other: object) -> Vec2:
        parts = self._components(other)
        if parts is None:
            return NotImplemented
        return Vec2(_divide(self.x, parts[0]), _divide(self.y, parts[1]))

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __abs__(self) -> Vec2:
        return Vec2(abs(self.x), abs(self.y))

    def __iter__(self) -> Iterator[Number]:
        yield self.x
        yield self.y

    def __str__(self) -> str:
        return f"({_format_component(self.x)},{_format_component(self.y)})"

    def mag(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y)

    def norm(self) -> Vec2:
        """Unit vector in the same direction; raises ZeroDivisionError for zero."""
        length = self.mag()
        return Vec2(self.x / length, self.y / length)

    def distance(self, other: Vec2) -> float:
        """Euclidean distance to another vector."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_int(self) -> Vec2:
        """Components truncated toward zero."""
        return Vec2(int(self.x), int(self.y))

    def to_float(self) -> Vec2:
        """Components as floats."""
        return Vec2(float(self.x), float(self.y))