"""
Piecewise-linear interpolation over a strictly increasing point table.

- Points are signed fixed-point pairs sharing one exponent.
- `interpolate(x)` is defined only on `[x_min, x_max]`; callers layer their own
  clamp policy on top (see `stablelever.fees`).
- Each segment rounds its slope term away from zero (mul_div_ceil).
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from .exc import (
    ArithmeticFault,
    InterpInsufficientPointsError,
    InterpOutOfDomainError,
    InterpPointsNotMonotonicError,
    InterpolationError,
)
from .fixed import IFix64


@dataclass(frozen=True)
class Point:
    """Fixed-point Cartesian coordinate."""
    x: IFix64
    y: IFix64

    @classmethod
    def from_ints(cls, x: int, y: int, exponent: int) -> "Point":
        return cls(IFix64(x, exponent), IFix64(y, exponent))


def lerp(p0: Point, p1: Point, x: IFix64) -> IFix64:
    """y = y0 + (y1 - y0) * (x - x0) / (x1 - x0)"""
    return p0.y + (p1.y - p0.y).mul_div_ceil(x - p0.x, p1.x - p0.x)


class FixInterp:
    """Piecewise-linear lookup over at least two points with strictly increasing x."""

    def __init__(self, points: Sequence[Point]):
        pts = tuple(points)
        if len(pts) < 2:
            raise InterpInsufficientPointsError(f"need at least 2 points, got {len(pts)}")
        for p0, p1 in zip(pts, pts[1:]):
            if not p0.x < p1.x:
                raise InterpPointsNotMonotonicError(f"x not strictly increasing at {p0.x.bits} -> {p1.x.bits}")
        self._points: Tuple[Point, ...] = pts
        self._xs: Tuple[int, ...] = tuple(p.x.bits for p in pts)

    @classmethod
    def from_ints(cls, pairs: Iterable[Tuple[int, int]], exponent: int) -> "FixInterp":
        return cls([Point.from_ints(x, y, exponent) for x, y in pairs])

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    @property
    def exponent(self) -> int:
        return self._points[0].x.exponent

    def x_min(self) -> IFix64:
        return self._points[0].x

    def x_max(self) -> IFix64:
        return self._points[-1].x

    def y_min(self) -> IFix64:
        """y at the lowest x (not necessarily the smallest y)."""
        return self._points[0].y

    def y_max(self) -> IFix64:
        """y at the highest x (not necessarily the largest y)."""
        return self._points[-1].y

    def interpolate(self, x: IFix64) -> IFix64:
        if x < self.x_min() or x > self.x_max():
            raise InterpOutOfDomainError(
                f"x={x.bits} outside [{self.x_min().bits}, {self.x_max().bits}]"
            )
        # First index with p.x >= x, never the leftmost point.
        part = max(bisect_left(self._xs, x.bits), 1)
        try:
            return lerp(self._points[part - 1], self._points[part], x)
        except ArithmeticFault as exc:
            raise InterpolationError(str(exc)) from exc

    def __len__(self) -> int:
        return len(self._points)


__all__ = [
    "Point",
    "lerp",
    "FixInterp",
]
