from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable

import numpy as np


@dataclass(frozen=True)
class Bounds:
    """Rectangular data extent; NaN marks a side with no value yet."""

    xmin: float = math.nan
    xmax: float = math.nan
    ymin: float = math.nan
    ymax: float = math.nan

    @property
    def is_complete(self) -> bool:
        return not any(math.isnan(v) for v in (self.xmin, self.xmax, self.ymin, self.ymax))

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    def include(self, other: "Bounds") -> "Bounds":
        return Bounds(
            xmin=other.xmin if (other.xmin < self.xmin or math.isnan(self.xmin)) else self.xmin,
            xmax=other.xmax if (other.xmax > self.xmax or math.isnan(self.xmax)) else self.xmax,
            ymin=other.ymin if (other.ymin < self.ymin or math.isnan(self.ymin)) else self.ymin,
            ymax=other.ymax if (other.ymax > self.ymax or math.isnan(self.ymax)) else self.ymax,
        )

    def collapsed(self) -> "Bounds":
        return self if self.is_complete else ZERO

    def scaled(self, x_scale: Callable[[float], float], y_scale: Callable[[float], float]) -> "Bounds":
        return Bounds(
            xmin=float(x_scale(self.xmin)),
            xmax=float(x_scale(self.xmax)),
            ymin=float(y_scale(self.ymin)),
            ymax=float(y_scale(self.ymax)),
        )

    def same_as(self, other: "Bounds") -> bool:
        # NaN-aware equality; the dataclass __eq__ only matches NaN fields holding the same object.
        return all(
            _same(a, b)
            for a, b in (
                (self.xmin, other.xmin),
                (self.xmax, other.xmax),
                (self.ymin, other.ymin),
                (self.ymax, other.ymax),
            )
        )


UNSET = Bounds()
ZERO = Bounds(0.0, 0.0, 0.0, 0.0)


def _same(a: float, b: float) -> bool:
    return a == b or (math.isnan(a) and math.isnan(b))


def finite_range(values: np.ndarray) -> tuple[float, float]:
    """(min, max) over finite entries, or (nan, nan) when there are none."""
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return (math.nan, math.nan)
    return (float(np.min(finite)), float(np.max(finite)))


def include_range(current: tuple[float, float], other: tuple[float, float]) -> tuple[float, float]:
    lo, hi = current
    olo, ohi = other
    if olo < lo or math.isnan(lo):
        lo = olo
    if ohi > hi or math.isnan(hi):
        hi = ohi
    return (lo, hi)
