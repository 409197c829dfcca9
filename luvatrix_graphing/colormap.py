from __future__ import annotations

from dataclasses import dataclass, field, replace
import math
from typing import Callable, Sequence

import numpy as np

from luvatrix_graphing.errors import GraphDataError


# RGBA with channels in [0, 1].
Color = tuple[float, float, float, float]

CLEAR: Color = (0.0, 0.0, 0.0, 0.0)
BLACK: Color = (0.0, 0.0, 0.0, 1.0)


def is_finite_value(value: float) -> bool:
    return math.isfinite(value)


def clamp01(value: float) -> float:
    if math.isnan(value) or value <= 0.0:
        return 0.0
    if value >= 1.0:
        return 1.0
    return float(value)


def lerp_color(a: Color, b: Color, t: float) -> Color:
    t = clamp01(t)
    return (
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
        a[3] + (b[3] - a[3]) * t,
    )


@dataclass(frozen=True)
class ColorMap:
    colors: tuple[Color, ...] = ()
    function: Callable[[float], Color] | None = None
    filter: Callable[[float], bool] = field(default=is_finite_value, compare=False)
    filter_color: Color = CLEAR
    stepped: bool = False

    def __post_init__(self) -> None:
        if self.function is None and len(self.colors) == 0:
            raise GraphDataError("color map needs at least one color or a mapping function")
        if self.function is not None and len(self.colors) > 0:
            raise GraphDataError("color map takes either colors or a mapping function, not both")
        object.__setattr__(self, "colors", tuple(_coerce_color(c) for c in self.colors))
        object.__setattr__(self, "filter_color", _coerce_color(self.filter_color))

    @classmethod
    def from_colors(cls, *colors: Sequence[float], stepped: bool = False) -> "ColorMap":
        return cls(colors=tuple(_coerce_color(c) for c in colors), stepped=stepped)

    @classmethod
    def from_function(cls, function: Callable[[float], Color]) -> "ColorMap":
        return cls(function=function)

    @property
    def count(self) -> int:
        return len(self.colors)

    def lookup(self, value: float) -> Color:
        value = float(value)
        if not self.filter(value):
            return self.filter_color
        if self.function is not None:
            return self.function(clamp01(value))
        count = len(self.colors)
        if count == 1:
            return self.colors[0]
        scaled = clamp01(value) * count
        index = min(max(int(math.floor(scaled)), 0), count - 1)
        if self.stepped or index == count - 1:
            return self.colors[index]
        return lerp_color(self.colors[index], self.colors[index + 1], scaled % 1.0)

    __call__ = lookup

    def sample(self, count: int) -> list[Color]:
        """Colors for ``count`` evenly spaced values over [0, 1]."""
        if count <= 0:
            return []
        if count == 1:
            return [self.lookup(0.0)]
        return [self.lookup(float(v)) for v in np.linspace(0.0, 1.0, count)]

    def with_filter(self, predicate: Callable[[float], bool], filter_color: Color | None = None) -> "ColorMap":
        if filter_color is None:
            return replace(self, filter=predicate)
        return replace(self, filter=predicate, filter_color=filter_color)

    def with_stepped(self, stepped: bool = True) -> "ColorMap":
        return replace(self, stepped=bool(stepped))

    def accepts(self, values: np.ndarray) -> np.ndarray:
        """Elementwise filter result for an array of any shape."""
        arr = np.asarray(values, dtype=np.float64)
        flat = np.fromiter((bool(self.filter(float(v))) for v in arr.ravel()), dtype=bool, count=arr.size)
        return flat.reshape(arr.shape)


def solid(color: Sequence[float]) -> ColorMap:
    return ColorMap.from_colors(color)


def _coerce_color(color: Sequence[float]) -> Color:
    values = tuple(float(c) for c in color)
    if len(values) == 3:
        return (values[0], values[1], values[2], 1.0)
    if len(values) != 4:
        raise GraphDataError(f"color must have 3 or 4 channels: {color!r}")
    return values  # type: ignore[return-value]


_HALF = 128.0 / 255.0


def _jet(value: float) -> Color:
    if math.isnan(value):
        return BLACK
    third = 1.0 / 3.0
    if value < third:
        v = (value / third * (128.0 - 255.0) + 255.0) / 255.0
        return (_HALF, 1.0, v, 1.0)
    if value < 2.0 * third:
        v = ((value - third) / third * (255.0 - 128.0) + 128.0) / 255.0
        return (v, 1.0, _HALF, 1.0)
    v = ((value - 2.0 * third) / third * (128.0 - 255.0) + 255.0) / 255.0
    return (1.0, v, _HALF, 1.0)


def _jet_dark(value: float) -> Color:
    if math.isnan(value):
        return BLACK
    quarter = 0.25
    if value < quarter:
        v = (value / quarter * (255.0 - 128.0) + 128.0) / 255.0
        return (_HALF, v, 1.0, 1.0)
    if value < 2.0 * quarter:
        v = ((value - quarter) / quarter * (128.0 - 255.0) + 255.0) / 255.0
        return (_HALF, 1.0, v, 1.0)
    if value < 3.0 * quarter:
        v = ((value - 2.0 * quarter) / quarter * (255.0 - 128.0) + 128.0) / 255.0
        return (v, 1.0, _HALF, 1.0)
    v = ((value - 3.0 * quarter) / quarter * (128.0 - 255.0) + 255.0) / 255.0
    return (1.0, v, _HALF, 1.0)


JET = ColorMap.from_function(_jet)
JET_DARK = ColorMap.from_function(_jet_dark)
WHITE = solid((1.0, 1.0, 1.0, 1.0))
GRAY = solid((0.5, 0.5, 0.5, 1.0))
