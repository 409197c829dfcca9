from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np

from luvatrix_graphing.config import DEFAULT_CONFIG, GraphingConfig
from luvatrix_graphing.scales import format_tick


# Normalized-range thresholds; a vertical axis has taller labels per tick than a horizontal one.
HORIZONTAL_UNIT_CONSTANT = 12.0 / 7.0
VERTICAL_UNIT_CONSTANT = 40.0 / 21.0
SPAN_UNIT_CONSTANT = 18.0 / 11.0


@dataclass(frozen=True)
class Axis:
    min: float
    max: float
    major_unit: float
    tick_count: int
    labels: tuple[str, ...]
    horizontal: bool = True
    forced: bool = False

    @classmethod
    def compute(
        cls,
        vmin: float,
        vmax: float,
        horizontal: bool = True,
        force_exact_bounds: bool = False,
        *,
        config: GraphingConfig = DEFAULT_CONFIG,
    ) -> "Axis":
        vmin = float(vmin)
        vmax = float(vmax)
        if vmin > vmax:
            vmin, vmax = vmax, vmin
        if vmin == vmax or not math.isfinite(vmin) or not math.isfinite(vmax):
            return cls._single_tick(vmin, vmax, horizontal, force_exact_bounds)

        unit = nice_unit(vmin, vmax, horizontal)
        if unit == 0.0:
            # Span overflowed to infinity.
            return cls._single_tick(vmin, vmax, horizontal, force_exact_bounds)
        exact = _is_multiple(vmin, unit) and _is_multiple(vmax, unit)
        if not force_exact_bounds or exact:
            lo = _round_down(vmin, unit, config.bound_margin)
            hi = _round_up(vmax, unit, config.bound_margin)
        else:
            unit = (vmax - vmin) / float(config.forced_tick_divisions)
            lo = vmin
            hi = vmax

        ticks = (hi - lo) / unit
        if not math.isfinite(ticks):
            return cls._single_tick(vmin, vmax, horizontal, force_exact_bounds)
        tick_count = int(round(ticks))
        labels = tuple(format_tick(lo + unit * i, step=unit) for i in range(tick_count + 1))
        return cls(
            min=lo,
            max=hi,
            major_unit=unit,
            tick_count=tick_count,
            labels=labels,
            horizontal=horizontal,
            forced=force_exact_bounds,
        )

    @classmethod
    def _single_tick(cls, vmin: float, vmax: float, horizontal: bool, forced: bool) -> "Axis":
        return cls(
            min=vmin,
            max=vmax,
            major_unit=0.0,
            tick_count=1,
            labels=(format_tick(vmin), format_tick(vmax)),
            horizontal=horizontal,
            forced=forced,
        )

    @classmethod
    def empty(cls, horizontal: bool = True) -> "Axis":
        return cls.compute(0.0, 0.0, horizontal)

    @property
    def is_degenerate(self) -> bool:
        return self.major_unit == 0.0

    def with_min(self, value: float) -> "Axis":
        return Axis.compute(value, self.max, self.horizontal, self.forced)

    def with_max(self, value: float) -> "Axis":
        return Axis.compute(self.min, value, self.horizontal, self.forced)

    def tick_values(self) -> np.ndarray:
        if self.is_degenerate:
            return np.asarray([self.min, self.max], dtype=np.float64)
        return self.min + self.major_unit * np.arange(self.tick_count + 1, dtype=np.float64)

    def fraction_of(self, value: float) -> float:
        span = self.max - self.min
        if span == 0 or not math.isfinite(span):
            return 0.0
        return (float(value) - self.min) / span

    def value_at_fraction(self, fraction: float) -> float:
        return self.min + float(fraction) * (self.max - self.min)


def nice_unit(vmin: float, vmax: float, horizontal: bool = True) -> float:
    if (vmin < 0) != (vmax < 0):
        return nice_unit_for_span(vmax - vmin)
    c = HORIZONTAL_UNIT_CONSTANT if horizontal else VERTICAL_UNIT_CONSTANT
    return _unit_for_range(max(vmax, -vmin), c)


def nice_unit_for_span(span: float) -> float:
    return _unit_for_range(span, SPAN_UNIT_CONSTANT)


def rounded_min(vmin: float, vmax: float, horizontal: bool = True, *, config: GraphingConfig = DEFAULT_CONFIG) -> float:
    if vmin > vmax:
        vmin, vmax = vmax, vmin
    unit = nice_unit(vmin, vmax, horizontal)
    if unit == 0.0:
        return vmin
    return _round_down(vmin, unit, config.bound_margin)


def rounded_max(vmin: float, vmax: float, horizontal: bool = True, *, config: GraphingConfig = DEFAULT_CONFIG) -> float:
    if vmin > vmax:
        vmin, vmax = vmax, vmin
    unit = nice_unit(vmin, vmax, horizontal)
    if unit == 0.0:
        return vmax
    return _round_up(vmax, unit, config.bound_margin)


def _unit_for_range(value: float, c: float) -> float:
    value = abs(value)
    if value == 0.0 or not math.isfinite(value):
        return 0.0
    oom = 10.0 ** math.floor(math.log10(value))
    normalized = value / oom
    if normalized > 5.0 * c:
        return 2.0 * oom
    if normalized > 2.5 * c:
        return oom
    if normalized > c:
        return 0.5 * oom
    return 0.2 * oom


def _is_multiple(value: float, unit: float) -> bool:
    return math.fmod(value, unit) == 0.0


def _round_down(value: float, unit: float, margin: float) -> float:
    if _is_multiple(value, unit):
        return value
    return math.floor(min(value, 0.0) / unit * margin) * unit


def _round_up(value: float, unit: float, margin: float) -> float:
    if _is_multiple(value, unit):
        return value
    return math.ceil(max(value, 0.0) / unit * margin) * unit
