"""Lookup kernels shared by every graphable.

Series-style lookups return a :class:`SegmentHit` (winning index plus the
fraction towards the next sample) so that parallel channels can be sampled at
the same location without repeating the search.
"""

from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np


# Relative tolerance for treating a continuous sample coordinate as an exact knot.
KNOT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class SegmentHit:
    index: int
    fraction: float = 0.0

    def blend(self, values: np.ndarray) -> float:
        if math.isnan(self.fraction):
            return math.nan
        v0 = float(values[self.index])
        if self.fraction == 0.0:
            return v0
        v1 = float(values[self.index + 1])
        return v0 * (1.0 - self.fraction) + v1 * self.fraction


MISSING = SegmentHit(index=0, fraction=math.nan)


def snap_coordinate(u: float) -> tuple[int, float]:
    """Split a continuous sample coordinate into (floor index, fraction), snapping near-knots."""
    nearest = round(u)
    if abs(u - nearest) <= KNOT_TOLERANCE * max(1.0, abs(u)):
        return (int(nearest), 0.0)
    index = math.floor(u)
    return (int(index), u - index)


def locate_equal_steps(x: float, x_min: float, x_max: float, count: int) -> SegmentHit:
    if math.isnan(x):
        return MISSING
    if count <= 1 or x <= x_min:
        return SegmentHit(0)
    last = count - 1
    if x >= x_max:
        return SegmentHit(last)
    step = (x_max - x_min) / last
    index, fraction = snap_coordinate((x - x_min) / step)
    if index >= last:
        return SegmentHit(last)
    if index < 0:
        return SegmentHit(0)
    return SegmentHit(index, fraction)


def locate_sorted(x: float, xs: np.ndarray) -> SegmentHit:
    if math.isnan(x):
        return MISSING
    last = xs.size - 1
    if x >= xs[last]:
        return SegmentHit(last)
    # Largest i <= last - 1 with xs[i] < x: the first hit of a backward scan.
    below = np.flatnonzero(xs[:last] < x)
    if below.size == 0:
        return SegmentHit(0)
    i = int(below[-1])
    fraction = (x - float(xs[i])) / (float(xs[i + 1]) - float(xs[i]))
    return SegmentHit(i, fraction)


def locate_nearest_segment(
    x: float,
    y: float,
    xs: np.ndarray,
    ys: np.ndarray,
    width: float = 1.0,
    height: float = 1.0,
) -> SegmentHit:
    """Project (x, y) onto every segment and keep the visually nearest one.

    Offsets are divided by ``(width, height)`` before comparing squared
    distances. The first minimum wins; NaN distances never win.
    """
    if xs.size < 2:
        return SegmentHit(0)
    sx = _extent(width)
    sy = _extent(height)

    x0 = xs[:-1]
    y0 = ys[:-1]
    dx = xs[1:] - x0
    dy = ys[1:] - y0
    length_sq = dx * dx + dy * dy
    with np.errstate(divide="ignore", invalid="ignore"):
        t = ((x - x0) * dx + (y - y0) * dy) / length_sq
    t = np.where(length_sq > 0, t, 0.0)
    t = np.clip(t, 0.0, 1.0)

    px = x0 + t * dx
    py = y0 + t * dy
    dist = ((x - px) / sx) ** 2 + ((y - py) / sy) ** 2
    dist = np.where(np.isnan(dist), np.inf, dist)
    if not np.any(dist < np.inf):
        return SegmentHit(0)
    i = int(np.argmin(dist))
    fraction = float(t[i])
    if fraction >= 1.0:
        return SegmentHit(i + 1)
    return SegmentHit(i, fraction)


def grid_axis_coordinate(v: float, v_min: float, v_max: float, count: int) -> tuple[int, int, float]:
    """(lower index, upper index, fraction) of ``v`` along one grid axis, clamped to the grid."""
    last = count - 1
    if v <= v_min or last <= 0:
        return (0, 0, 0.0)
    if v >= v_max:
        return (last, last, 0.0)
    step = (v_max - v_min) / last
    index, fraction = snap_coordinate((v - v_min) / step)
    if index >= last:
        return (last, last, 0.0)
    if index < 0:
        return (0, 0, 0.0)
    if fraction == 0.0:
        return (index, index, 0.0)
    return (index, index + 1, fraction)


def bilinear(
    values: np.ndarray,
    x: float,
    y: float,
    x_min: float,
    x_max: float,
    y_min: float,
    y_max: float,
) -> float:
    """Bilinear lookup in a ``[x_index, y_index]`` grid; exact row/column hits use 1-D interpolation."""
    if values.ndim != 2 or values.shape[0] == 0 or values.shape[1] == 0:
        return 0.0
    if math.isnan(x) or math.isnan(y):
        return math.nan
    x1, x2, fx = grid_axis_coordinate(x, x_min, x_max, values.shape[0])
    y1, y2, fy = grid_axis_coordinate(y, y_min, y_max, values.shape[1])

    if x1 == x2 and y1 == y2:
        return float(values[x1, y1])
    if x1 == x2:
        return float(values[x1, y1]) * (1.0 - fy) + float(values[x1, y2]) * fy
    if y1 == y2:
        return float(values[x1, y1]) * (1.0 - fx) + float(values[x2, y1]) * fx
    return (
        float(values[x1, y1]) * (1.0 - fx) * (1.0 - fy)
        + float(values[x2, y1]) * fx * (1.0 - fy)
        + float(values[x1, y2]) * (1.0 - fx) * fy
        + float(values[x2, y2]) * fx * fy
    )


def bilinear_grid(
    values: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    x_min: float,
    x_max: float,
    y_min: float,
    y_max: float,
) -> np.ndarray:
    """Vectorised :func:`bilinear` over every (xs[i], ys[j]) pair; result is ``[len(xs), len(ys)]``."""
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    if values.ndim != 2 or values.shape[0] == 0 or values.shape[1] == 0:
        return np.zeros((xs.size, ys.size), dtype=np.float64)
    x1, x2, fx = _grid_axis_coordinates(xs, x_min, x_max, values.shape[0])
    y1, y2, fy = _grid_axis_coordinates(ys, y_min, y_max, values.shape[1])

    fx = fx[:, None]
    fy = fy[None, :]
    v11 = values[x1[:, None], y1[None, :]]
    v21 = values[x2[:, None], y1[None, :]]
    v12 = values[x1[:, None], y2[None, :]]
    v22 = values[x2[:, None], y2[None, :]]

    exact_x = np.broadcast_to(fx == 0.0, v11.shape)
    exact_y = np.broadcast_to(fy == 0.0, v11.shape)
    with np.errstate(invalid="ignore", over="ignore"):
        along_y = v11 * (1.0 - fy) + v12 * fy
        along_x = v11 * (1.0 - fx) + v21 * fx
        full = v11 * (1.0 - fx) * (1.0 - fy) + v21 * fx * (1.0 - fy) + v12 * (1.0 - fx) * fy + v22 * fx * fy
    out = np.where(exact_x & exact_y, v11, np.where(exact_x, along_y, np.where(exact_y, along_x, full)))
    nan_rows = np.isnan(xs)[:, None] | np.isnan(ys)[None, :]
    return np.where(nan_rows, np.nan, out)


def _grid_axis_coordinates(
    v: np.ndarray,
    v_min: float,
    v_max: float,
    count: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    last = count - 1
    if last <= 0 or v_max == v_min:
        zeros = np.zeros(v.shape, dtype=np.intp)
        return (zeros, zeros, np.zeros(v.shape, dtype=np.float64))
    step = (v_max - v_min) / last
    with np.errstate(invalid="ignore"):
        u = np.clip((v - v_min) / step, 0.0, float(last))
    u = np.where(np.isnan(u), 0.0, u)
    nearest = np.rint(u)
    snap = np.abs(u - nearest) <= KNOT_TOLERANCE * np.maximum(1.0, np.abs(u))
    u = np.where(snap, nearest, u)
    lower = np.floor(u).astype(np.intp)
    fraction = u - lower
    upper = np.where(fraction == 0.0, lower, np.minimum(lower + 1, last))
    return (lower, upper, fraction)


def _extent(value: float) -> float:
    if not math.isfinite(value) or value <= 0:
        return 1.0
    return float(value)
