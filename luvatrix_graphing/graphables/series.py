from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np

from luvatrix_graphing.adapters.normalize import as_points, as_vector
from luvatrix_graphing.bounds import ZERO, Bounds, finite_range
from luvatrix_graphing.colormap import ColorMap
from luvatrix_graphing.errors import GraphDataError
from luvatrix_graphing.graphables.base import GraphKind, Graphable
from luvatrix_graphing.interpolation import (
    SegmentHit,
    locate_equal_steps,
    locate_nearest_segment,
    locate_sorted,
)


LOGGER = logging.getLogger(__name__)


class Series(Graphable):
    """A 2-D line of (x, y) points.

    Pass a 1-D ``values`` with ``x_left``/``x_right`` for evenly spaced samples,
    or an ``(N, 2)`` point buffer on its own. The derived ``sorted`` and
    ``equal_steps`` flags pick the lookup used by :meth:`value_at`.
    """

    kind = GraphKind.SERIES

    def __init__(
        self,
        values: Any = (),
        x_left: float | None = None,
        x_right: float | None = None,
        *,
        name: str = "",
        display_name: str = "",
        color: ColorMap | None = None,
        value_format: str | None = None,
    ) -> None:
        super().__init__(name=name, display_name=display_name, color=color, value_format=value_format)
        self._points = np.empty((0, 2), dtype=np.float64)
        self._sorted = False
        self._equal_steps = False
        self._store(values, x_left, x_right)

    @property
    def points(self) -> np.ndarray:
        return self._points

    @property
    def xs(self) -> np.ndarray:
        return self._points[:, 0]

    @property
    def ys(self) -> np.ndarray:
        return self._points[:, 1]

    @property
    def sorted(self) -> bool:
        return self._sorted

    @property
    def equal_steps(self) -> bool:
        return self._equal_steps

    def __len__(self) -> int:
        return int(self._points.shape[0])

    def has_values(self) -> bool:
        return len(self) > 0

    def set_values(self, values: Any, x_left: float | None = None, x_right: float | None = None) -> None:
        """Replace every point, re-derive bounds and flags, then notify subscribers."""
        self._store(values, x_left, x_right)
        self.notify_changed()

    def _store(self, values: Any, x_left: float | None, x_right: float | None) -> None:
        self._apply(coerce_points(values, x_left, x_right), x_left, x_right)

    def _apply(self, points: np.ndarray, x_left: float | None, x_right: float | None) -> None:
        self._points = points

        if points.shape[0] == 0:
            self._bounds = ZERO
            self._sorted = True
            self._equal_steps = True
            return

        xs = points[:, 0]
        ymin, ymax = finite_range(points[:, 1])
        if x_left is not None and x_left <= x_right:
            self._bounds = Bounds(float(x_left), float(x_right), ymin, ymax)
            self._sorted = True
            self._equal_steps = True
        else:
            xmin, xmax = finite_range(xs)
            self._bounds = Bounds(xmin, xmax, ymin, ymax)
            self._sorted = bool(not np.any(xs[1:] < xs[:-1]))
            self._equal_steps = _has_equal_steps(xs, xmin, xmax)
        LOGGER.debug(
            "series %r: %d points, sorted=%s equal_steps=%s",
            self.name,
            points.shape[0],
            self._sorted,
            self._equal_steps,
        )

    def locate(self, x: float, y: float, width: float = 1.0, height: float = 1.0) -> SegmentHit:
        """Winning sample index and fraction for a query point."""
        qx, qy = self._query_point(x, y)
        if self._equal_steps and self._sorted:
            return locate_equal_steps(qx, self.xmin, self.xmax, len(self))
        if self._sorted:
            return locate_sorted(qx, self.xs)
        return locate_nearest_segment(qx, qy, self.xs, self.ys, width, height)

    def value_at(self, x: float, y: float, width: float = 1.0, height: float = 1.0) -> float:
        if not self.has_values():
            return 0.0
        return self.locate(x, y, width, height).blend(self.ys)

    def auto_bounds(self, running: Bounds) -> Bounds:
        if not self.has_values():
            return Bounds()
        xs = self.xs
        ys = self.ys
        keep = self.color_map.accepts(ys) & np.isfinite(xs)
        xmin, xmax = finite_range(xs[keep])
        ymin, ymax = finite_range(ys[keep])
        return Bounds(xmin, xmax, ymin, ymax)


def coerce_points(values: Any, x_left: float | None, x_right: float | None) -> np.ndarray:
    if x_left is None and x_right is None:
        return as_points(values, dims=2, label="series values")
    if x_left is None or x_right is None:
        raise GraphDataError("x_left and x_right must be given together")
    return _evenly_spaced(values, float(x_left), float(x_right))


def _evenly_spaced(values: Any, x_left: float, x_right: float) -> np.ndarray:
    if not (math.isfinite(x_left) and math.isfinite(x_right)):
        raise GraphDataError(f"x_left and x_right must be finite, got {x_left!r} and {x_right!r}")
    ys = as_vector(values, label="series values")
    if ys.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    xs = np.linspace(x_left, x_right, ys.size) if ys.size > 1 else np.asarray([x_left], dtype=np.float64)
    return np.column_stack((xs, ys))


def _has_equal_steps(xs: np.ndarray, xmin: float, xmax: float) -> bool:
    if math.isnan(xmin):
        return False
    if xs.size == 1:
        return True
    step = (xmax - xmin) / (xs.size - 1)
    return bool(np.array_equal(xs, xmin + step * np.arange(xs.size, dtype=np.float64)))
