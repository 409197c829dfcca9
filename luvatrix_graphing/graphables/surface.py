from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np

from luvatrix_graphing.adapters.normalize import as_grid
from luvatrix_graphing.bounds import Bounds, finite_range
from luvatrix_graphing.colormap import JET_DARK, Color, ColorMap
from luvatrix_graphing.errors import GraphDataError
from luvatrix_graphing.graphables.base import GraphKind, Graphable3
from luvatrix_graphing.interpolation import bilinear, bilinear_grid


LOGGER = logging.getLogger(__name__)


class GriddedSurface(Graphable3):
    """Samples on a regular grid indexed ``[x_index, y_index]``.

    The grid spans ``[x_left, x_right] x [y_bottom, y_top]`` with the first and
    last samples on the edges. Color bounds ``(cmin, cmax)`` start at the z
    range and can be moved independently with :meth:`set_color_bounds`.
    """

    kind = GraphKind.SURFACE

    def __init__(
        self,
        values: Any,
        x_left: float,
        x_right: float,
        y_bottom: float,
        y_top: float,
        *,
        name: str = "",
        display_name: str = "",
        color: ColorMap | None = JET_DARK,
        value_format: str | None = None,
    ) -> None:
        super().__init__(name=name, display_name=display_name, color=color, value_format=value_format)
        self._values = np.empty((0, 0), dtype=np.float64)
        self.cmin = math.nan
        self.cmax = math.nan
        self._store(values, x_left, x_right, y_bottom, y_top)

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def shape(self) -> tuple[int, int]:
        return (int(self._values.shape[0]), int(self._values.shape[1]))

    def has_values(self) -> bool:
        return self._values.size > 0

    def set_values(self, values: Any, x_left: float, x_right: float, y_bottom: float, y_top: float) -> None:
        self._store(values, x_left, x_right, y_bottom, y_top)
        self.notify_changed()

    def set_color_bounds(self, cmin: float, cmax: float) -> None:
        self.cmin = float(cmin)
        self.cmax = float(cmax)
        self.notify_changed()

    def _store(self, values: Any, x_left: float, x_right: float, y_bottom: float, y_top: float) -> None:
        edges = tuple(float(v) for v in (x_left, x_right, y_bottom, y_top))
        if not all(math.isfinite(v) for v in edges):
            raise GraphDataError(f"surface bounds must be finite, got {edges!r}")
        grid = as_grid(values, label="surface values")
        self._values = grid
        self._bounds = Bounds(*edges)
        if grid.size == 0:
            self._zmin = self._zmax = 0.0
        else:
            self._zmin, self._zmax = finite_range(grid)
        self.cmin = self._zmin
        self.cmax = self._zmax
        LOGGER.debug("surface %r: grid %s, z range [%s, %s]", self.name, grid.shape, self._zmin, self._zmax)

    def value_at(self, x: float, y: float, width: float = 1.0, height: float = 1.0) -> float:
        if not self.has_values():
            return 0.0
        qx, qy = self._query_point(x, y)
        return bilinear(self._values, qx, qy, self.xmin, self.xmax, self.ymin, self.ymax)

    def sample_grid(self, xs: Any, ys: Any) -> np.ndarray:
        """Values at every ``(xs[i], ys[j])``; result shape is ``(len(xs), len(ys))``."""
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        if self.transpose:
            return bilinear_grid(self._values, ys, xs, self.xmin, self.xmax, self.ymin, self.ymax).T
        return bilinear_grid(self._values, xs, ys, self.xmin, self.xmax, self.ymin, self.ymax)

    def normalized_value(self, value: float, cmin: float | None = None, cmax: float | None = None) -> float:
        lo = self.cmin if cmin is None else float(cmin)
        hi = self.cmax if cmax is None else float(cmax)
        span = hi - lo
        if span == 0.0 or not math.isfinite(span):
            return 0.0
        return (value - lo) / span

    def color_at(self, x: float, y: float, cmin: float | None = None, cmax: float | None = None) -> Color:
        value = self.value_at(x, y)
        colors = self.color_map
        if not colors.filter(value):
            return colors.filter_color
        return colors.lookup(self.normalized_value(value, cmin, cmax))

    def auto_bounds(self, running: Bounds) -> Bounds:
        declared = self.bounds
        if not self.has_values():
            return declared
        accepted = self.color_map.accepts(self._values)
        xmin, xmax = _trimmed_edges(accepted.any(axis=1), declared.xmin, declared.xmax)
        ymin, ymax = _trimmed_edges(accepted.any(axis=0), declared.ymin, declared.ymax)
        return Bounds(xmin, xmax, ymin, ymax)


def _trimmed_edges(occupied: np.ndarray, lo: float, hi: float) -> tuple[float, float]:
    """Axis units of the first and last occupied grid lines, or the declared edges."""
    last = occupied.size - 1
    hits = np.flatnonzero(occupied)
    if last <= 0 or hits.size == 0:
        return (lo, hi)
    step = (hi - lo) / last
    return (lo + step * int(hits[0]), lo + step * int(hits[-1]))
