from __future__ import annotations

import math
from typing import Any, Callable

import numpy as np

from luvatrix_graphing.adapters.normalize import as_grid
from luvatrix_graphing.bounds import Bounds
from luvatrix_graphing.colormap import GRAY, ColorMap
from luvatrix_graphing.errors import GraphDataError
from luvatrix_graphing.graphables.base import GraphKind, Graphable
from luvatrix_graphing.interpolation import bilinear, bilinear_grid


def non_negative(value: float) -> bool:
    return math.isfinite(value) and value >= 0.0


class ContourMask(Graphable):
    """Boolean mask derived from an external scalar grid.

    With ``line_only`` the mask is the outline: samples failing ``mask_criteria``
    that have a passing neighbour within ``line_width`` samples. Otherwise it
    covers every failing sample and everything outside the grid bounds.
    """

    kind = GraphKind.CONTOUR

    def __init__(
        self,
        values: Any,
        x_left: float,
        x_right: float,
        y_bottom: float,
        y_top: float,
        mask_criteria: Callable[[float], bool] | None = None,
        *,
        line_only: bool = True,
        line_width: int = 1,
        name: str = "",
        display_name: str = "",
        color: ColorMap | None = GRAY,
    ) -> None:
        super().__init__(name=name, display_name=display_name, color=color)
        self.mask_criteria: Callable[[float], bool] = mask_criteria if mask_criteria is not None else non_negative
        self.line_only = line_only
        self.line_width = line_width
        self._values = np.empty((0, 0), dtype=np.float64)
        self._store(values, x_left, x_right, y_bottom, y_top)

    @property
    def values(self) -> np.ndarray:
        return self._values

    def has_values(self) -> bool:
        return self._values.size > 0

    def set_values(self, values: Any, x_left: float, x_right: float, y_bottom: float, y_top: float) -> None:
        self._store(values, x_left, x_right, y_bottom, y_top)
        self.notify_changed()

    def _store(self, values: Any, x_left: float, x_right: float, y_bottom: float, y_top: float) -> None:
        edges = tuple(float(v) for v in (x_left, x_right, y_bottom, y_top))
        if not all(math.isfinite(v) for v in edges):
            raise GraphDataError(f"mask bounds must be finite, got {edges!r}")
        self._values = as_grid(values, label="mask values")
        self._bounds = Bounds(*edges)

    def value_at(self, x: float, y: float, width: float = 1.0, height: float = 1.0) -> float:
        if not self.has_values():
            return 0.0
        qx, qy = self._query_point(x, y)
        return bilinear(self._values, qx, qy, self.xmin, self.xmax, self.ymin, self.ymax)

    def mask_at(self, x: float, y: float) -> bool:
        return bool(self.mask_criteria(self.value_at(x, y)))

    def describe_at(
        self,
        x: float,
        y: float,
        width: float = 1.0,
        height: float = 1.0,
        with_name: bool = False,
    ) -> str:
        return ""

    def auto_bounds(self, running: Bounds) -> Bounds:
        return running

    def sample_mask(
        self,
        width: int,
        height: int,
        x_left: float,
        x_right: float,
        y_bottom: float,
        y_top: float,
    ) -> np.ndarray:
        """Boolean ``(height, width)`` mask over the given view; row 0 is the bottom edge."""
        if width <= 0 or height <= 0:
            return np.zeros((max(height, 0), max(width, 0)), dtype=bool)
        xs = np.linspace(x_left, x_right, width)
        ys = np.linspace(y_bottom, y_top, height)
        gx, gy = (ys, xs) if self.transpose else (xs, ys)
        sampled = bilinear_grid(self._values, gx, gy, self.xmin, self.xmax, self.ymin, self.ymax)
        outside = ((gx < self.xmin) | (gx > self.xmax))[:, None] | ((gy < self.ymin) | (gy > self.ymax))[None, :]
        if not self.transpose:
            sampled = sampled.T
            outside = outside.T
        passes = np.fromiter(
            (bool(self.mask_criteria(float(v))) for v in sampled.ravel()),
            dtype=bool,
            count=sampled.size,
        ).reshape(sampled.shape)

        if not self.line_only:
            return ~passes | outside

        near = np.zeros_like(passes)
        for w in range(1, max(int(self.line_width), 1) + 1):
            near[:, w:] |= passes[:, :-w]
            near[:, :-w] |= passes[:, w:]
            near[w:, :] |= passes[:-w, :]
            near[:-w, :] |= passes[w:, :]
        return ~passes & near
