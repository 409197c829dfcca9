from __future__ import annotations

from typing import Any

import numpy as np

from luvatrix_graphing.adapters.normalize import as_points
from luvatrix_graphing.bounds import ZERO, Bounds, finite_range
from luvatrix_graphing.colormap import ColorMap
from luvatrix_graphing.graphables.base import GraphKind, Graphable3
from luvatrix_graphing.interpolation import SegmentHit, locate_nearest_segment


class ScatterLine3(Graphable3):
    """An unsorted 3-D polyline; queries project onto its (x, y) segments."""

    kind = GraphKind.POLYLINE3

    def __init__(
        self,
        values: Any = (),
        *,
        name: str = "",
        display_name: str = "",
        color: ColorMap | None = None,
        value_format: str | None = None,
    ) -> None:
        super().__init__(name=name, display_name=display_name, color=color, value_format=value_format)
        self._points = np.empty((0, 3), dtype=np.float64)
        self._store(values)

    @property
    def points(self) -> np.ndarray:
        return self._points

    @property
    def value_unit(self) -> str:
        return self.y_unit

    def __len__(self) -> int:
        return int(self._points.shape[0])

    def has_values(self) -> bool:
        return len(self) > 0

    def set_values(self, values: Any) -> None:
        self._store(values)
        self.notify_changed()

    def _store(self, values: Any) -> None:
        points = as_points(values, dims=3, label="polyline values")
        self._points = points
        if points.shape[0] == 0:
            self._bounds = ZERO
            self._zmin = self._zmax = 0.0
            return
        xmin, xmax = finite_range(points[:, 0])
        ymin, ymax = finite_range(points[:, 1])
        self._bounds = Bounds(xmin, xmax, ymin, ymax)
        self._zmin, self._zmax = finite_range(points[:, 2])

    def locate(self, x: float, y: float, width: float = 1.0, height: float = 1.0) -> SegmentHit:
        qx, qy = self._query_point(x, y)
        return locate_nearest_segment(qx, qy, self._points[:, 0], self._points[:, 1], width, height)

    def value_at(self, x: float, y: float, width: float = 1.0, height: float = 1.0) -> float:
        if not self.has_values():
            return 0.0
        return self.locate(x, y, width, height).blend(self._points[:, 1])

    def z_value_at(self, x: float, y: float, width: float = 1.0, height: float = 1.0) -> float:
        if not self.has_values():
            return 0.0
        return self.locate(x, y, width, height).blend(self._points[:, 2])

    def auto_bounds(self, running: Bounds) -> Bounds:
        return self.scaled_bounds()
