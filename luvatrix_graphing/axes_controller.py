from __future__ import annotations

import logging
import math
import sys
from typing import Iterable

from luvatrix_graphing.axis import Axis
from luvatrix_graphing.bounds import UNSET, Bounds, include_range
from luvatrix_graphing.collection import GraphableCollection3
from luvatrix_graphing.colormap import Color, ColorMap
from luvatrix_graphing.config import DEFAULT_CONFIG, GraphingConfig
from luvatrix_graphing.events import (
    AxesChanged,
    AxesChangeRequest,
    ChangeNotifier,
    ExternalValueChange,
    ValuesChanged,
    resolve_axis_index,
)
from luvatrix_graphing.graphables.base import GraphKind, Graphable
from luvatrix_graphing.scales import pixel_to_value


LOGGER = logging.getLogger(__name__)

X_AXIS, Y_AXIS, Z_AXIS = 0, 1, 2


class AxesController(GraphableCollection3):
    """Root collection that turns aggregated bounds and user pins into axes.

    Each of the x, y and color (z) axes is either automatic, derived from the
    member data with rounded "nice" bounds, or pinned to limits set through
    :meth:`set_axis_limits`, in which case the exact limits are kept.
    """

    def __init__(
        self,
        graphables: Iterable[Graphable] = (),
        *,
        name: str = "",
        config: GraphingConfig = DEFAULT_CONFIG,
    ) -> None:
        self.config = config
        self.horizontal_axis = Axis.compute(0.0, 0.0, True, config=config)
        self.vertical_axis = Axis.compute(0.0, 0.0, False, config=config)
        self.color_axis = Axis.compute(0.0, 0.0, True, config=config)
        self.cmin = math.nan
        self.cmax = math.nan
        self.axes_changed: ChangeNotifier[AxesChanged] = ChangeNotifier()
        self.axes_change_requested: ChangeNotifier[AxesChangeRequest] = ChangeNotifier()
        self.external_value_changed: ChangeNotifier[ExternalValueChange] = ChangeNotifier()
        self._raw: tuple[Bounds, float, float] = (UNSET, math.nan, math.nan)
        self._use_auto = [True, True, True]
        self._pins: list[tuple[float, float]] = [(math.nan, math.nan)] * 3
        self._axes_dirty = True
        self._graph_dirty = True
        super().__init__(graphables, name=name)

    @property
    def needs_redraw(self) -> bool:
        return self._graph_dirty or self._axes_dirty

    @property
    def axes_need_redraw(self) -> bool:
        return self._axes_dirty

    def mark_drawn(self) -> None:
        self._graph_dirty = False
        self._axes_dirty = False

    def is_pinned(self, axis: int | str) -> bool:
        return not self._use_auto[resolve_axis_index(axis)]

    def pinned_limits(self, axis: int | str) -> tuple[float, float]:
        return self._pins[resolve_axis_index(axis)]

    # Axis pins.

    def set_axis_limits(self, axis: int | str, vmin: float, vmax: float, defer: bool = False) -> None:
        """Pin an axis to ``[vmin, vmax]``.

        ``axes_change_requested`` subscribers see the request first and may
        adjust it; an adjusted request is announced on ``external_value_changed``.
        """
        request = AxesChangeRequest(axis, float(vmin), float(vmax))
        index = request.axis_index
        asked = (request.min, request.max)
        if asked != self._pins[index]:
            self.axes_change_requested.emit(request)
        granted = (request.min, request.max)
        if granted != asked:
            self.external_value_changed.emit(ExternalValueChange(index, granted[0], granted[1]))
        self._pins[index] = granted
        self._use_auto[index] = False
        LOGGER.debug("pinned %s axis to [%s, %s]", request.axis, granted[0], granted[1])
        if not defer:
            self.recalculate_bounds()

    def release_axis_limits(self, axis: int | str | None = None, defer: bool = False) -> None:
        if axis is None:
            self._use_auto = [True, True, True]
        else:
            self._use_auto[resolve_axis_index(axis)] = True
        if not defer:
            self.recalculate_bounds()

    def reset_pinned_limits(self, axis: int | str | None = None, defer: bool = False) -> None:
        """Forget stored pins; a pinned axis then re-pins to the automatic bounds."""
        indices = range(3) if axis is None else (resolve_axis_index(axis),)
        for index in indices:
            self._pins[index] = (math.nan, math.nan)
        if not defer and any(not self._use_auto[index] for index in indices):
            self.recalculate_bounds()

    def set_graphables(self, graphables: Iterable[Graphable]) -> None:
        self.graphables = graphables
        self.reset_pinned_limits()

    def _structure_changed(self) -> None:
        # Any membership change that leaves the controller empty drops the pins.
        if not self._graphs:
            self._pins = [(math.nan, math.nan)] * 3
        super()._structure_changed()

    # Recalculation.

    def notify_changed(self) -> None:
        self._graph_dirty = True
        super().notify_changed()

    def _child_changed(self, event: ValuesChanged) -> None:
        self._graph_dirty = True
        super()._child_changed(event)

    def recalculate_bounds(self) -> bool:
        exposed = (self._bounds, self._zmin, self._zmax, self.cmin, self.cmax)

        # Aggregate against the previous raw data, not the rounded axis bounds.
        self._bounds, self._zmin, self._zmax = self._raw
        super().recalculate_bounds()
        self._raw = (self._bounds, self._zmin, self._zmax)
        raw_bounds, raw_zmin, raw_zmax = self._raw

        cmin, cmax = self._color_range(raw_zmin, raw_zmax)
        auto_axes = (
            Axis.compute(raw_bounds.xmin, raw_bounds.xmax, True, config=self.config),
            Axis.compute(raw_bounds.ymin, raw_bounds.ymax, False, config=self.config),
            Axis.compute(cmin, cmax, True, config=self.config),
        )
        # A forgotten pin re-pins to the automatic bounds once there is data to fit.
        if self._graphs:
            self._pins = [
                (
                    auto.min if math.isnan(pin[0]) else pin[0],
                    auto.max if math.isnan(pin[1]) else pin[1],
                )
                for auto, pin in zip(auto_axes, self._pins)
            ]

        self.horizontal_axis = self._axis_for(X_AXIS, True, auto_axes[X_AXIS])
        self.vertical_axis = self._axis_for(Y_AXIS, False, auto_axes[Y_AXIS])
        self.color_axis = self._axis_for(Z_AXIS, True, auto_axes[Z_AXIS])

        self._bounds = Bounds(
            self.horizontal_axis.min,
            self.horizontal_axis.max,
            self.vertical_axis.min,
            self.vertical_axis.max,
        )
        self._zmin = self.cmin = self.color_axis.min
        self._zmax = self.cmax = self.color_axis.max

        xy_changed = not exposed[0].same_as(self._bounds)
        if xy_changed:
            LOGGER.debug("axes bounds -> %s", self._bounds)
            self.axes_changed.emit(AxesChanged(*self._limits()))
        changed = xy_changed or any(
            not _same(before, after)
            for before, after in zip(exposed[1:], (self._zmin, self._zmax, self.cmin, self.cmax))
        )
        if changed:
            self._graph_dirty = True
            self._axes_dirty = True
        return changed

    def _axis_for(self, index: int, horizontal: bool, auto: Axis) -> Axis:
        lo, hi = self._pins[index]
        if self._use_auto[index] or math.isnan(lo) or math.isnan(hi):
            return auto
        return Axis.compute(lo, hi, horizontal, force_exact_bounds=True, config=self.config)

    def _color_range(self, zmin: float, zmax: float) -> tuple[float, float]:
        color_range = (math.nan, math.nan)
        for graph in self._graphs:
            if graph.visible and graph.kind is GraphKind.SURFACE:
                color_range = include_range(color_range, (graph.cmin, graph.cmax))
        cmin, cmax = color_range
        if math.isnan(cmin):
            cmin = zmin
        if math.isnan(cmax):
            cmax = zmax
        return _nudge_into_filter(cmin, cmax, self.dominant_color_map)

    def _limits(self) -> tuple[float, float, float, float, float, float]:
        b = self._bounds
        return (b.xmin, b.xmax, b.ymin, b.ymax, self._zmin, self._zmax)

    # Pixel queries.

    def value_at_pixel(self, px: float, py: float, width: int, height: int, index: int = 0) -> float:
        if index < 0 or index >= len(self._graphs):
            return math.nan
        x = pixel_to_value(px, width, self.xmin, self.xmax)
        y = pixel_to_value(py, height, self.ymin, self.ymax)
        return self.value_at(x, y, index=index)

    def describe_at_pixel(self, px: float, py: float, width: int, height: int, index: int = -1) -> str:
        if not self._graphs:
            return ""
        x = pixel_to_value(px, width, self.xmin, self.xmax)
        y = pixel_to_value(py, height, self.ymin, self.ymax)
        return self.describe_at(x, y, index=index)

    def color_ramp(self, count: int) -> list[Color]:
        """Numeric color-axis ramp sampled from the dominant color map."""
        return self.dominant_color_map.sample(count)


def _nudge_into_filter(cmin: float, cmax: float, colors: ColorMap) -> tuple[float, float]:
    if not math.isnan(cmin) and not colors.filter(cmin):
        if cmin == -math.inf and colors.filter(-sys.float_info.max):
            cmin = -sys.float_info.max
        elif cmin < 0 and colors.filter(0.0):
            cmin = 0.0
    if not math.isnan(cmax) and not colors.filter(cmax):
        if cmax == math.inf and colors.filter(sys.float_info.max):
            cmax = sys.float_info.max
        elif cmax > 0 and colors.filter(0.0):
            cmax = 0.0
    return (cmin, cmax)


def _same(a: float, b: float) -> bool:
    return a == b or (math.isnan(a) and math.isnan(b))
