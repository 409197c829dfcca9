from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
import math
from typing import Callable, ClassVar

from luvatrix_graphing.bounds import UNSET, Bounds
from luvatrix_graphing.colormap import WHITE, ColorMap
from luvatrix_graphing.config import DEFAULT_CONFIG
from luvatrix_graphing.events import ChangeNotifier, Subscription, ValuesChanged
from luvatrix_graphing.scales import format_value


class GraphKind(str, Enum):
    SERIES = "series"
    SURFACE = "surface"
    POLYLINE3 = "polyline3"
    CONTOUR = "contour"
    COLLECTION = "collection"


def identity(value: float) -> float:
    return value


class Graphable(ABC):
    """Anything a collection can hold: bounds, value queries and change notifications."""

    kind: ClassVar[GraphKind]

    def __init__(
        self,
        *,
        name: str = "",
        display_name: str = "",
        color: ColorMap | None = None,
        value_format: str | None = None,
    ) -> None:
        self.name = name
        self._display_name = display_name
        self._visible = True
        self.display_value = True
        self._bounds: Bounds = UNSET
        self.x_unit = ""
        self.y_unit = ""
        self.x_name = ""
        self._y_name: str | None = None
        self.x_axis_scale: Callable[[float], float] = identity
        self.y_axis_scale: Callable[[float], float] = identity
        self.value_format = value_format if value_format is not None else DEFAULT_CONFIG.value_format
        self.color = color
        self.transpose = False
        self.values_changed: ChangeNotifier[ValuesChanged] = ChangeNotifier()

    @property
    def display_name(self) -> str:
        return self._display_name or self.name

    @display_name.setter
    def display_name(self, value: str) -> None:
        self._display_name = value

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, value: bool) -> None:
        changed = self._visible != bool(value)
        self._visible = bool(value)
        if changed:
            self.notify_changed()

    @property
    def y_name(self) -> str:
        return self._y_name or self.display_name

    @y_name.setter
    def y_name(self, value: str | None) -> None:
        self._y_name = value

    @property
    def has_explicit_y_name(self) -> bool:
        return self._y_name is not None

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def xmin(self) -> float:
        return self.bounds.xmin

    @property
    def xmax(self) -> float:
        return self.bounds.xmax

    @property
    def ymin(self) -> float:
        return self.bounds.ymin

    @property
    def ymax(self) -> float:
        return self.bounds.ymax

    @property
    def color_map(self) -> ColorMap:
        return self.color if self.color is not None else WHITE

    @property
    def value_unit(self) -> str:
        return self.y_unit

    def subscribe(self, callback: Callable[[ValuesChanged], None]) -> Subscription:
        return self.values_changed.subscribe(callback)

    def notify_changed(self) -> None:
        self.values_changed.emit(ValuesChanged(self))

    def scaled_bounds(self) -> Bounds:
        return self.bounds.scaled(self.x_axis_scale, self.y_axis_scale)

    def z_bounds(self) -> tuple[float, float] | None:
        return None

    def z_color_map(self) -> ColorMap:
        return self.color_map

    @abstractmethod
    def auto_bounds(self, running: Bounds) -> Bounds:
        """Bounds this graphable contributes when a collection auto-fits its axes."""
        raise NotImplementedError

    @abstractmethod
    def has_values(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def value_at(self, x: float, y: float, width: float = 1.0, height: float = 1.0) -> float:
        raise NotImplementedError

    def describe_at(
        self,
        x: float,
        y: float,
        width: float = 1.0,
        height: float = 1.0,
        with_name: bool = False,
    ) -> str:
        if not self.has_values():
            return ""
        return self.format_reading(self.value_at(x, y, width, height), self.value_unit, with_name)

    def format_reading(self, value: float, unit: str, with_name: bool) -> str:
        prefix = f"{self.display_name}: " if with_name and self.display_name else ""
        return f"{prefix}{format_value(value, self.value_format)}{unit}"

    def _query_point(self, x: float, y: float) -> tuple[float, float]:
        if self.transpose:
            return (float(y), float(x))
        return (float(x), float(y))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class Graphable3(Graphable):
    """Graphable with a z component."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._zmin = math.nan
        self._zmax = math.nan
        self.z_unit = ""
        self._z_name: str | None = None

    @property
    def y_name(self) -> str:
        return self._y_name or ""

    @y_name.setter
    def y_name(self, value: str | None) -> None:
        self._y_name = value

    @property
    def z_name(self) -> str:
        return self._z_name or self.display_name

    @z_name.setter
    def z_name(self, value: str | None) -> None:
        self._z_name = value

    @property
    def zmin(self) -> float:
        return self._zmin

    @property
    def zmax(self) -> float:
        return self._zmax

    @property
    def value_unit(self) -> str:
        return self.z_unit

    def z_bounds(self) -> tuple[float, float] | None:
        return (self._zmin, self._zmax)
