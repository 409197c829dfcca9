from __future__ import annotations

import logging
import math
import os
from typing import Callable, Iterable, Iterator

from luvatrix_graphing.bounds import UNSET, Bounds, include_range
from luvatrix_graphing.colormap import JET_DARK, ColorMap
from luvatrix_graphing.errors import GraphDataError
from luvatrix_graphing.events import Subscription, ValuesChanged
from luvatrix_graphing.graphables.base import GraphKind, Graphable


LOGGER = logging.getLogger(__name__)


class GraphableCollection(Graphable):
    """Ordered, name-keyed group of graphables sharing one coordinate frame.

    Membership is non-owning: the collection subscribes to each member's change
    notifications and cancels only its own subscription on removal, so a
    graphable may belong to several collections at once.
    """

    kind = GraphKind.COLLECTION

    def __init__(self, graphables: Iterable[Graphable] = (), *, name: str = "", display_name: str = "") -> None:
        self._graphs: list[Graphable] = []
        self._subscriptions: list[Subscription] = []
        self._by_name: dict[str, Graphable] = {}
        self._auto_fit_axes = True
        super().__init__(name=name, display_name=display_name)
        self.extend(graphables)

    # Shared labels read from the first visible member and write to every member.

    @property
    def x_unit(self) -> str:
        first = self._first_visible()
        return first.x_unit if first is not None else ""

    @x_unit.setter
    def x_unit(self, value: str) -> None:
        for graph in self._graphs:
            graph.x_unit = value

    @property
    def y_unit(self) -> str:
        first = self._first_visible()
        return first.y_unit if first is not None else ""

    @y_unit.setter
    def y_unit(self, value: str) -> None:
        for graph in self._graphs:
            graph.y_unit = value

    @property
    def x_name(self) -> str:
        first = self._first_visible()
        return first.x_name if first is not None else ""

    @x_name.setter
    def x_name(self, value: str) -> None:
        for graph in self._graphs:
            graph.x_name = value

    @property
    def y_name(self) -> str:
        first = self._first_visible()
        if first is None:
            return ""
        if not first.has_explicit_y_name:
            prefix = self._common_name_prefix()
            if prefix:
                return prefix.strip()
        return first.y_name

    @y_name.setter
    def y_name(self, value: str | None) -> None:
        for graph in self._graphs:
            graph.y_name = value

    @property
    def has_explicit_y_name(self) -> bool:
        first = self._first_visible()
        return first is not None and first.has_explicit_y_name

    @property
    def auto_fit_axes(self) -> bool:
        return self._auto_fit_axes

    @auto_fit_axes.setter
    def auto_fit_axes(self, value: bool) -> None:
        self._auto_fit_axes = bool(value)
        for graph in self._graphs:
            if graph.kind is GraphKind.COLLECTION:
                graph.auto_fit_axes = self._auto_fit_axes
        self.notify_changed()

    @property
    def graphables(self) -> list[Graphable]:
        return list(self._graphs)

    @graphables.setter
    def graphables(self, graphables: Iterable[Graphable]) -> None:
        incoming = list(graphables)
        _check_unique_names(incoming)
        self._detach_all()
        self.extend(incoming)

    # List protocol.

    def __len__(self) -> int:
        return len(self._graphs)

    def __iter__(self) -> Iterator[Graphable]:
        return iter(list(self._graphs))

    def __contains__(self, graphable: object) -> bool:
        return any(graph is graphable for graph in self._graphs)

    def __getitem__(self, key: int | str) -> Graphable:
        if isinstance(key, str):
            return self._by_name[_name_key(key)]
        return self._graphs[key]

    def __setitem__(self, key: int | str, graphable: Graphable) -> None:
        index = self._position_of_name(key) if isinstance(key, str) else range(len(self._graphs))[key]
        old = self._graphs[index]
        self._check_name(graphable, replacing=old)
        self._subscriptions[index].cancel()
        self._unindex(old)
        self._graphs[index] = graphable
        self._subscriptions[index] = graphable.subscribe(self._child_changed)
        self._index(graphable)
        self._structure_changed()

    def __delitem__(self, index: int) -> None:
        self.pop(index)

    def append(self, graphable: Graphable) -> None:
        self.insert(len(self._graphs), graphable)

    def extend(self, graphables: Iterable[Graphable]) -> None:
        incoming = list(graphables)
        _check_unique_names(incoming)
        for graphable in incoming:
            self._check_name(graphable)
        for graphable in incoming:
            self._attach(len(self._graphs), graphable)
        self._structure_changed()

    def insert(self, index: int, graphable: Graphable) -> None:
        self._attach(index, graphable)
        self._structure_changed()

    def remove(self, graphable: Graphable) -> None:
        self.pop(self.index(graphable))

    def pop(self, index: int = -1) -> Graphable:
        graphable = self._graphs.pop(index)
        self._subscriptions.pop(index).cancel()
        self._unindex(graphable)
        self._structure_changed()
        return graphable

    def clear(self) -> None:
        self._detach_all()
        self._structure_changed()

    def index(self, graphable: Graphable) -> int:
        for i, graph in enumerate(self._graphs):
            if graph is graphable:
                return i
        raise ValueError(f"{graphable!r} is not in the collection")

    def find(self, predicate: Callable[[Graphable], bool]) -> Graphable | None:
        return next((graph for graph in self._graphs if predicate(graph)), None)

    def find_all(self, predicate: Callable[[Graphable], bool]) -> list[Graphable]:
        return [graph for graph in self._graphs if predicate(graph)]

    def set_visibility(self, visible: bool) -> None:
        for graph in list(self._graphs):
            graph.visible = visible

    def set_visibility_except(self, visible: bool, name: str) -> None:
        self.set_visibility(visible)
        self[name].visible = not visible

    # Membership bookkeeping.

    def _attach(self, index: int, graphable: Graphable) -> None:
        self._check_name(graphable)
        self._graphs.insert(index, graphable)
        self._subscriptions.insert(index, graphable.subscribe(self._child_changed))
        self._index(graphable)

    def _detach_all(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._graphs.clear()
        self._subscriptions.clear()
        self._by_name.clear()

    def _check_name(self, graphable: Graphable, replacing: Graphable | None = None) -> None:
        if graphable is self:
            raise GraphDataError("a collection cannot contain itself")
        if not graphable.name:
            return
        existing = self._by_name.get(_name_key(graphable.name))
        if existing is not None and existing is not replacing:
            raise GraphDataError(f"a graphable named {graphable.name!r} is already in the collection")

    def _index(self, graphable: Graphable) -> None:
        if graphable.name:
            self._by_name[_name_key(graphable.name)] = graphable

    def _unindex(self, graphable: Graphable) -> None:
        if graphable.name and self._by_name.get(_name_key(graphable.name)) is graphable:
            del self._by_name[_name_key(graphable.name)]

    def _position_of_name(self, name: str) -> int:
        return self.index(self._by_name[_name_key(name)])

    def _first_visible(self) -> Graphable | None:
        return next((graph for graph in self._graphs if graph.visible), None)

    # Change propagation.

    def notify_changed(self) -> None:
        self.recalculate_bounds()
        self.values_changed.emit(ValuesChanged(self))

    def _structure_changed(self) -> None:
        self.notify_changed()

    def _child_changed(self, event: ValuesChanged) -> None:
        if self.recalculate_bounds():
            self.values_changed.emit(ValuesChanged(self))

    # Aggregation.

    def _contribution(self, graph: Graphable, running: Bounds) -> Bounds:
        if self._auto_fit_axes:
            return graph.auto_bounds(running)
        return graph.scaled_bounds()

    def _aggregate(self) -> Bounds:
        running = UNSET
        for graph in self._graphs:
            if graph.visible:
                running = running.include(self._contribution(graph, running))
        return running.collapsed()

    def recalculate_bounds(self) -> bool:
        """Re-aggregate member bounds; returns whether the collection bounds changed."""
        previous = self._bounds
        self._bounds = self._aggregate()
        changed = not previous.same_as(self._bounds)
        if changed:
            LOGGER.debug("collection %r bounds -> %s", self.name, self._bounds)
        return changed

    def auto_bounds(self, running: Bounds) -> Bounds:
        return self.scaled_bounds()

    # Queries.

    def has_values(self) -> bool:
        return len(self._graphs) > 0

    def value_at(
        self,
        x: float,
        y: float,
        width: float | None = None,
        height: float | None = None,
        index: int | None = None,
    ) -> float:
        if index is None:
            index = next((i for i, graph in enumerate(self._graphs) if graph.visible), 0)
        if index < 0 or index >= len(self._graphs):
            return math.nan
        width, height = self._extents(width, height)
        return self._graphs[index].value_at(x, y, width=width, height=height)

    def describe_at(
        self,
        x: float,
        y: float,
        width: float | None = None,
        height: float | None = None,
        with_name: bool = False,
        index: int = -1,
    ) -> str:
        if not self._graphs:
            return ""
        width, height = self._extents(width, height)
        if index >= 0:
            if index >= len(self._graphs):
                return ""
            return self._graphs[index].describe_at(x, y, width=width, height=height, with_name=with_name)

        if sum(1 for graph in self._graphs if graph.visible) > 1:
            with_name = True
        readings = [
            graph.describe_at(x, y, width=width, height=height, with_name=with_name)
            for graph in self._graphs
            if graph.visible and graph.display_value
        ]
        text = "\n".join(reading for reading in readings if reading)
        if with_name:
            prefix = self._common_name_prefix()
            if prefix:
                return text.replace(prefix, "")
        return text

    def _extents(self, width: float | None, height: float | None) -> tuple[float, float]:
        return (
            self.bounds.width if width is None else width,
            self.bounds.height if height is None else height,
        )

    def _common_name_prefix(self) -> str:
        visible = [graph.name for graph in self._graphs if graph.visible]
        if len(visible) < 2:
            return ""
        prefix = os.path.commonprefix(visible[:2])
        if prefix.endswith("("):
            prefix = prefix[:-1]
        if not all(name.startswith(prefix) for name in visible[2:]):
            return ""
        return prefix


class GraphableCollection3(GraphableCollection):
    """Collection that also aggregates z bounds and a dominant color map."""

    def __init__(self, graphables: Iterable[Graphable] = (), *, name: str = "", display_name: str = "") -> None:
        self._zmin = math.nan
        self._zmax = math.nan
        self._has_z = False
        self._dominant: ColorMap = JET_DARK
        self._dominant_index = -1
        self._z_unit = ""
        super().__init__(graphables, name=name, display_name=display_name)

    @property
    def zmin(self) -> float:
        return self._zmin

    @property
    def zmax(self) -> float:
        return self._zmax

    @property
    def dominant_color_map(self) -> ColorMap:
        return self._dominant

    @property
    def dominant_index(self) -> int:
        """Position of the member supplying the dominant color map, or -1."""
        return self._dominant_index

    @property
    def z_unit(self) -> str:
        graph = self._first_with_z()
        return graph.z_unit if graph is not None else self._z_unit

    @z_unit.setter
    def z_unit(self, value: str) -> None:
        self._z_unit = value
        for graph in self._graphs:
            if graph.z_bounds() is not None:
                graph.z_unit = value

    @property
    def z_name(self) -> str:
        graph = self._first_with_z()
        return graph.z_name if graph is not None else ""

    @z_name.setter
    def z_name(self, value: str | None) -> None:
        for graph in self._graphs:
            if graph.z_bounds() is not None:
                graph.z_name = value

    def z_bounds(self) -> tuple[float, float] | None:
        return (self._zmin, self._zmax) if self._has_z else None

    def z_color_map(self) -> ColorMap:
        return self._dominant

    def color_map_for(self, graphable: Graphable) -> ColorMap:
        """A member's own color map, or the dominant one when it has none."""
        return graphable.color if graphable.color is not None else self._dominant

    def _first_with_z(self) -> Graphable | None:
        return next((g for g in self._graphs if g.visible and g.z_bounds() is not None), None)

    def recalculate_bounds(self) -> bool:
        previous = (self._bounds, self._zmin, self._zmax)
        z_range = (math.nan, math.nan)
        has_z = False
        dominant: ColorMap | None = None
        dominant_index = -1
        for i, graph in enumerate(self._graphs):
            if not graph.visible:
                continue
            graph_z = graph.z_bounds()
            if graph_z is None:
                continue
            z_range = include_range(z_range, graph_z)
            has_z = True
            if dominant is None:
                dominant = graph.z_color_map()
                dominant_index = i

        self._bounds = self._aggregate()
        zmin, zmax = z_range
        if math.isnan(zmin) or math.isnan(zmax):
            zmin = zmax = 0.0
        self._zmin = zmin
        self._zmax = zmax
        self._has_z = has_z
        self._dominant = dominant if dominant is not None else JET_DARK
        self._dominant_index = dominant_index

        changed = not (
            previous[0].same_as(self._bounds) and _same(previous[1], zmin) and _same(previous[2], zmax)
        )
        if changed:
            LOGGER.debug("collection %r bounds -> %s, z [%s, %s]", self.name, self._bounds, zmin, zmax)
        return changed


def _check_unique_names(graphables: list[Graphable]) -> None:
    seen: set[str] = set()
    for graphable in graphables:
        if not graphable.name:
            continue
        key = _name_key(graphable.name)
        if key in seen:
            raise GraphDataError(f"duplicate graphable name {graphable.name!r}")
        seen.add(key)


def _name_key(name: str) -> str:
    return name.casefold()


def _same(a: float, b: float) -> bool:
    return a == b or (math.isnan(a) and math.isnan(b))
