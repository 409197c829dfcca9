from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Callable, Generic, Literal, TypeVar

from luvatrix_graphing.errors import AxisLimitError


AxisName = Literal["x", "y", "z"]
AXIS_NAMES: tuple[AxisName, ...] = ("x", "y", "z")

E = TypeVar("E")


@dataclass(frozen=True)
class ValuesChanged:
    source: Any


@dataclass(frozen=True)
class AxesChanged:
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    zmin: float = math.nan
    zmax: float = math.nan


@dataclass
class AxesChangeRequest:
    """Pinned-limit request; subscribers may adjust ``min``/``max`` before it is stored."""

    axis_index: int
    min: float
    max: float

    def __post_init__(self) -> None:
        self.axis_index = resolve_axis_index(self.axis_index)
        _require_real_limit(self.min, "min")
        _require_real_limit(self.max, "max")

    @property
    def axis(self) -> AxisName:
        return AXIS_NAMES[self.axis_index]


@dataclass(frozen=True)
class ExternalValueChange:
    axis_index: int
    min: float
    max: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "axis_index", resolve_axis_index(self.axis_index))
        _require_real_limit(self.min, "min")
        _require_real_limit(self.max, "max")

    @property
    def axis(self) -> AxisName:
        return AXIS_NAMES[self.axis_index]


def resolve_axis_index(axis: int | str) -> int:
    if isinstance(axis, str):
        key = axis.strip().lower()
        if key not in AXIS_NAMES:
            raise AxisLimitError(f"axis must be 'x', 'y', or 'z': {axis!r}")
        return AXIS_NAMES.index(key)  # type: ignore[arg-type]
    if isinstance(axis, bool) or not isinstance(axis, int):
        raise AxisLimitError(f"axis must be an index or name: {axis!r}")
    if axis < 0 or axis > 2:
        raise AxisLimitError(f"axis index must be between 0 and 2, inclusive: {axis}")
    return axis


def _require_real_limit(value: float, label: str) -> None:
    if not math.isfinite(value):
        raise AxisLimitError(f"axis {label} must be a real number: {value!r}")


class Subscription:
    """Handle returned by :meth:`ChangeNotifier.subscribe`; ``cancel`` is idempotent."""

    def __init__(self, notifier: "ChangeNotifier[Any]", callback: Callable[[Any], None]) -> None:
        self._notifier: ChangeNotifier[Any] | None = notifier
        self.callback = callback

    @property
    def active(self) -> bool:
        return self._notifier is not None

    def cancel(self) -> None:
        notifier = self._notifier
        if notifier is None:
            return
        self._notifier = None
        notifier._discard(self)


class ChangeNotifier(Generic[E]):
    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: Callable[[E], None]) -> Subscription:
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def emit(self, event: E) -> None:
        # Snapshot so callbacks may cancel or subscribe while we iterate.
        for subscription in list(self._subscriptions):
            if subscription.active:
                subscription.callback(event)

    def _discard(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
