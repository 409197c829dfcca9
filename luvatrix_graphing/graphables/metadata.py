from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from luvatrix_graphing.adapters.normalize import as_channels
from luvatrix_graphing.colormap import ColorMap
from luvatrix_graphing.errors import GraphDataError
from luvatrix_graphing.graphables.series import Series, coerce_points
from luvatrix_graphing.scales import format_value


class SeriesWithMetadata(Series):
    """A :class:`Series` carrying parallel per-point channels.

    Channels are sampled at the segment the primary series wins, so they never
    run a lookup of their own.
    """

    def __init__(
        self,
        values: Any = (),
        x_left: float | None = None,
        x_right: float | None = None,
        *,
        metadata: Any = None,
        fields: Sequence[str] = (),
        units: Sequence[str] = (),
        formats: Sequence[str] = (),
        name: str = "",
        display_name: str = "",
        color: ColorMap | None = None,
        value_format: str | None = None,
    ) -> None:
        super().__init__(
            values,
            x_left,
            x_right,
            name=name,
            display_name=display_name,
            color=color,
            value_format=value_format,
        )
        self._metadata = as_channels(metadata, length=len(self), label="metadata")
        self.fields = list(fields)
        self.units = list(units)
        self.formats = list(formats)
        self._resize_labels(self.channel_count)

    @property
    def metadata(self) -> np.ndarray:
        return self._metadata

    @property
    def channel_count(self) -> int:
        return int(self._metadata.shape[0])

    def set_metadata(self, metadata: Any) -> None:
        self._metadata = as_channels(metadata, length=len(self), label="metadata")
        self._resize_labels(self.channel_count)
        self.notify_changed()

    def set_values(
        self,
        values: Any,
        x_left: float | None = None,
        x_right: float | None = None,
        metadata: Any = None,
    ) -> None:
        """Replace the points; channels must be re-supplied when the length changes."""
        points = coerce_points(values, x_left, x_right)
        length = points.shape[0]
        previous = self._metadata
        if metadata is not None:
            channels = as_channels(metadata, length=length, label="metadata")
        elif previous.shape[1] == length:
            channels = previous
        elif previous.shape[0] == 0:
            channels = np.empty((0, length), dtype=np.float64)
        else:
            raise GraphDataError(f"metadata length {previous.shape[1]} does not match new series length {length}")
        self._apply(points, x_left, x_right)
        self._metadata = channels
        self._resize_labels(self.channel_count)
        self.notify_changed()

    def metadata_value_at(
        self,
        x: float,
        y: float,
        channel: int,
        width: float = 1.0,
        height: float = 1.0,
    ) -> float:
        if channel < 0 or channel >= self.channel_count or not self.has_values():
            return 0.0
        return self.locate(x, y, width, height).blend(self._metadata[channel])

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
        hit = self.locate(x, y, width, height)
        lines = [self.format_reading(hit.blend(self.ys), self.value_unit, with_name)]
        for i in range(self.channel_count):
            field = f"{self.fields[i]}: " if self.fields[i] else ""
            fmt = self.formats[i] or self.value_format
            lines.append(f"{field}{format_value(hit.blend(self._metadata[i]), fmt)}{self.units[i]}")
        return "\n".join(lines)

    def _resize_labels(self, count: int) -> None:
        for labels in (self.fields, self.units, self.formats):
            del labels[count:]
            labels.extend([""] * (count - len(labels)))
