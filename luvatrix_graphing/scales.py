from __future__ import annotations

from decimal import Decimal, InvalidOperation
import math
from typing import Sequence

import numpy as np


def format_tick(value: float, *, step: float | None = None) -> str:
    if not math.isfinite(value):
        return str(value)
    if step is not None and math.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    magnitude = abs(value)
    tiny_step = step is not None and 0 < abs(step) < 1e-4
    if magnitude != 0 and (magnitude >= 1e6 or magnitude < 1e-6 or tiny_step):
        return f"{value:.4e}"

    exact = Decimal(repr(float(value)))
    try:
        rounded = exact.quantize(Decimal(1).scaleb(-_decimals_from_step(step)))
    except InvalidOperation:
        rounded = exact
    text = format(rounded, "f")
    if "." in text:
        # 30 stays 30, 2.50 becomes 2.5.
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_ticks(ticks: Sequence[float] | np.ndarray, *, step: float | None = None) -> list[str]:
    values = np.asarray(ticks, dtype=np.float64)
    if values.size == 0:
        return []
    if step is None and values.size > 1:
        step = float(abs(values[1] - values[0]))
    return [format_tick(float(v), step=step) for v in values]


def format_value(value: float, value_format: str = "g") -> str:
    return format(float(value), value_format)


def pixel_to_value(pixel: float, extent_px: int, vmin: float, vmax: float) -> float:
    """Map a pixel index in ``[0, extent_px - 1]`` onto ``[vmin, vmax]``."""
    if extent_px <= 1:
        return vmin
    return float(pixel) / float(extent_px - 1) * (vmax - vmin) + vmin


def value_to_pixel(value: float, extent_px: int, vmin: float, vmax: float) -> int:
    if extent_px <= 1 or vmax == vmin:
        return 0
    px = int(np.rint((float(value) - vmin) / (vmax - vmin) * float(extent_px - 1)))
    return min(max(px, 0), extent_px - 1)


def _decimals_from_step(step: float | None) -> int:
    if step is None or step <= 0 or not math.isfinite(step):
        return 6
    d = Decimal(repr(float(step))).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
