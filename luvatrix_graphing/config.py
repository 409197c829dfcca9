from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import os


LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "LUVATRIX_GRAPHING_"


@dataclass(frozen=True)
class GraphingConfig:
    value_format: str = "g"
    bound_margin: float = 1.05
    forced_tick_divisions: int = 10

    def __post_init__(self) -> None:
        if not math.isfinite(self.bound_margin) or self.bound_margin < 1.0:
            raise ValueError("bound_margin must be finite and >= 1")
        if self.forced_tick_divisions <= 0:
            raise ValueError("forced_tick_divisions must be > 0")
        try:
            format(1.0, self.value_format)
        except ValueError as exc:
            raise ValueError(f"invalid value_format: {self.value_format!r}") from exc

    @classmethod
    def from_env(cls, *, prefix: str = ENV_PREFIX) -> "GraphingConfig":
        defaults = cls()
        value_format = _parse_format(prefix + "VALUE_FORMAT", defaults.value_format)
        bound_margin = _parse_float(prefix + "BOUND_MARGIN", defaults.bound_margin, minimum=1.0)
        divisions = _parse_int(prefix + "FORCED_TICK_DIVISIONS", defaults.forced_tick_divisions)
        return cls(
            value_format=value_format,
            bound_margin=bound_margin,
            forced_tick_divisions=divisions,
        )


DEFAULT_CONFIG = GraphingConfig()


def _parse_format(env_var: str, default: str) -> str:
    raw = os.getenv(env_var, "").strip()
    if raw == "":
        return default
    try:
        format(1.0, raw)
    except ValueError:
        LOGGER.warning("ignoring %s=%r; not a float format string", env_var, raw)
        return default
    return raw


def _parse_float(env_var: str, default: float, *, minimum: float) -> float:
    raw = os.getenv(env_var, "").strip()
    if raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        LOGGER.warning("ignoring %s=%r; not a number", env_var, raw)
        return default
    if not math.isfinite(value) or value < minimum:
        LOGGER.warning("ignoring %s=%r; must be finite and >= %s", env_var, raw, minimum)
        return default
    return value


def _parse_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var, "").strip()
    if raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        LOGGER.warning("ignoring %s=%r; not an integer", env_var, raw)
        return default
    if value <= 0:
        LOGGER.warning("ignoring %s=%r; must be > 0", env_var, raw)
        return default
    return value
