from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np

from luvatrix_graphing.errors import GraphDataError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def as_vector(value: Any, *, label: str) -> np.ndarray:
    """Coerce a 1-D input to a float64 copy; ``None`` entries become NaN."""
    if pd is not None and isinstance(value, pd.DataFrame):
        if len(value.columns) != 1:
            raise GraphDataError(f"{label} DataFrame input must contain exactly one column")
        value = value[value.columns[0]]
    arr = _coerce_ndarray(_to_numpy(value, label=label), label=label)
    if arr.ndim != 1:
        raise GraphDataError(f"{label} must be 1-D, got shape {arr.shape}")
    return arr


def as_points(value: Any, *, dims: int, label: str) -> np.ndarray:
    """Coerce an ``(N, dims)`` point buffer; an empty input yields shape ``(0, dims)``."""
    arr = _coerce_ndarray(_to_numpy(value, label=label), label=label)
    if arr.size == 0:
        return np.empty((0, dims), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != dims:
        raise GraphDataError(f"{label} must have shape (N, {dims}), got {arr.shape}")
    return arr


def as_grid(value: Any, *, label: str) -> np.ndarray:
    arr = _coerce_ndarray(_to_numpy(value, label=label), label=label)
    if arr.size == 0:
        return arr if arr.ndim == 2 else np.empty((0, 0), dtype=np.float64)
    if arr.ndim != 2:
        raise GraphDataError(f"{label} must be 2-D, got shape {arr.shape}")
    return arr


def as_channels(value: Any, *, length: int, label: str) -> np.ndarray:
    """Coerce per-point metadata channels to ``(C, length)``; every channel must match ``length``."""
    if value is None:
        return np.empty((0, length), dtype=np.float64)
    if isinstance(value, np.ndarray) and value.ndim == 2:
        channels = [value[i] for i in range(value.shape[0])]
    elif pd is not None and isinstance(value, pd.DataFrame):
        channels = [value[c] for c in value.columns]
    elif torch is not None and isinstance(value, torch.Tensor) and value.ndim == 2:
        channels = [value[i] for i in range(value.shape[0])]
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        channels = list(value)
    else:
        raise GraphDataError(f"unsupported {label} input type: {type(value)!r}")

    rows: list[np.ndarray] = []
    for i, channel in enumerate(channels):
        row = as_vector(channel, label=f"{label}[{i}]")
        if row.size != length:
            raise GraphDataError(f"{label}[{i}] length {row.size} does not match series length {length}")
        rows.append(row)
    if not rows:
        return np.empty((0, length), dtype=np.float64)
    return np.vstack(rows)


def _to_numpy(value: Any, *, label: str) -> np.ndarray:
    if value is None:
        raise GraphDataError(f"{label} input is required")

    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    if pd is not None and isinstance(value, (pd.Series, pd.DataFrame)):
        return value.to_numpy()

    if isinstance(value, np.ndarray):
        return value

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        try:
            return np.asarray(value, dtype=np.float64)
        except (TypeError, ValueError):
            return np.asarray(value, dtype=object)

    raise GraphDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return np.array(arr, dtype=np.float64, copy=True)

    if (
        arr.dtype == object
        and arr.ndim == 1
        and arr.size > 0
        and isinstance(arr[0], (Sequence, np.ndarray))
        and not isinstance(arr[0], str)
    ):
        raise GraphDataError(f"{label} rows must all have the same length")

    out = np.empty(arr.shape, dtype=np.float64)
    flat = out.reshape(-1)
    for i, raw in enumerate(arr.reshape(-1).tolist()):
        if raw is None:
            flat[i] = np.nan
            continue
        try:
            flat[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise GraphDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
