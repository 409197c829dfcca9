from .normalize import as_channels, as_grid, as_points, as_vector

__all__ = ["as_channels", "as_grid", "as_points", "as_vector"]
