from .base import GraphKind, Graphable, Graphable3
from .contour import ContourMask
from .metadata import SeriesWithMetadata
from .scatter3 import ScatterLine3
from .series import Series
from .surface import GriddedSurface

__all__ = [
    "ContourMask",
    "GraphKind",
    "Graphable",
    "Graphable3",
    "GriddedSurface",
    "ScatterLine3",
    "Series",
    "SeriesWithMetadata",
]
