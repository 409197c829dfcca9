from luvatrix_graphing.axes_controller import AxesController
from luvatrix_graphing.axis import Axis, nice_unit, nice_unit_for_span, rounded_max, rounded_min
from luvatrix_graphing.bounds import UNSET, ZERO, Bounds
from luvatrix_graphing.collection import GraphableCollection, GraphableCollection3
from luvatrix_graphing.colormap import GRAY, JET, JET_DARK, WHITE, ColorMap, solid
from luvatrix_graphing.config import DEFAULT_CONFIG, GraphingConfig
from luvatrix_graphing.errors import AxisLimitError, GraphDataError, GraphingError
from luvatrix_graphing.events import (
    AxesChanged,
    AxesChangeRequest,
    ChangeNotifier,
    ExternalValueChange,
    Subscription,
    ValuesChanged,
)
from luvatrix_graphing.graphables import (
    ContourMask,
    GraphKind,
    Graphable,
    Graphable3,
    GriddedSurface,
    ScatterLine3,
    Series,
    SeriesWithMetadata,
)

__all__ = [
    "AxesChangeRequest",
    "AxesChanged",
    "AxesController",
    "Axis",
    "AxisLimitError",
    "Bounds",
    "ChangeNotifier",
    "ColorMap",
    "ContourMask",
    "DEFAULT_CONFIG",
    "ExternalValueChange",
    "GRAY",
    "GraphDataError",
    "GraphKind",
    "Graphable",
    "Graphable3",
    "GraphableCollection",
    "GraphableCollection3",
    "GraphingConfig",
    "GraphingError",
    "GriddedSurface",
    "JET",
    "JET_DARK",
    "ScatterLine3",
    "Series",
    "SeriesWithMetadata",
    "Subscription",
    "UNSET",
    "ValuesChanged",
    "WHITE",
    "ZERO",
    "nice_unit",
    "nice_unit_for_span",
    "rounded_max",
    "rounded_min",
    "solid",
]
