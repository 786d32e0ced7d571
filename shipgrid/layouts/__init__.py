from .builder import BoardBuilder, BuildResult, enumerate_layouts, random_layout, sample_layouts
from .builtins import builtin_layouts, classic_layout, compact_layout
from .cache import DEFAULT_PLACEMENT_CACHE, LayoutRuntime, PlacementCache
from .definition import LayoutDefinition, ShipSpec
from .placements import CellIndex, LayoutPlacement, generate_board_placements, generate_ship_placements
from .validation import validate_layout

__all__ = [
    "BoardBuilder",
    "BuildResult",
    "enumerate_layouts",
    "random_layout",
    "sample_layouts",
    "LayoutDefinition",
    "ShipSpec",
    "LayoutRuntime",
    "LayoutPlacement",
    "CellIndex",
    "PlacementCache",
    "DEFAULT_PLACEMENT_CACHE",
    "classic_layout",
    "compact_layout",
    "builtin_layouts",
    "generate_board_placements",
    "generate_ship_placements",
    "validate_layout",
]
