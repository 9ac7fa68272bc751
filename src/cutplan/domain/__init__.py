"""Domain layer - spatial entities, options and the signature space."""

from .entities import Bin, Box, Cut, GroupedBox, Leftover, PackedBin, PlacedBox
from .options import PackingOptions
from .signatures import (
    Signature,
    make_signatures,
    make_signatures_large,
    make_signatures_medium,
    stacking_variants,
)
from .value_objects import (
    BEST_X_LARGE,
    BEST_X_SMALL,
    EPS,
    BinType,
    ErrorCode,
    OptimizationLevel,
    PackStatus,
    Presort,
    Score,
    Split,
    Stacking,
    StackingPreference,
    WarningCode,
)

__all__ = [
    "BEST_X_LARGE",
    "BEST_X_SMALL",
    "Bin",
    "BinType",
    "Box",
    "Cut",
    "EPS",
    "ErrorCode",
    "GroupedBox",
    "Leftover",
    "OptimizationLevel",
    "PackStatus",
    "PackedBin",
    "PackingOptions",
    "PlacedBox",
    "Presort",
    "Score",
    "Signature",
    "Split",
    "Stacking",
    "StackingPreference",
    "WarningCode",
    "make_signatures",
    "make_signatures_large",
    "make_signatures_medium",
    "stacking_variants",
]
