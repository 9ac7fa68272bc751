"""Enumerations and constants shared by the packing engine.

Every heuristic axis is a closed enumeration so that an invalid signature
cannot be expressed. Integer values are stable and appear in the signature
strings recorded in packer statistics.
"""

from __future__ import annotations

from enum import Enum, IntEnum

# Numeric tolerance used for dimension comparisons and rank ties.
EPS = 1e-5

# Maximum number of packers surviving a ranking round.
BEST_X_SMALL = 3
BEST_X_LARGE = 5


class BinType(str, Enum):
    """Origin of a bin.

    Attributes:
        USER_DEFINED: Offcut or sheet supplied by the caller.
        AUTO_GENERATED: New sheet cut from the configured base stock.
    """

    USER_DEFINED = "user_defined"
    AUTO_GENERATED = "auto_generated"


class OptimizationLevel(str, Enum):
    """Size of the heuristic search."""

    MEDIUM = "medium"
    ADVANCED = "advanced"


class StackingPreference(str, Enum):
    """Caller preference for grouping identical boxes.

    ``ALL`` leaves the choice open: every stacking variant is explored.
    """

    NONE = "none"
    LENGTH = "length"
    WIDTH = "width"
    ALL = "all"


class Presort(IntEnum):
    """Ordering applied to boxes before placement."""

    WIDTH_DECR = 0
    LENGTH_DECR = 1
    AREA_DECR = 2
    PERIMETER_DECR = 3
    LONGEST_SIDE_DECR = 4
    SHORTEST_SIDE_DECR = 5
    SIDE_DIFFERENCE_DECR = 6
    ALTERNATING_WIDTHS = 7


class Score(IntEnum):
    """Fit-quality rule choosing among candidate leftovers."""

    BEST_AREA_FIT = 0
    BEST_SHORT_SIDE_FIT = 1
    BEST_LONG_SIDE_FIT = 2
    WORST_AREA_FIT = 3
    WORST_SHORT_SIDE_FIT = 4
    WORST_LONG_SIDE_FIT = 5


class Split(IntEnum):
    """Rule dividing a used leftover into two new leftovers.

    A horizontal split makes the first cut along the length of the leftover
    (the upper leftover spans the full leftover length); a vertical split
    makes the first cut across it (the right leftover spans the full width).
    """

    SHORTER_LEFTOVER_AXIS = 0
    LONGER_LEFTOVER_AXIS = 1
    MINIMIZE_AREA = 2
    MAXIMIZE_AREA = 3
    HORIZONTAL_FIRST = 4
    VERTICAL_FIRST = 5
    SHORTER_AXIS = 6
    LONGER_AXIS = 7


class Stacking(IntEnum):
    """Grouping of identical boxes used by one signature."""

    NONE = 0
    LENGTH = 1
    WIDTH = 2


class ErrorCode(str, Enum):
    """Outcome of a packing run."""

    NONE = "none"
    NO_BOX = "no_box"
    NO_BIN = "no_bin"
    INVALID_INPUT = "invalid_input"
    NO_PLACEMENT_POSSIBLE = "no_placement_possible"
    TIMEOUT = "timeout"
    INTERNAL_FAULT = "internal_fault"


class WarningCode(str, Enum):
    """Non-fatal input problems collected while registering boxes and bins."""

    ILLEGAL_SIZED_BIN = "illegal_sized_bin"
    ILLEGAL_SIZED_BOX = "illegal_sized_box"


class PackStatus(Enum):
    """Result of a single packer attempt."""

    PACKED = "packed"
    NO_PLACEMENT = "no_placement"
    NO_BIN_LEFT = "no_bin_left"
    TIMEOUT = "timeout"
