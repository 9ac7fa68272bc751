"""Infrastructure layer - packing algorithms, search engine and output."""

from .arena import PackerArena
from .deadline import Deadline
from .diagram import BinDiagramRenderer
from .formatters import (
    JsonExporter,
    PackingResultFormatter,
    format_packer_line,
    format_packers,
)
from .pack_engine import PackEngine
from .packer import (
    BinStats,
    GlobalStats,
    Packer,
    PackingInternalError,
    group_boxes,
    presort_items,
    score_fit,
    split_horizontally,
)
from .ranking import filter_best_packers, rank_by
from .results import PackingResult

__all__ = [
    "BinDiagramRenderer",
    "BinStats",
    "Deadline",
    "GlobalStats",
    "JsonExporter",
    "PackEngine",
    "Packer",
    "PackerArena",
    "PackingInternalError",
    "PackingResult",
    "PackingResultFormatter",
    "filter_best_packers",
    "format_packer_line",
    "format_packers",
    "group_boxes",
    "presort_items",
    "rank_by",
    "score_fit",
    "split_horizontally",
]
