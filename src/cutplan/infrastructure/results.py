"""Result of a packing run, as handed to callers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from cutplan.domain.entities import Bin, Box, PackedBin
from cutplan.domain.value_objects import WarningCode
from cutplan.infrastructure.packer import BinStats, GlobalStats, Packer


@dataclass(frozen=True)
class PackingResult:
    """Complete layout chosen by the engine.

    Attributes:
        packed_bins: Bins in the order they were filled.
        stats: Per-bin statistics, aligned with ``packed_bins``.
        gstat: Cumulative statistics of the whole chain.
        unplaced_boxes: Valid boxes no bin could take.
        invalid_boxes: Boxes larger than every usable bin.
        invalid_bins: Offcuts that could not host any box.
        warnings: Input problems reported while registering boxes and bins.
    """

    packed_bins: tuple[PackedBin, ...]
    stats: tuple[BinStats, ...]
    gstat: GlobalStats
    unplaced_boxes: tuple[Box, ...] = ()
    invalid_boxes: tuple[Box, ...] = ()
    invalid_bins: tuple[Bin, ...] = ()
    warnings: tuple[WarningCode, ...] = ()

    @classmethod
    def from_chain(
        cls,
        chain: Sequence[Packer],
        warnings: Sequence[WarningCode] = (),
    ) -> PackingResult:
        """Build a result from packers ordered root first.

        Raises:
            ValueError: If the chain is empty or contains an unpacked packer.
        """
        if not chain:
            raise ValueError("Cannot build a result from an empty chain")
        packed_bins: list[PackedBin] = []
        stats: list[BinStats] = []
        for packer in chain:
            if packer.packed_bin is None or packer.stat is None:
                raise ValueError("Every packer of the chain must be packed")
            packed_bins.append(packer.packed_bin)
            stats.append(packer.stat)
        last = chain[-1]
        return cls(
            packed_bins=tuple(packed_bins),
            stats=tuple(stats),
            gstat=last.gstat,
            unplaced_boxes=tuple(last.unplaced_boxes),
            invalid_boxes=tuple(last.invalid_boxes),
            invalid_bins=tuple(last.invalid_bins),
            warnings=tuple(warnings),
        )

    @property
    def total_bins(self) -> int:
        return len(self.packed_bins)

    @property
    def total_boxes_placed(self) -> int:
        return sum(packed.box_count for packed in self.packed_bins)

    @property
    def efficiency(self) -> float:
        """Placed area over usable area, across all bins."""
        usable = sum(packed.bin.usable_area for packed in self.packed_bins)
        if usable <= 0:
            return 0.0
        return sum(packed.used_area for packed in self.packed_bins) / usable

    @property
    def waste_percentage(self) -> float:
        if not self.packed_bins:
            return 0.0
        return (1 - self.efficiency) * 100
