"""Text and JSON output for packing results and the packer search tree."""

from __future__ import annotations

import json
from typing import Any, Sequence

from cutplan.domain.entities import Box, PackedBin
from cutplan.domain.value_objects import ErrorCode
from cutplan.infrastructure.arena import PackerArena
from cutplan.infrastructure.packer import BinStats, Packer
from cutplan.infrastructure.results import PackingResult

_TREE_HEADER = (
    "lvl bins  unplaced^2 eff/compact #cuts    leftover   cutlength  #thru "
    "#leftovers   signature  rank/sum"
)


def format_packer_line(packer: Packer, level: int) -> str:
    """One row of the packer tree dump."""
    stat = packer.stat
    gstat = packer.gstat
    if stat is None:
        return f"{level:>3d} (not packed) {packer.signature}"
    return (
        f"{level:>3d} "
        f"{gstat.nb_packed_bins:>4d} "
        f"{stat.area_unplaced_boxes:>11.2f} "
        f"{stat.efficiency:>4.2f}/{stat.compactness:<4.2f}  "
        f"{stat.nb_cuts:>5d} "
        f"{gstat.all_largest_area:>11.2f} "
        f"{stat.length_cuts:>11.2f} "
        f"{stat.nb_through_cuts:>6d} "
        f"{stat.nb_leftovers:>10d} "
        f"{stat.signature:>11s} "
        f"{gstat.rank:>4d}/{gstat.overall_rank:<4d}"
    )


def format_packers(packers: Sequence[Packer], arena: PackerArena) -> str:
    """Dump each packer with its chain of predecessors, root last.

    Levels count back from the given packers (level 0) to their stage 0
    root, as a debugging aid while tuning the heuristics.
    """
    if not packers:
        return "No packers."
    lines: list[str] = []
    for packer in packers:
        chain = arena.chain(packer.index) if packer.index in arena else [packer]
        for level, member in enumerate(reversed(chain)):
            lines.append(format_packer_line(member, level))
    lines.append(_TREE_HEADER)
    return "\n".join(lines)


class PackingResultFormatter:
    """Formats a packing result as a table per bin."""

    def __init__(self, show_cuts: bool = False) -> None:
        """Initialize formatter.

        Args:
            show_cuts: Whether to list every cut under each bin.
        """
        self._show_cuts = show_cuts

    def format(self, result: PackingResult) -> str:
        lines = [
            "CUTTING PLAN",
            "=" * 70,
            f"Bins used: {result.total_bins}    "
            f"Boxes placed: {result.total_boxes_placed}    "
            f"Efficiency: {result.efficiency * 100:.1f}%",
        ]

        for number, (packed, stat) in enumerate(
            zip(result.packed_bins, result.stats), start=1
        ):
            bin_ = packed.bin
            lines.append("")
            lines.append(
                f"Bin {number} [{bin_.bin_type.value} #{bin_.index}] "
                f"{bin_.length:g} x {bin_.width:g}  "
                f"efficiency {stat.efficiency * 100:.1f}%  "
                f"signature {stat.signature}"
            )
            lines.append("-" * 70)
            lines.append(
                f"{'Box':<20} {'Length':<10} {'Width':<10} {'X':<10} {'Y':<10} {'Rot'}"
            )
            for placed in packed.placements:
                label = self._label(placed.box.data, placed.box.box_id)
                lines.append(
                    f"{label:<20} {placed.placed_length:<10g} {placed.placed_width:<10g} "
                    f"{placed.x:<10g} {placed.y:<10g} {'yes' if placed.rotated else ''}"
                )
            lines.append(
                f"Cuts: {stat.nb_cuts} ({stat.nb_through_cuts} through), "
                f"total length {stat.length_cuts:g}; leftovers: {stat.nb_leftovers}"
            )
            if self._show_cuts:
                for cut in packed.cuts:
                    axis = "H" if cut.is_horizontal else "V"
                    through = " through" if cut.is_through else ""
                    lines.append(
                        f"  {axis} at ({cut.x:g}, {cut.y:g}) length {cut.length:g}{through}"
                    )

        lines.extend(self._format_boxes("UNPLACED BOXES", result.unplaced_boxes))
        lines.extend(self._format_boxes("INVALID BOXES", result.invalid_boxes))
        if result.invalid_bins:
            lines.append("")
            lines.append("INVALID BINS")
            for bin_ in result.invalid_bins:
                lines.append(f"  {bin_.length:g} x {bin_.width:g}")
        if result.warnings:
            lines.append("")
            lines.append("WARNINGS")
            for warning in result.warnings:
                lines.append(f"  {warning.value}")
        return "\n".join(lines)

    def _format_boxes(self, title: str, boxes: Sequence[Box]) -> list[str]:
        if not boxes:
            return []
        lines = ["", title]
        for box in boxes:
            label = self._label(box.data, box.box_id)
            lines.append(f"  {label:<20} {box.length:g} x {box.width:g}")
        return lines

    @staticmethod
    def _label(data: object, box_id: int) -> str:
        return str(data) if data is not None else f"#{box_id}"


class JsonExporter:
    """Exports a packing outcome as JSON."""

    def export(self, result: PackingResult | None, error_code: ErrorCode) -> str:
        """Export a run outcome as a JSON string."""
        if result is None:
            return json.dumps({"error_code": error_code.value}, indent=2)

        data = {
            "error_code": error_code.value,
            "summary": {
                "total_bins": result.total_bins,
                "boxes_placed": result.total_boxes_placed,
                "efficiency": result.efficiency,
                "total_compactness": result.gstat.total_compactness,
                "through_cuts": result.gstat.nb_through_cuts,
                "total_length_cuts": result.gstat.total_length_cuts,
            },
            "bins": [
                self._format_bin(packed, stat)
                for packed, stat in zip(result.packed_bins, result.stats)
            ],
            "unplaced_boxes": [self._format_box(b) for b in result.unplaced_boxes],
            "invalid_boxes": [self._format_box(b) for b in result.invalid_boxes],
            "invalid_bins": [
                {"length": b.length, "width": b.width} for b in result.invalid_bins
            ],
            "warnings": [w.value for w in result.warnings],
        }
        return json.dumps(data, indent=2)

    def _format_bin(self, packed: PackedBin, stat: BinStats) -> dict[str, Any]:
        return {
            "index": packed.bin.index,
            "type": packed.bin.bin_type.value,
            "length": packed.bin.length,
            "width": packed.bin.width,
            "trim": packed.bin.trim,
            "signature": stat.signature,
            "efficiency": stat.efficiency,
            "compactness": stat.compactness,
            "boxes": [
                {
                    **self._format_box(p.box),
                    "x": p.x,
                    "y": p.y,
                    "rotated": p.rotated,
                }
                for p in packed.placements
            ],
            "cuts": [
                {
                    "x": c.x,
                    "y": c.y,
                    "length": c.length,
                    "horizontal": c.is_horizontal,
                    "through": c.is_through,
                }
                for c in packed.cuts
            ],
            "leftovers": [
                {
                    "x": leftover.x,
                    "y": leftover.y,
                    "length": leftover.length,
                    "width": leftover.width,
                }
                for leftover in packed.leftovers
            ],
        }

    def _format_box(self, box: Box) -> dict[str, Any]:
        return {
            "id": box.box_id,
            "label": None if box.data is None else str(box.data),
            "length": box.length,
            "width": box.width,
            "rotatable": box.rotatable,
        }
