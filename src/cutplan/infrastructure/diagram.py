"""SVG rendering of packed bins.

Each bin is drawn with its trim margin, leftovers, placed boxes and the
guillotine cuts. Bin coordinates have their origin at the lower left
corner; SVG coordinates grow downwards, so y is flipped when drawing.
"""

from __future__ import annotations

from xml.sax.saxutils import escape

from cutplan.domain.entities import Cut, Leftover, PackedBin, PlacedBox
from cutplan.infrastructure.packer import BinStats
from cutplan.infrastructure.results import PackingResult


class BinDiagramRenderer:
    """Renders cutting diagrams in SVG format.

    Attributes:
        scale: Pixels per length unit.
        box_fill: Fill color for placed boxes.
        box_stroke: Stroke color for box outlines.
        leftover_fill: Fill color for leftovers.
        cut_stroke: Stroke color for cuts.
        text_color: Color for labels and dimensions.
        show_cuts: Whether to draw cut lines.
        show_labels: Whether to print box labels and dimensions.
    """

    def __init__(
        self,
        scale: float = 0.5,
        box_fill: str = "#ADD8E6",  # Light blue
        box_stroke: str = "#000000",
        leftover_fill: str = "#D3D3D3",  # Light gray
        cut_stroke: str = "#CC0000",
        text_color: str = "#000000",
        show_cuts: bool = True,
        show_labels: bool = True,
    ) -> None:
        self.scale = scale
        self.box_fill = box_fill
        self.box_stroke = box_stroke
        self.leftover_fill = leftover_fill
        self.cut_stroke = cut_stroke
        self.text_color = text_color
        self.show_cuts = show_cuts
        self.show_labels = show_labels

    def render_svg(
        self,
        packed: PackedBin,
        stat: BinStats,
        number: int = 1,
        total_bins: int = 1,
    ) -> str:
        """Generate the SVG diagram of one bin.

        Args:
            packed: Layout of the bin.
            stat: Statistics of the bin, shown in the header.
            number: One-based position of the bin in the result.
            total_bins: Number of bins in the result.
        """
        bin_ = packed.bin
        header_height = 30
        svg_width = bin_.length * self.scale
        svg_height = bin_.width * self.scale + header_height

        parts: list[str] = [
            f'<svg width="{svg_width}" height="{svg_height}" '
            f'xmlns="http://www.w3.org/2000/svg">',
            f'  <rect x="0" y="0" width="{svg_width}" height="{svg_height}" fill="white"/>',
            self._render_header(packed, stat, number, total_bins, svg_width, header_height),
            f'  <rect x="0" y="{header_height}" width="{svg_width}" '
            f'height="{bin_.width * self.scale}" fill="#f5deb3" '
            f'stroke="{self.box_stroke}" stroke-width="2"/>',
        ]

        if bin_.trim > 0:
            trim = bin_.trim * self.scale
            parts.append(
                f'  <rect x="{trim}" y="{header_height + trim}" '
                f'width="{bin_.usable_length * self.scale}" '
                f'height="{bin_.usable_width * self.scale}" '
                f'fill="none" stroke="#999999" stroke-dasharray="5,5"/>'
            )

        for leftover in packed.leftovers:
            parts.append(self._render_leftover(leftover, packed, header_height))
        for placed in packed.placements:
            parts.append(self._render_box(placed, packed, header_height))
        if self.show_cuts:
            for cut in packed.cuts:
                parts.append(self._render_cut(cut, packed, header_height))

        parts.append("</svg>")
        return "\n".join(parts)

    def render_all_svg(self, result: PackingResult) -> list[str]:
        """Generate one SVG diagram per packed bin."""
        total = result.total_bins
        return [
            self.render_svg(packed, stat, number, total)
            for number, (packed, stat) in enumerate(
                zip(result.packed_bins, result.stats), start=1
            )
        ]

    def _flip(self, packed: PackedBin, y: float, height: float, header: float) -> float:
        return header + (packed.bin.width - y - height) * self.scale

    def _render_header(
        self,
        packed: PackedBin,
        stat: BinStats,
        number: int,
        total_bins: int,
        svg_width: float,
        header_height: float,
    ) -> str:
        bin_ = packed.bin
        text = (
            f"Bin {number} of {total_bins} - {bin_.length:g} x {bin_.width:g} "
            f"- {stat.efficiency * 100:.1f}% used - {stat.nb_cuts} cuts"
        )
        return (
            f'  <rect x="0" y="0" width="{svg_width}" height="{header_height}" '
            f'fill="#E0E0E0"/>\n'
            f'  <text x="10" y="{header_height - 8}" '
            f'font-family="Arial, sans-serif" font-size="14" '
            f'fill="{self.text_color}">{escape(text)}</text>'
        )

    def _render_leftover(self, leftover: Leftover, packed: PackedBin, header: float) -> str:
        x = leftover.x * self.scale
        y = self._flip(packed, leftover.y, leftover.width, header)
        return (
            f'  <rect x="{x}" y="{y}" width="{leftover.length * self.scale}" '
            f'height="{leftover.width * self.scale}" fill="{self.leftover_fill}" '
            f'fill-opacity="0.6"/>'
        )

    def _render_box(self, placed: PlacedBox, packed: PackedBin, header: float) -> str:
        x = placed.x * self.scale
        y = self._flip(packed, placed.y, placed.placed_width, header)
        w = placed.placed_length * self.scale
        h = placed.placed_width * self.scale

        rect = (
            f'    <rect x="{x}" y="{y}" width="{w}" height="{h}" '
            f'fill="{self.box_fill}" stroke="{self.box_stroke}"/>'
        )
        font_size = min(12, min(w, h) / 6)
        if not self.show_labels or font_size < 6:
            return "  <g>\n" + rect + "\n  </g>"

        box = placed.box
        label = str(box.data) if box.data is not None else f"#{box.box_id}"
        dims = f"{box.length:g} x {box.width:g}"
        if placed.rotated:
            dims += " (R)"
        text_x = x + w / 2
        text_y = y + h / 2
        return "\n".join([
            "  <g>",
            rect,
            f'    <text x="{text_x}" y="{text_y - font_size / 2}" '
            f'text-anchor="middle" font-family="Arial, sans-serif" '
            f'font-size="{font_size}" fill="{self.text_color}">{escape(label)}</text>',
            f'    <text x="{text_x}" y="{text_y + font_size / 2 + 2}" '
            f'text-anchor="middle" font-family="Arial, sans-serif" '
            f'font-size="{font_size * 0.8}" fill="{self.text_color}">{dims}</text>',
            "  </g>",
        ])

    def _render_cut(self, cut: Cut, packed: PackedBin, header: float) -> str:
        x1 = cut.x * self.scale
        x2 = cut.x_end * self.scale
        y1 = self._flip(packed, cut.y, 0.0, header)
        y2 = self._flip(packed, cut.y_end, 0.0, header)
        width = 2 if cut.is_through else 1
        return (
            f'  <line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" '
            f'stroke="{self.cut_stroke}" stroke-width="{width}"/>'
        )
