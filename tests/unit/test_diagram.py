"""Unit tests for BinDiagramRenderer."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from cutplan.domain import Bin, Box, Leftover, PackedBin, PlacedBox
from cutplan.infrastructure import BinDiagramRenderer, PackingResult

SVG = "{http://www.w3.org/2000/svg}"


def _render(result: PackingResult, **kwargs) -> str:
    return BinDiagramRenderer(**kwargs).render_svg(result.packed_bins[0], result.stats[0])


class TestSvgStructure:
    """Tests for the overall SVG document."""

    def test_svg_is_valid_xml(self, labelled_result: PackingResult) -> None:
        root = ET.fromstring(_render(labelled_result))
        assert root.tag == f"{SVG}svg"

    def test_dimensions_match_bin_at_scale(self, labelled_result: PackingResult) -> None:
        root = ET.fromstring(_render(labelled_result))
        assert float(root.get("width")) == 500.0
        assert float(root.get("height")) == 280.0

    def test_custom_scale(self, labelled_result: PackingResult) -> None:
        root = ET.fromstring(_render(labelled_result, scale=1.0))
        assert float(root.get("width")) == 1000.0

    def test_header(self, labelled_result: PackingResult) -> None:
        svg = BinDiagramRenderer().render_svg(
            labelled_result.packed_bins[0], labelled_result.stats[0], 2, 3
        )
        assert "Bin 2 of 3 - 1000 x 500 - 60.0% used - 3 cuts" in svg

    def test_render_all(self, labelled_result: PackingResult) -> None:
        svgs = BinDiagramRenderer().render_all_svg(labelled_result)
        assert len(svgs) == 1
        assert "Bin 1 of 1" in svgs[0]


class TestSvgContent:
    """Tests for boxes, leftovers and cuts."""

    def test_labels_are_escaped(self, labelled_result: PackingResult) -> None:
        svg = _render(labelled_result)
        assert "A &amp; B" in svg
        texts = [t.text for t in ET.fromstring(svg).iter(f"{SVG}text")]
        assert "A & B" in texts
        assert "shelf" in texts
        assert "#2" in texts

    def test_rotated_marker(self, labelled_result: PackingResult) -> None:
        assert "300 x 200 (R)" in _render(labelled_result)

    def test_one_line_per_cut(self, labelled_result: PackingResult) -> None:
        lines = list(ET.fromstring(_render(labelled_result)).iter(f"{SVG}line"))
        assert len(lines) == 3
        assert sum(1 for line in lines if line.get("stroke-width") == "2") == 1

    def test_cuts_can_be_hidden(self, labelled_result: PackingResult) -> None:
        assert "<line" not in _render(labelled_result, show_cuts=False)

    def test_leftover_fill(self, labelled_result: PackingResult) -> None:
        svg = _render(labelled_result, leftover_fill="#123456")
        assert svg.count('fill="#123456"') == 1

    def test_y_axis_is_flipped(self, labelled_result: PackingResult) -> None:
        root = ET.fromstring(_render(labelled_result, scale=1.0))
        leftover = next(
            r for r in root.iter(f"{SVG}rect") if r.get("fill") == "#D3D3D3"
        )
        # leftover (0, 300) of height 200 sits at the top of a 500 high bin
        assert float(leftover.get("y")) == 30.0

    def test_trim_outline(self, labelled_result: PackingResult) -> None:
        packed = PackedBin(
            bin=Bin(100, 100, trim=5),
            placements=(PlacedBox(Box(10, 10), 5, 5),),
            cuts=(),
            leftovers=(Leftover(15, 5, 80, 10),),
        )
        svg = BinDiagramRenderer().render_svg(packed, labelled_result.stats[0])
        assert 'stroke-dasharray="5,5"' in svg
        assert "stroke-dasharray" not in _render(labelled_result)

    def test_small_boxes_skip_labels(self, labelled_result: PackingResult) -> None:
        svg = _render(labelled_result, scale=0.05)
        assert "shelf" not in svg
