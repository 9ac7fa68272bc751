"""Unit tests for spatial entities and packing options."""

import pytest

from cutplan.domain import (
    Bin,
    BinType,
    Box,
    Cut,
    GroupedBox,
    Leftover,
    PackedBin,
    PackingOptions,
    PlacedBox,
    Stacking,
)


class TestBox:
    """Tests for Box."""

    def test_area_and_perimeter(self) -> None:
        box = Box(40, 30)
        assert box.area == 1200
        assert box.perimeter == 140

    @pytest.mark.parametrize("length,width", [(0, 10), (10, 0), (-1, 5)])
    def test_rejects_non_positive_dimensions(self, length: float, width: float) -> None:
        with pytest.raises(ValueError, match="positive"):
            Box(length, width)

    def test_fits_into_with_rotation(self) -> None:
        box = Box(50, 20)
        assert box.fits_into(50, 20)
        assert box.fits_into(20, 50)
        assert not box.fits_into(40, 40)

    def test_non_rotatable_box_keeps_orientation(self) -> None:
        box = Box(50, 20, rotatable=False)
        assert box.fits_into(60, 30)
        assert not box.fits_into(20, 50)

    def test_fits_into_tolerates_rounding(self) -> None:
        assert Box(10.000001, 5).fits_into(10, 5)

    def test_orientations(self) -> None:
        assert Box(50, 20).orientations() == [(50, 20, False), (20, 50, True)]
        assert Box(50, 20, rotatable=False).orientations() == [(50, 20, False)]
        assert Box(30, 30).orientations() == [(30, 30, False)]

    def test_payload_is_not_compared(self) -> None:
        assert Box(10, 5, data="a") == Box(10, 5, data="b")


class TestGroupedBox:
    """Tests for GroupedBox strips."""

    def test_length_stacking_extends_length(self) -> None:
        group = GroupedBox((Box(100, 50), Box(100, 50), Box(100, 50)), Stacking.LENGTH, kerf=3)
        assert group.length == 306
        assert group.width == 50
        assert group.area == 15000

    def test_width_stacking_extends_width(self) -> None:
        group = GroupedBox((Box(100, 50), Box(100, 50)), Stacking.WIDTH)
        assert group.length == 100
        assert group.width == 100

    def test_group_is_not_rotatable(self) -> None:
        group = GroupedBox((Box(100, 50), Box(100, 50)), Stacking.LENGTH)
        assert not group.rotatable
        assert group.orientations() == [(200, 50, False)]
        assert not group.fits_into(50, 200)

    def test_member_offsets(self) -> None:
        a, b = Box(100, 50, box_id=0), Box(100, 50, box_id=1)
        group = GroupedBox((a, b), Stacking.WIDTH, kerf=2)
        assert group.member_offsets() == [(a, 0.0, 0.0, False), (b, 0.0, 52.0, False)]

    def test_turned_member_uses_swapped_size(self) -> None:
        a, b = Box(300, 200, box_id=0), Box(200, 300, box_id=1)
        group = GroupedBox((a, b), Stacking.LENGTH, kerf=2, turned=(False, True))
        assert (group.length, group.width) == (602, 200)
        assert group.member_offsets() == [(a, 0.0, 0.0, False), (b, 302.0, 0.0, True)]

    def test_turned_flags_match_members(self) -> None:
        with pytest.raises(ValueError, match="turned"):
            GroupedBox((Box(300, 200), Box(200, 300)), Stacking.LENGTH, turned=(True,))

    def test_perimeter_of_strip(self) -> None:
        group = GroupedBox((Box(100, 50), Box(100, 50)), Stacking.LENGTH)
        assert group.perimeter == 500

    def test_requires_members_and_axis(self) -> None:
        with pytest.raises(ValueError):
            GroupedBox((), Stacking.LENGTH)
        with pytest.raises(ValueError):
            GroupedBox((Box(1, 1),), Stacking.NONE)


class TestBin:
    """Tests for Bin."""

    def test_usable_dimensions(self) -> None:
        bin_ = Bin(1000, 500, trim=10)
        assert bin_.usable_length == 980
        assert bin_.usable_width == 480
        assert bin_.usable_area == 980 * 480

    def test_usable_area_is_zero_when_trim_consumes_bin(self) -> None:
        assert Bin(20, 20, trim=10).usable_area == 0.0

    def test_defaults(self) -> None:
        bin_ = Bin(10, 10)
        assert bin_.bin_type == BinType.USER_DEFINED
        assert bin_.index == -1

    def test_with_index_returns_copy(self) -> None:
        bin_ = Bin(10, 10)
        indexed = bin_.with_index(4)
        assert indexed.index == 4
        assert bin_.index == -1

    def test_usable_leftover_starts_at_trim(self) -> None:
        assert Bin(100, 50, trim=5).usable_leftover() == Leftover(5, 5, 90, 40)

    def test_rejects_invalid_values(self) -> None:
        with pytest.raises(ValueError):
            Bin(0, 10)
        with pytest.raises(ValueError):
            Bin(10, 10, trim=-1)


class TestLeftoverAndCut:
    """Tests for Leftover and Cut."""

    def test_can_host(self) -> None:
        leftover = Leftover(0, 0, 100, 50)
        assert leftover.can_host(100, 50)
        assert not leftover.can_host(50, 100)
        assert leftover.area == 5000

    def test_cut_end_points(self) -> None:
        assert (Cut(10, 20, 30, is_horizontal=True).x_end, Cut(10, 20, 30, True).y_end) == (40, 20)
        vertical = Cut(10, 20, 30, is_horizontal=False)
        assert (vertical.x_end, vertical.y_end) == (10, 50)


class TestPlacedAndPackedBin:
    """Tests for PlacedBox and PackedBin."""

    def test_rotated_dimensions(self) -> None:
        placed = PlacedBox(Box(40, 10), x=5, y=5, rotated=True)
        assert placed.placed_length == 10
        assert placed.placed_width == 40
        assert placed.right_edge == 15
        assert placed.top_edge == 45

    def test_rejects_negative_position(self) -> None:
        with pytest.raises(ValueError):
            PlacedBox(Box(1, 1), x=-1, y=0)

    def test_efficiency(self) -> None:
        packed = PackedBin(
            bin=Bin(100, 100),
            placements=(PlacedBox(Box(50, 50), 0, 0), PlacedBox(Box(50, 50), 50, 0)),
            cuts=(),
            leftovers=(),
        )
        assert packed.used_area == 5000
        assert packed.efficiency == pytest.approx(0.5)
        assert packed.box_count == 2


class TestPackingOptions:
    """Tests for PackingOptions validation."""

    def test_defaults_have_no_base_stock(self) -> None:
        options = PackingOptions()
        assert not options.has_base_stock
        assert options.timeout == 30.0

    def test_base_usable_dimensions(self) -> None:
        options = PackingOptions(trim_size=10, base_length=2800, base_width=2070)
        assert options.has_base_stock
        assert options.base_usable_length == 2780
        assert options.base_usable_width == 2050

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"trim_size": -1}, "Trim size"),
            ({"saw_kerf": -1}, "Saw kerf"),
            ({"base_length": -1}, "Base stock"),
            ({"timeout": -1}, "Timeout"),
        ],
    )
    def test_rejects_negative_values(self, kwargs: dict, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            PackingOptions(**kwargs)
