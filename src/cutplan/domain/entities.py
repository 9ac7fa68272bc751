"""Spatial entities of the guillotine packing model.

Lengths run along the x axis of a bin, widths along the y axis. All
positions are absolute within the bin, trim margin included, with the
origin at the lower left corner.

Boxes, bins and cuts are frozen dataclasses. Leftovers are frozen as well;
the packer replaces them rather than resizing them in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from cutplan.domain.value_objects import EPS, BinType, Stacking


@dataclass(frozen=True)
class Box:
    """A rectangular part to be cut.

    Attributes:
        length: Dimension along the bin length when not rotated.
        width: Dimension along the bin width when not rotated.
        rotatable: Whether the part may be turned by 90 degrees.
        data: Opaque caller payload, carried through untouched.
        box_id: Identity assigned by the engine in registration order.
    """

    length: float
    width: float
    rotatable: bool = True
    data: Any = field(default=None, compare=False)
    box_id: int = 0

    def __post_init__(self) -> None:
        if self.length <= 0 or self.width <= 0:
            raise ValueError("Box dimensions must be positive")

    @property
    def area(self) -> float:
        """Area of the box."""
        return self.length * self.width

    @property
    def perimeter(self) -> float:
        """Perimeter of the box."""
        return 2 * (self.length + self.width)

    def fits_into(self, length: float, width: float) -> bool:
        """Check whether the box fits a length x width envelope.

        The rotated orientation is considered only for rotatable boxes.
        """
        if self.length <= length + EPS and self.width <= width + EPS:
            return True
        return (
            self.rotatable
            and self.width <= length + EPS
            and self.length <= width + EPS
        )

    def orientations(self) -> list[tuple[float, float, bool]]:
        """Return the allowed (length, width, rotated) orientations."""
        result = [(self.length, self.width, False)]
        if self.rotatable and abs(self.length - self.width) > EPS:
            result.append((self.width, self.length, True))
        return result


@dataclass(frozen=True)
class GroupedBox:
    """Identical boxes kept side by side along one axis.

    A grouped box behaves like a single non-rotatable box whose footprint
    is the strip of its members separated by the saw kerf.

    Attributes:
        members: Boxes in the group, all with the same dimensions.
        stacking: Axis along which members are lined up.
        kerf: Saw kerf between adjacent members.
        turned: Per member, whether it is turned by 90 degrees to match
            the orientation of the first member. Empty when none is.
    """

    members: tuple[Box, ...]
    stacking: Stacking
    kerf: float = 0.0
    turned: tuple[bool, ...] = ()

    def __post_init__(self) -> None:
        if not self.members:
            raise ValueError("A grouped box needs at least one member")
        if self.stacking == Stacking.NONE:
            raise ValueError("A grouped box needs a stacking axis")
        if self.turned and len(self.turned) != len(self.members):
            raise ValueError("A grouped box needs one turned flag per member")

    @property
    def rotatable(self) -> bool:
        return False

    def _member_size(self, number: int) -> tuple[float, float]:
        member = self.members[number]
        if self.turned and self.turned[number]:
            return member.width, member.length
        return member.length, member.width

    @property
    def length(self) -> float:
        length, _ = self._member_size(0)
        if self.stacking == Stacking.LENGTH:
            n = len(self.members)
            return n * length + (n - 1) * self.kerf
        return length

    @property
    def width(self) -> float:
        _, width = self._member_size(0)
        if self.stacking == Stacking.WIDTH:
            n = len(self.members)
            return n * width + (n - 1) * self.kerf
        return width

    @property
    def area(self) -> float:
        """Area covered by the members alone, kerf excluded."""
        return sum(member.area for member in self.members)

    @property
    def perimeter(self) -> float:
        """Perimeter of the strip footprint."""
        return 2 * (self.length + self.width)

    def fits_into(self, length: float, width: float) -> bool:
        return self.length <= length + EPS and self.width <= width + EPS

    def orientations(self) -> list[tuple[float, float, bool]]:
        return [(self.length, self.width, False)]

    def member_offsets(self) -> list[tuple[Box, float, float, bool]]:
        """Return each member with its offset from the group origin.

        The last element of each tuple tells whether the member is turned.
        """
        offsets: list[tuple[Box, float, float, bool]] = []
        position = 0.0
        for number, member in enumerate(self.members):
            length, width = self._member_size(number)
            turned = bool(self.turned) and self.turned[number]
            if self.stacking == Stacking.LENGTH:
                offsets.append((member, position, 0.0, turned))
                position += length + self.kerf
            else:
                offsets.append((member, 0.0, position, turned))
                position += width + self.kerf
        return offsets


@dataclass(frozen=True)
class Bin:
    """A stock rectangle: a full sheet or an offcut.

    Attributes:
        length: Raw length of the sheet.
        width: Raw width of the sheet.
        bin_type: Whether the bin was supplied or generated from base stock.
        trim: Unusable margin on every edge.
        index: Stable index, assigned once the bin is known to be usable.
    """

    length: float
    width: float
    bin_type: BinType = BinType.USER_DEFINED
    trim: float = 0.0
    index: int = -1

    def __post_init__(self) -> None:
        if self.length <= 0 or self.width <= 0:
            raise ValueError("Bin dimensions must be positive")
        if self.trim < 0:
            raise ValueError("Trim must be non-negative")

    @property
    def area(self) -> float:
        """Raw area of the bin."""
        return self.length * self.width

    @property
    def usable_length(self) -> float:
        """Length available for placement after trimming both ends."""
        return self.length - 2 * self.trim

    @property
    def usable_width(self) -> float:
        """Width available for placement after trimming both sides."""
        return self.width - 2 * self.trim

    @property
    def usable_area(self) -> float:
        """Usable area, zero when trimming consumes the whole bin."""
        if self.usable_length <= EPS or self.usable_width <= EPS:
            return 0.0
        return self.usable_length * self.usable_width

    def with_index(self, index: int) -> Bin:
        """Return a copy of this bin carrying the given index."""
        return replace(self, index=index)

    def usable_leftover(self) -> Leftover:
        """Leftover covering the whole usable area."""
        return Leftover(
            x=self.trim,
            y=self.trim,
            length=self.usable_length,
            width=self.usable_width,
        )


@dataclass(frozen=True)
class Leftover:
    """A free rectangular region of a bin."""

    x: float
    y: float
    length: float
    width: float

    def __post_init__(self) -> None:
        if self.length < -EPS or self.width < -EPS:
            raise ValueError("Leftover dimensions must be non-negative")

    @property
    def area(self) -> float:
        return self.length * self.width

    def can_host(self, length: float, width: float) -> bool:
        """Check whether a length x width footprint fits without rotation."""
        return length <= self.length + EPS and width <= self.width + EPS


@dataclass(frozen=True)
class Cut:
    """A single guillotine cut.

    A horizontal cut runs parallel to the bin length starting at (x, y);
    a vertical cut runs parallel to the bin width.

    Attributes:
        x: Start of the cut along the bin length.
        y: Start of the cut along the bin width.
        length: Length of the cut.
        is_horizontal: Orientation of the cut.
        is_through: True when the cut spans the whole usable bin.
    """

    x: float
    y: float
    length: float
    is_horizontal: bool
    is_through: bool = False

    @property
    def x_end(self) -> float:
        return self.x + self.length if self.is_horizontal else self.x

    @property
    def y_end(self) -> float:
        return self.y if self.is_horizontal else self.y + self.length


@dataclass(frozen=True)
class PlacedBox:
    """A box placed at a position on a bin.

    Attributes:
        box: The original box.
        x: Position of the lower left corner along the bin length.
        y: Position of the lower left corner along the bin width.
        rotated: True if the box is turned by 90 degrees.
    """

    box: Box
    x: float
    y: float
    rotated: bool = False

    def __post_init__(self) -> None:
        if self.x < -EPS or self.y < -EPS:
            raise ValueError("Position coordinates must be non-negative")

    @property
    def placed_length(self) -> float:
        """Length of the box as placed (accounts for rotation)."""
        return self.box.width if self.rotated else self.box.length

    @property
    def placed_width(self) -> float:
        """Width of the box as placed (accounts for rotation)."""
        return self.box.length if self.rotated else self.box.width

    @property
    def right_edge(self) -> float:
        return self.x + self.placed_length

    @property
    def top_edge(self) -> float:
        return self.y + self.placed_width


@dataclass(frozen=True)
class PackedBin:
    """Layout of one bin: what was placed, where it was cut, what is left.

    Attributes:
        bin: The bin that was cut.
        placements: Boxes placed on the bin.
        cuts: Guillotine cuts in the order they were made.
        leftovers: Free regions remaining after all placements.
    """

    bin: Bin
    placements: tuple[PlacedBox, ...]
    cuts: tuple[Cut, ...]
    leftovers: tuple[Leftover, ...]

    @property
    def used_area(self) -> float:
        """Total area of the placed boxes."""
        return sum(p.box.area for p in self.placements)

    @property
    def efficiency(self) -> float:
        """Placed area divided by usable bin area."""
        usable = self.bin.usable_area
        if usable <= 0:
            return 0.0
        return self.used_area / usable

    @property
    def box_count(self) -> int:
        return len(self.placements)
