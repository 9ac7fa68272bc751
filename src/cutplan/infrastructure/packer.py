"""Guillotine packing of one bin under a fixed heuristic signature.

A Packer is one attempt at filling exactly one additional bin. Stage 0
packers start from the full box list; later packers continue from a
predecessor, inheriting its unplaced boxes, its remaining offcuts and its
cumulative statistics. Packers never modify one another.

The placement loop follows the classic guillotine free-rectangle scheme:
every free region (leftover) is a rectangle, each placed box is put in
the lower left corner of the leftover chosen by the score rule, and the
rest of that leftover is divided by two edge-to-edge cuts into at most two
new leftovers.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Sequence, Union

from cutplan.domain.entities import (
    Bin,
    Box,
    Cut,
    GroupedBox,
    Leftover,
    PackedBin,
    PlacedBox,
)
from cutplan.domain.options import PackingOptions
from cutplan.domain.signatures import Signature
from cutplan.domain.value_objects import (
    EPS,
    BinType,
    PackStatus,
    Presort,
    Score,
    Split,
    Stacking,
)
from cutplan.infrastructure.deadline import Deadline

logger = logging.getLogger(__name__)

Item = Union[Box, GroupedBox]


class PackingInternalError(Exception):
    """Raised when the placement geometry becomes inconsistent.

    Never expected in correct operation; the engine turns it into an
    internal-fault error code.
    """


@dataclass(frozen=True)
class BinStats:
    """Statistics of the bin filled by one packer.

    Attributes:
        efficiency: Placed area divided by usable bin area.
        compactness: Placed area divided by the bounding area of the placed boxes.
        area_unplaced_boxes: Total area of boxes left for later bins.
        nb_cuts: Number of cuts made on this bin.
        length_cuts: Total length of those cuts.
        nb_through_cuts: Cuts spanning the whole usable bin.
        nb_leftovers: Free regions left on the bin.
        largest_leftover_area: Area of the largest free region.
        signature: Signature used, as "presort/score/split/stacking".
    """

    efficiency: float
    compactness: float
    area_unplaced_boxes: float
    nb_cuts: int
    length_cuts: float
    nb_through_cuts: int
    nb_leftovers: int
    largest_leftover_area: float
    signature: str


@dataclass(frozen=True)
class GlobalStats:
    """Statistics accumulated along a chain of packers.

    ``rank`` and ``overall_rank`` are filled in by the ranking step.
    """

    nb_packed_bins: int = 0
    total_compactness: float = 0.0
    nb_through_cuts: int = 0
    total_length_cuts: float = 0.0
    all_largest_area: float = 0.0
    rank: int = 0
    overall_rank: int = 0

    def extend(self, stat: BinStats) -> GlobalStats:
        """Return the statistics of this chain extended by one bin."""
        return replace(
            self,
            nb_packed_bins=self.nb_packed_bins + 1,
            total_compactness=self.total_compactness + stat.compactness,
            nb_through_cuts=self.nb_through_cuts + stat.nb_through_cuts,
            total_length_cuts=self.total_length_cuts + stat.length_cuts,
            all_largest_area=max(self.all_largest_area, stat.largest_leftover_area),
        )


def _alternating(items: list[Item]) -> list[Item]:
    """Interleave widest and narrowest items: w1, wn, w2, wn-1, ..."""
    ordered = sorted(items, key=lambda i: (i.width, i.length), reverse=True)
    result: list[Item] = []
    low, high = 0, len(ordered) - 1
    while low <= high:
        result.append(ordered[low])
        if low != high:
            result.append(ordered[high])
        low += 1
        high -= 1
    return result


_PRESORT_KEYS: dict[Presort, Callable[[Item], tuple[float, float]]] = {
    Presort.WIDTH_DECR: lambda i: (i.width, i.length),
    Presort.LENGTH_DECR: lambda i: (i.length, i.width),
    Presort.AREA_DECR: lambda i: (i.length * i.width, max(i.length, i.width)),
    Presort.PERIMETER_DECR: lambda i: (i.perimeter, max(i.length, i.width)),
    Presort.LONGEST_SIDE_DECR: lambda i: (max(i.length, i.width), min(i.length, i.width)),
    Presort.SHORTEST_SIDE_DECR: lambda i: (min(i.length, i.width), max(i.length, i.width)),
    Presort.SIDE_DIFFERENCE_DECR: lambda i: (abs(i.length - i.width), i.length * i.width),
}


def presort_items(items: Sequence[Item], presort: Presort) -> list[Item]:
    """Order items for placement, largest first according to the rule."""
    if presort == Presort.ALTERNATING_WIDTHS:
        return _alternating(list(items))
    return sorted(items, key=_PRESORT_KEYS[presort], reverse=True)


def score_fit(
    score: Score,
    leftover: Leftover,
    length: float,
    width: float,
) -> float:
    """Score of placing a length x width footprint in a leftover; lower is better."""
    residual_length = leftover.length - length
    residual_width = leftover.width - width
    if score == Score.BEST_AREA_FIT:
        return leftover.area - length * width
    if score == Score.BEST_SHORT_SIDE_FIT:
        return min(residual_length, residual_width)
    if score == Score.BEST_LONG_SIDE_FIT:
        return max(residual_length, residual_width)
    if score == Score.WORST_AREA_FIT:
        return -(leftover.area - length * width)
    if score == Score.WORST_SHORT_SIDE_FIT:
        return -min(residual_length, residual_width)
    return -max(residual_length, residual_width)


def split_horizontally(
    split: Split,
    leftover: Leftover,
    length: float,
    width: float,
) -> bool:
    """Decide whether the first cut runs along the length of the leftover."""
    residual_length = leftover.length - length
    residual_width = leftover.width - width
    if split == Split.SHORTER_LEFTOVER_AXIS:
        return residual_length <= residual_width
    if split == Split.LONGER_LEFTOVER_AXIS:
        return residual_length > residual_width
    if split == Split.MINIMIZE_AREA:
        return length * residual_width > residual_length * width
    if split == Split.MAXIMIZE_AREA:
        return length * residual_width <= residual_length * width
    if split == Split.HORIZONTAL_FIRST:
        return True
    if split == Split.VERTICAL_FIRST:
        return False
    if split == Split.SHORTER_AXIS:
        return leftover.length <= leftover.width
    return leftover.length > leftover.width


def group_boxes(
    boxes: Sequence[Box],
    stacking: Stacking,
    max_extent: float,
    kerf: float,
) -> list[Item]:
    """Group identical boxes into strips along the stacking axis.

    Strips never exceed ``max_extent`` along the stacking axis. Boxes that
    have no identical sibling, or that cannot be stacked at all, stay
    single. Rotatable boxes are matched regardless of the orientation they
    were entered in; members are turned so that each strip has the longer
    side along the bin length.
    """
    if stacking == Stacking.NONE:
        return list(boxes)

    families: dict[tuple[float, float, bool], list[tuple[Box, bool]]] = {}
    for box in boxes:
        turned = box.rotatable and box.width > box.length + EPS
        if turned:
            key = (box.width, box.length, True)
        else:
            key = (box.length, box.width, box.rotatable)
        families.setdefault(key, []).append((box, turned))

    items: list[Item] = []
    for (length, width, _), members in families.items():
        extent = length if stacking == Stacking.LENGTH else width
        per_strip = int((max_extent + kerf + EPS) // (extent + kerf))
        if per_strip < 2 or len(members) < 2:
            items.extend(box for box, _ in members)
            continue
        for start in range(0, len(members), per_strip):
            chunk = members[start:start + per_strip]
            if len(chunk) == 1:
                items.append(chunk[0][0])
            else:
                items.append(GroupedBox(
                    members=tuple(box for box, _ in chunk),
                    stacking=stacking,
                    kerf=kerf,
                    turned=tuple(turned for _, turned in chunk),
                ))
    return items


class Packer:
    """One packing attempt for one additional bin.

    Attributes:
        signature: Heuristic signature driving every decision.
        options: Run options (trim, kerf, base stock).
        index: Slot of this packer in the engine arena, -1 until stored.
        previous_index: Arena slot of the predecessor, None at stage 0.
        status: Outcome of :meth:`pack`, None before it runs.
        packed_bin: Layout of the bin filled by this packer.
        unplaced_boxes: Boxes left for the next bin.
        stat: Statistics of this bin.
        gstat: Statistics of the whole chain ending with this bin.
    """

    def __init__(
        self,
        signature: Signature,
        options: PackingOptions,
        bins: Sequence[Bin] = (),
        boxes: Sequence[Box] = (),
    ) -> None:
        self.signature = signature
        self.options = options
        self.index = -1
        self.previous_index: int | None = None
        self.status: PackStatus | None = None

        self._bins: tuple[Bin, ...] = tuple(bins)
        self._boxes: tuple[Box, ...] = tuple(boxes)
        self._next_bin_index = max((b.index for b in bins), default=-1) + 1
        self._previous_gstat = GlobalStats()

        self.packed_bin: PackedBin | None = None
        self.unplaced_boxes: list[Box] = list(boxes)
        self.remaining_bins: tuple[Bin, ...] = tuple(bins)
        self.stat: BinStats | None = None
        self.gstat = GlobalStats()
        self.invalid_boxes: list[Box] = []
        self.invalid_bins: list[Bin] = []

    @classmethod
    def continue_from(
        cls,
        previous: Packer,
        signature: Signature,
        options: PackingOptions,
    ) -> Packer:
        """Create a packer for the bin following ``previous``.

        Raises:
            ValueError: If ``previous`` has not been stored in an arena.
        """
        if previous.index < 0:
            raise ValueError("Predecessor packer must be stored before linking")
        packer = cls(signature, options, previous.remaining_bins, previous.unplaced_boxes)
        packer.previous_index = previous.index
        packer._next_bin_index = previous._next_bin_index
        packer._previous_gstat = previous.gstat
        packer.gstat = previous.gstat
        return packer

    @property
    def is_done(self) -> bool:
        """True when no box is left for a further bin."""
        return not self.unplaced_boxes

    def add_invalid_boxes(self, boxes: Sequence[Box]) -> None:
        self.invalid_boxes.extend(boxes)

    def add_invalid_bins(self, bins: Sequence[Bin]) -> None:
        self.invalid_bins.extend(bins)

    def ranked(self, rank: int, overall_rank: int) -> Packer:
        """Return a copy of this packer with new ranking totals."""
        clone = copy.copy(self)
        clone.gstat = replace(self.gstat, rank=rank, overall_rank=overall_rank)
        clone.invalid_boxes = list(self.invalid_boxes)
        clone.invalid_bins = list(self.invalid_bins)
        return clone

    def pack(self, deadline: Deadline) -> PackStatus:
        """Fill one bin with as many remaining boxes as possible.

        Returns:
            PACKED when at least one box was placed, NO_PLACEMENT when none
            fits the selected bin, NO_BIN_LEFT when no bin is available and
            TIMEOUT when the deadline expired during placement.

        Raises:
            PackingInternalError: If the placement geometry is inconsistent.
        """
        bin_ = self._select_bin()
        if bin_ is None:
            self.status = PackStatus.NO_BIN_LEFT
            return self.status

        max_extent = (
            bin_.usable_length
            if self.signature.stacking == Stacking.LENGTH
            else bin_.usable_width
        )
        items = group_boxes(
            self._boxes, self.signature.stacking, max_extent, self.options.saw_kerf
        )
        queue: deque[Item] = deque(presort_items(items, self.signature.presort))

        leftovers: list[Leftover] = [bin_.usable_leftover()]
        placements: list[PlacedBox] = []
        cuts: list[Cut] = []
        unplaced: list[Box] = []

        while queue:
            if deadline.expired():
                logger.debug("Packer %s hit the deadline", self.signature)
                self.status = PackStatus.TIMEOUT
                return self.status

            item = queue.popleft()
            choice = self._find_position(item, leftovers)
            if choice is None:
                if isinstance(item, GroupedBox):
                    queue.extendleft(reversed(item.members))
                else:
                    unplaced.append(item)
                continue

            position, (length, width, rotated) = choice
            leftover = leftovers.pop(position)
            placements.extend(self._place(item, leftover, length, width, rotated, cuts, bin_))
            leftovers.extend(self._split(leftover, length, width, cuts, bin_))

        if not placements:
            self.status = PackStatus.NO_PLACEMENT
            return self.status

        self._check_layout(bin_, placements, leftovers)
        self.packed_bin = PackedBin(
            bin=bin_,
            placements=tuple(placements),
            cuts=tuple(cuts),
            leftovers=tuple(leftovers),
        )
        self.unplaced_boxes = unplaced
        self.stat = self._compute_stat(self.packed_bin, unplaced)
        self.gstat = self._previous_gstat.extend(self.stat)
        self.status = PackStatus.PACKED
        return self.status

    def _select_bin(self) -> Bin | None:
        """Take the next bin: the smallest usable offcut, else new base stock."""
        if not self._boxes:
            return None

        for position, bin_ in enumerate(self._bins):
            if any(
                box.fits_into(bin_.usable_length, bin_.usable_width)
                for box in self._boxes
            ):
                self.remaining_bins = self._bins[:position] + self._bins[position + 1:]
                return bin_

        if self.options.has_base_stock:
            bin_ = Bin(
                length=self.options.base_length,
                width=self.options.base_width,
                bin_type=BinType.AUTO_GENERATED,
                trim=self.options.trim_size,
                index=self._next_bin_index,
            )
            self._next_bin_index += 1
            self.remaining_bins = self._bins
            return bin_
        return None

    def _find_position(
        self,
        item: Item,
        leftovers: list[Leftover],
    ) -> tuple[int, tuple[float, float, bool]] | None:
        best: tuple[int, tuple[float, float, bool]] | None = None
        best_score = 0.0
        for position, leftover in enumerate(leftovers):
            for orientation in item.orientations():
                length, width, _ = orientation
                if not leftover.can_host(length, width):
                    continue
                score = score_fit(self.signature.score, leftover, length, width)
                if best is None or score < best_score - EPS:
                    best = (position, orientation)
                    best_score = score
        return best

    def _place(
        self,
        item: Item,
        leftover: Leftover,
        length: float,
        width: float,
        rotated: bool,
        cuts: list[Cut],
        bin_: Bin,
    ) -> list[PlacedBox]:
        if length > leftover.length + EPS or width > leftover.width + EPS:
            raise PackingInternalError(
                f"Footprint {length}x{width} exceeds leftover "
                f"{leftover.length}x{leftover.width} at ({leftover.x}, {leftover.y})"
            )
        if isinstance(item, Box):
            return [PlacedBox(box=item, x=leftover.x, y=leftover.y, rotated=rotated)]

        placed: list[PlacedBox] = []
        offsets = item.member_offsets()
        for number, (member, dx, dy, turned) in enumerate(offsets):
            box = PlacedBox(box=member, x=leftover.x + dx, y=leftover.y + dy, rotated=turned)
            placed.append(box)
            if number == len(offsets) - 1:
                continue
            # separating cut between this member and the next one
            if item.stacking == Stacking.LENGTH:
                cuts.append(self._make_cut(
                    box.right_edge, leftover.y, width, False, bin_
                ))
            else:
                cuts.append(self._make_cut(
                    leftover.x, box.top_edge, length, True, bin_
                ))
        return placed

    def _split(
        self,
        leftover: Leftover,
        length: float,
        width: float,
        cuts: list[Cut],
        bin_: Bin,
    ) -> list[Leftover]:
        """Cut the used leftover and return the new free regions."""
        kerf = self.options.saw_kerf
        residual_length = leftover.length - length
        residual_width = leftover.width - width
        horizontal = split_horizontally(self.signature.split, leftover, length, width)

        # Horizontal: the upper region spans the whole leftover length.
        # Vertical: the right region spans the whole leftover width.
        top_length = leftover.length if horizontal else length
        right_width = width if horizontal else leftover.width

        new_leftovers: list[Leftover] = []
        first_cuts: list[Cut] = []
        second_cuts: list[Cut] = []
        if residual_width > EPS:
            cut = self._make_cut(leftover.x, leftover.y + width, top_length, True, bin_)
            (first_cuts if horizontal else second_cuts).append(cut)
            top = Leftover(
                x=leftover.x,
                y=leftover.y + width + kerf,
                length=top_length,
                width=max(residual_width - kerf, 0.0),
            )
            if top.length > EPS and top.width > EPS:
                new_leftovers.append(top)
        if residual_length > EPS:
            cut = self._make_cut(leftover.x + length, leftover.y, right_width, False, bin_)
            (second_cuts if horizontal else first_cuts).append(cut)
            right = Leftover(
                x=leftover.x + length + kerf,
                y=leftover.y,
                length=max(residual_length - kerf, 0.0),
                width=right_width,
            )
            if right.length > EPS and right.width > EPS:
                new_leftovers.append(right)

        cuts.extend(first_cuts)
        cuts.extend(second_cuts)
        return new_leftovers

    @staticmethod
    def _make_cut(x: float, y: float, length: float, horizontal: bool, bin_: Bin) -> Cut:
        span = bin_.usable_length if horizontal else bin_.usable_width
        return Cut(
            x=x,
            y=y,
            length=length,
            is_horizontal=horizontal,
            is_through=length >= span - EPS,
        )

    @staticmethod
    def _check_layout(
        bin_: Bin,
        placements: list[PlacedBox],
        leftovers: list[Leftover],
    ) -> None:
        x_max = bin_.length - bin_.trim + EPS
        y_max = bin_.width - bin_.trim + EPS
        low = bin_.trim - EPS
        for placed in placements:
            if placed.x < low or placed.y < low or placed.right_edge > x_max or placed.top_edge > y_max:
                raise PackingInternalError(
                    f"Box {placed.box.box_id} placed outside bin {bin_.index}"
                )
        for leftover in leftovers:
            if leftover.x + leftover.length > x_max or leftover.y + leftover.width > y_max:
                raise PackingInternalError(f"Leftover outside bin {bin_.index}")

    def _compute_stat(self, packed: PackedBin, unplaced: list[Box]) -> BinStats:
        placed_area = packed.used_area
        trim = packed.bin.trim
        bounding_length = max(p.right_edge for p in packed.placements) - trim
        bounding_width = max(p.top_edge for p in packed.placements) - trim
        bounding_area = bounding_length * bounding_width
        return BinStats(
            efficiency=packed.efficiency,
            compactness=placed_area / bounding_area if bounding_area > 0 else 0.0,
            area_unplaced_boxes=sum(box.area for box in unplaced),
            nb_cuts=len(packed.cuts),
            length_cuts=sum(cut.length for cut in packed.cuts),
            nb_through_cuts=sum(1 for cut in packed.cuts if cut.is_through),
            nb_leftovers=len(packed.leftovers),
            largest_leftover_area=max(
                (leftover.area for leftover in packed.leftovers), default=0.0
            ),
            signature=str(self.signature),
        )
