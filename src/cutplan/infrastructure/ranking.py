"""Ranking and filtering of sibling packers between stages.

The functions here never modify the packers they receive: ranking totals
are written into copies (:meth:`Packer.ranked`) and new lists are returned.
"""

from __future__ import annotations

import logging
from typing import Sequence

from cutplan.domain.value_objects import EPS
from cutplan.infrastructure.packer import Packer

logger = logging.getLogger(__name__)


def rank_by(
    packers: Sequence[Packer],
    criterion: str,
    find_min: bool = True,
) -> list[Packer]:
    """Rank packers on one per-bin statistic.

    Packers whose values lie within ``EPS`` of the current group leader
    share a rank; the rank counter only moves when the value changes by
    more than that. The rank is added to each packer's cumulative rank.

    Args:
        packers: Packers of one generation, all already packed.
        criterion: Name of a :class:`BinStats` field.
        find_min: True when a lower value is better.

    Returns:
        Copies of the packers, best first.
    """
    sign = 1 if find_min else -1
    ordered = sorted(packers, key=lambda p: sign * getattr(p.stat, criterion))

    ranked: list[Packer] = []
    rank = 1
    leader: float | None = None
    for packer in ordered:
        value = getattr(packer.stat, criterion)
        if leader is None:
            leader = value
        elif abs(value - leader) > EPS:
            leader = value
            rank += 1
        ranked.append(packer.ranked(packer.gstat.rank + rank, packer.gstat.overall_rank))
    return ranked


def _tie_break(packer: Packer) -> tuple[float, float, float]:
    gstat = packer.gstat
    return (-gstat.nb_through_cuts, -gstat.all_largest_area, gstat.total_length_cuts)


def filter_best_packers(packers: Sequence[Packer | None], best_x: int) -> list[Packer]:
    """Keep at most ``best_x`` packers to seed the next stage.

    1. If any packer placed every box, only such packers are considered.
    2. Packers are ranked by compactness, higher is better.
    3. Packers are grouped by cumulative compactness; the ``best_x`` best
       groups each contribute one representative, chosen by more through
       cuts, then larger largest leftover, then shorter total cut length.
    4. Representatives add their rank to their overall rank and are
       returned in ascending overall rank.

    Raises:
        ValueError: If ``best_x`` is smaller than 1.
    """
    if best_x < 1:
        raise ValueError("best_x must be at least 1")

    candidates = [p for p in packers if p is not None and p.stat is not None]
    if not candidates:
        return []

    complete = [p for p in candidates if p.stat.area_unplaced_boxes <= EPS]
    if complete:
        candidates = complete

    ranked = rank_by(candidates, "compactness", find_min=False)

    groups: dict[float, list[Packer]] = {}
    for packer in ranked:
        groups.setdefault(packer.gstat.total_compactness, []).append(packer)

    best: list[Packer] = []
    for key in sorted(groups, reverse=True)[:best_x]:
        representative = min(groups[key], key=_tie_break)
        best.append(
            representative.ranked(
                representative.gstat.rank,
                representative.gstat.overall_rank + representative.gstat.rank,
            )
        )
    best.sort(key=lambda p: p.gstat.overall_rank)

    logger.debug(
        "Kept %d of %d packers (%d complete)",
        len(best),
        len(packers),
        len(complete),
    )
    return best
