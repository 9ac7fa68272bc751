"""Signature space: the heuristic combinations explored by the engine.

A signature fixes one value on each heuristic axis. The engine evaluates
the full cross product of the axes, so the signature count is
presort x score x split x (1 or 3 stacking variants).
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product

from cutplan.domain.value_objects import (
    OptimizationLevel,
    Presort,
    Score,
    Split,
    Stacking,
    StackingPreference,
)

MEDIUM_PRESORTS: tuple[Presort, ...] = (
    Presort.WIDTH_DECR,
    Presort.LENGTH_DECR,
    Presort.AREA_DECR,
    Presort.PERIMETER_DECR,
)
MEDIUM_SCORES: tuple[Score, ...] = (
    Score.BEST_AREA_FIT,
    Score.BEST_SHORT_SIDE_FIT,
    Score.BEST_LONG_SIDE_FIT,
    Score.WORST_AREA_FIT,
)
MEDIUM_SPLITS: tuple[Split, ...] = (
    Split.MINIMIZE_AREA,
    Split.MAXIMIZE_AREA,
    Split.HORIZONTAL_FIRST,
    Split.VERTICAL_FIRST,
)

_STACKING_BY_PREFERENCE = {
    StackingPreference.NONE: Stacking.NONE,
    StackingPreference.LENGTH: Stacking.LENGTH,
    StackingPreference.WIDTH: Stacking.WIDTH,
}


@dataclass(frozen=True)
class Signature:
    """One concrete packing strategy."""

    presort: Presort
    score: Score
    split: Split
    stacking: Stacking

    def __str__(self) -> str:
        return (
            f"{self.presort.value}/{self.score.value}/"
            f"{self.split.value}/{self.stacking.value}"
        )


def stacking_variants(preference: StackingPreference) -> tuple[Stacking, ...]:
    """Stacking values explored for a caller preference."""
    if preference == StackingPreference.ALL:
        return tuple(Stacking)
    return (_STACKING_BY_PREFERENCE[preference],)


def make_signatures_medium(preference: StackingPreference) -> list[Signature]:
    """Build the small signature set: 4 x 4 x 4 = 64, times 1 or 3."""
    return [
        Signature(*combination)
        for combination in product(
            MEDIUM_PRESORTS,
            MEDIUM_SCORES,
            MEDIUM_SPLITS,
            stacking_variants(preference),
        )
    ]


def make_signatures_large(preference: StackingPreference) -> list[Signature]:
    """Build the large signature set: 8 x 6 x 8 = 384, times 1 or 3."""
    return [
        Signature(*combination)
        for combination in product(
            tuple(Presort),
            tuple(Score),
            tuple(Split),
            stacking_variants(preference),
        )
    ]


def make_signatures(
    level: OptimizationLevel,
    preference: StackingPreference,
) -> list[Signature]:
    """Signature set for an optimization level.

    Raises:
        ValueError: If the level is not a supported optimization level.
    """
    if level == OptimizationLevel.MEDIUM:
        return make_signatures_medium(preference)
    if level == OptimizationLevel.ADVANCED:
        return make_signatures_large(preference)
    raise ValueError(f"Unsupported optimization level: {level!r}")
