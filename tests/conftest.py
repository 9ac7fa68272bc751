"""Pytest configuration and shared fixtures for cutting plan tests."""

from __future__ import annotations

import pytest

from cutplan.domain import (
    Bin,
    Box,
    OptimizationLevel,
    PackingOptions,
    Presort,
    Score,
    Signature,
    Split,
    Stacking,
    StackingPreference,
)
from cutplan.infrastructure import Deadline, Packer, PackingResult


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: tests that take a long time to run")


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def plain_signature() -> Signature:
    """Width-sorted, best-area-fit, horizontal-first, no stacking."""
    return Signature(
        Presort.WIDTH_DECR,
        Score.BEST_AREA_FIT,
        Split.HORIZONTAL_FIRST,
        Stacking.NONE,
    )


@pytest.fixture
def fast_options() -> PackingOptions:
    """Medium search without stacking variants."""
    return PackingOptions(
        optimization=OptimizationLevel.MEDIUM,
        stacking=StackingPreference.NONE,
    )


@pytest.fixture
def sheet() -> Bin:
    """A 1000 x 500 offcut already indexed."""
    return Bin(1000, 500, index=0)


@pytest.fixture
def three_boxes() -> list[Box]:
    """Boxes that fit together on the 1000 x 500 sheet."""
    return [
        Box(400, 300, box_id=0),
        Box(400, 300, box_id=1),
        Box(300, 200, box_id=2),
    ]


@pytest.fixture
def labelled_packer(plain_signature: Signature, sheet: Bin) -> Packer:
    """The three test boxes packed on one sheet; the last one is rotated."""
    boxes = [
        Box(400, 300, data="shelf", box_id=0),
        Box(400, 300, data="A & B", box_id=1),
        Box(300, 200, box_id=2),
    ]
    packer = Packer(plain_signature, PackingOptions(), [sheet], boxes)
    packer.pack(Deadline(3600))
    return packer


@pytest.fixture
def labelled_result(labelled_packer: Packer) -> PackingResult:
    """Packing result built from ``labelled_packer`` alone."""
    return PackingResult.from_chain([labelled_packer])
