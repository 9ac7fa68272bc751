"""Immutable configuration of a packing run."""

from __future__ import annotations

from dataclasses import dataclass

from cutplan.domain.value_objects import EPS, OptimizationLevel, StackingPreference


@dataclass(frozen=True)
class PackingOptions:
    """Numeric and behavioral options consumed by the engine.

    Attributes:
        trim_size: Unusable margin on every edge of every bin.
        saw_kerf: Material lost to each cut between a box and its neighbours.
        base_length: Length of the base stock sheet, 0 when none is available.
        base_width: Width of the base stock sheet, 0 when none is available.
        optimization: Size of the heuristic search.
        stacking: Stacking preference; ALL explores every variant.
        debug: Dump the packer tree through the logger after each stage.
        timeout: Time budget of a run in seconds.
    """

    trim_size: float = 0.0
    saw_kerf: float = 0.0
    base_length: float = 0.0
    base_width: float = 0.0
    optimization: OptimizationLevel = OptimizationLevel.MEDIUM
    stacking: StackingPreference = StackingPreference.ALL
    debug: bool = False
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.trim_size < 0:
            raise ValueError("Trim size must be non-negative")
        if self.saw_kerf < 0:
            raise ValueError("Saw kerf must be non-negative")
        if self.base_length < 0 or self.base_width < 0:
            raise ValueError("Base stock dimensions must be non-negative")
        if self.timeout < 0:
            raise ValueError("Timeout must be non-negative")

    @property
    def has_base_stock(self) -> bool:
        """True when new sheets can be generated from base stock."""
        return self.base_length >= EPS and self.base_width >= EPS

    @property
    def base_usable_length(self) -> float:
        return self.base_length - 2 * self.trim_size

    @property
    def base_usable_width(self) -> float:
        return self.base_width - 2 * self.trim_size
