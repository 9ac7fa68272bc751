"""Conversion of validated job files into engine objects."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from cutplan.application.config.schema import OptionsSchema, PackingJobSchema
from cutplan.domain.options import PackingOptions

if TYPE_CHECKING:
    from cutplan.infrastructure.pack_engine import PackEngine

logger = logging.getLogger(__name__)


def job_to_options(config: OptionsSchema, **overrides: Any) -> PackingOptions:
    """Convert pydantic options to the domain dataclass.

    Args:
        config: Validated options.
        **overrides: Fields to replace; ``None`` values are ignored so that
            unset CLI flags keep the job file's values.

    Raises:
        ValueError: If an override is invalid.
    """
    options = PackingOptions(
        trim_size=config.trim_size,
        saw_kerf=config.saw_kerf,
        base_length=config.base_length,
        base_width=config.base_width,
        optimization=config.optimization,
        stacking=config.stacking,
        debug=config.debug,
        timeout=config.timeout,
    )
    changes = {key: value for key, value in overrides.items() if value is not None}
    if changes:
        options = replace(options, **changes)
    return options


def job_to_engine(job: PackingJobSchema, **overrides: Any) -> "PackEngine":
    """Build a PackEngine loaded with every bin and box of the job.

    Entries with a ``count`` are expanded into individual bins and boxes.
    """
    # Lazy import to avoid circular dependencies
    from cutplan.infrastructure.pack_engine import PackEngine

    engine = PackEngine(job_to_options(job.options, **overrides))
    for bin_config in job.bins:
        for _ in range(bin_config.count):
            engine.add_bin(bin_config.length, bin_config.width)
    for box_config in job.boxes:
        for _ in range(box_config.count):
            engine.add_box(
                box_config.length,
                box_config.width,
                box_config.rotatable,
                box_config.label,
            )
    logger.debug(
        "Loaded job with %d bin(s) and %d box(es)",
        len(engine.bins),
        len(engine.boxes),
    )
    return engine
