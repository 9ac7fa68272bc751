"""Pydantic models for packing job files.

A job file lists the offcuts available, the boxes to cut and the options
of the run. Dimensions are not range-checked here: boxes and bins with a
non-positive size are passed through so that the engine can report them
as warnings instead of refusing the whole job.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cutplan.domain.value_objects import OptimizationLevel, StackingPreference


class OptionsSchema(BaseModel):
    """Options of a packing run.

    Attributes:
        trim_size: Unusable margin on every edge of every bin.
        saw_kerf: Width of material lost to each cut.
        base_length: Length of the base stock sheet (0 for none).
        base_width: Width of the base stock sheet (0 for none).
        optimization: Size of the heuristic search.
        stacking: Which stacking variants to explore.
        debug: Dump the packer tree after each stage.
        timeout: Time budget in seconds.
    """

    model_config = ConfigDict(extra="forbid")

    trim_size: float = Field(default=0.0, ge=0, description="Trim margin per edge")
    saw_kerf: float = Field(default=0.0, ge=0, description="Saw kerf width")
    base_length: float = Field(default=0.0, ge=0, description="Base stock length")
    base_width: float = Field(default=0.0, ge=0, description="Base stock width")
    optimization: OptimizationLevel = Field(
        default=OptimizationLevel.MEDIUM,
        description="Optimization level",
    )
    stacking: StackingPreference = Field(
        default=StackingPreference.ALL,
        description="Stacking preference",
    )
    debug: bool = Field(default=False, description="Dump packer tree")
    timeout: float = Field(default=30.0, ge=0, description="Time budget in seconds")

    @model_validator(mode="after")
    def validate_base_stock(self) -> "OptionsSchema":
        """Base stock needs both dimensions or neither."""
        if (self.base_length > 0) != (self.base_width > 0):
            raise ValueError("base_length and base_width must both be set or both be 0")
        return self


class BinSchema(BaseModel):
    """An offcut, repeated ``count`` times."""

    model_config = ConfigDict(extra="forbid")

    length: float
    width: float
    count: int = Field(default=1, ge=1, le=10000)


class BoxSchema(BaseModel):
    """A box to cut, repeated ``count`` times.

    Attributes:
        length: Box length.
        width: Box width.
        rotatable: Whether the box may be turned by 90 degrees.
        count: Number of identical boxes.
        label: Free text carried through to the output.
    """

    model_config = ConfigDict(extra="forbid")

    length: float
    width: float
    rotatable: bool = True
    count: int = Field(default=1, ge=1, le=10000)
    label: str | None = Field(default=None, max_length=100)


class PackingJobSchema(BaseModel):
    """Root model of a packing job file."""

    model_config = ConfigDict(extra="forbid")

    options: OptionsSchema = Field(default_factory=OptionsSchema)
    bins: list[BinSchema] = Field(default_factory=list)
    boxes: list[BoxSchema] = Field(default_factory=list)
