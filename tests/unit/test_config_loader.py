"""Unit tests for the job schema, loader and adapter.

These tests verify:
- Valid jobs are loaded with their defaults
- Loader error handling (file not found, JSON parse errors, validation)
- Unknown fields are rejected (extra="forbid")
- Conversion of jobs to options and engines
"""

import json
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from cutplan.application.config import (
    BoxSchema,
    ConfigError,
    OptionsSchema,
    PackingJobSchema,
    job_to_engine,
    job_to_options,
    load_job,
    load_job_from_dict,
)
from cutplan.domain import OptimizationLevel, StackingPreference, WarningCode


@pytest.fixture
def job_data() -> dict[str, Any]:
    """A small but complete job."""
    return {
        "options": {"trim_size": 5, "optimization": "advanced", "stacking": "none"},
        "bins": [{"length": 1000, "width": 500, "count": 2}],
        "boxes": [
            {"length": 400, "width": 300, "count": 2, "label": "shelf"},
            {"length": 300, "width": 200, "rotatable": False},
        ],
    }


class TestSchema:
    """Tests for the pydantic job models."""

    def test_defaults(self) -> None:
        job = PackingJobSchema()
        assert job.options.optimization == OptimizationLevel.MEDIUM
        assert job.options.stacking == StackingPreference.ALL
        assert job.options.timeout == 30.0
        assert job.bins == []
        assert job.boxes == []

    def test_box_defaults(self) -> None:
        box = BoxSchema(length=10, width=5)
        assert box.rotatable is True
        assert box.count == 1
        assert box.label is None

    def test_non_positive_dimensions_are_accepted(self) -> None:
        assert BoxSchema(length=0, width=-5).width == -5

    def test_count_must_be_positive(self) -> None:
        with pytest.raises(PydanticValidationError):
            BoxSchema(length=10, width=5, count=0)

    def test_base_stock_needs_both_dimensions(self) -> None:
        with pytest.raises(PydanticValidationError, match="base_length and base_width"):
            OptionsSchema(base_length=2800)

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            OptionsSchema(timeout=-1)


class TestLoadJob:
    """Tests for load_job and load_job_from_dict."""

    def test_load_valid_file(self, tmp_path: Path, job_data: dict[str, Any]) -> None:
        path = tmp_path / "job.json"
        path.write_text(json.dumps(job_data))
        job = load_job(path)
        assert job.options.trim_size == 5
        assert job.options.optimization == OptimizationLevel.ADVANCED
        assert job.bins[0].count == 2
        assert job.boxes[1].rotatable is False

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_job(tmp_path / "missing.json")
        assert exc_info.value.error_type == "file_not_found"
        assert "not found" in str(exc_info.value)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "job.json"
        path.write_text('{"boxes": [\n  {"length": 1,}\n]}')
        with pytest.raises(ConfigError) as exc_info:
            load_job(path)
        assert exc_info.value.error_type == "json_parse"
        assert exc_info.value.details[0]["line"] == 2

    def test_unknown_field(self, job_data: dict[str, Any]) -> None:
        job_data["options"]["colour"] = "red"
        with pytest.raises(ConfigError) as exc_info:
            load_job_from_dict(job_data)
        error = exc_info.value
        assert error.error_type == "validation"
        assert error.details[0]["path"] == "options.colour"
        assert error.details[0]["error_type"] == "extra_forbidden"

    def test_validation_path_includes_index(self, job_data: dict[str, Any]) -> None:
        job_data["boxes"][1]["count"] = 0
        with pytest.raises(ConfigError) as exc_info:
            load_job_from_dict(job_data)
        assert exc_info.value.details[0]["path"] == "boxes[1].count"
        assert "boxes[1].count" in exc_info.value.message

    def test_unknown_optimization_level(self, job_data: dict[str, Any]) -> None:
        job_data["options"]["optimization"] = "extreme"
        with pytest.raises(ConfigError) as exc_info:
            load_job_from_dict(job_data)
        assert exc_info.value.details[0]["path"] == "options.optimization"


class TestAdapter:
    """Tests for job_to_options and job_to_engine."""

    def test_options(self, job_data: dict[str, Any]) -> None:
        options = job_to_options(load_job_from_dict(job_data).options)
        assert options.trim_size == 5
        assert options.optimization == OptimizationLevel.ADVANCED
        assert options.stacking == StackingPreference.NONE

    def test_overrides(self, job_data: dict[str, Any]) -> None:
        options = job_to_options(
            load_job_from_dict(job_data).options,
            timeout=2.5,
            optimization=None,
        )
        assert options.timeout == 2.5
        assert options.optimization == OptimizationLevel.ADVANCED

    def test_invalid_override(self) -> None:
        with pytest.raises(ValueError, match="Timeout"):
            job_to_options(OptionsSchema(), timeout=-1)

    def test_engine_expands_counts(self, job_data: dict[str, Any]) -> None:
        engine = job_to_engine(load_job_from_dict(job_data))
        assert len(engine.bins) == 2
        assert all(b.trim == 5 for b in engine.bins)
        assert [b.data for b in engine.boxes] == ["shelf", "shelf", None]
        assert [b.box_id for b in engine.boxes] == [0, 1, 2]
        assert engine.boxes[2].rotatable is False

    def test_engine_reports_illegal_sizes(self) -> None:
        job = load_job_from_dict(
            {
                "bins": [{"length": 0, "width": 10}],
                "boxes": [{"length": 10, "width": 10}, {"length": -1, "width": 3}],
            }
        )
        engine = job_to_engine(job)
        assert engine.bins == []
        assert len(engine.boxes) == 1
        assert engine.warnings == [
            WarningCode.ILLEGAL_SIZED_BIN,
            WarningCode.ILLEGAL_SIZED_BOX,
        ]
