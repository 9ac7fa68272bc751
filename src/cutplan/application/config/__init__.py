"""Job file schema and loading.

Public API:
    - PackingJobSchema: Root job model
    - OptionsSchema, BinSchema, BoxSchema: Job sections
    - load_job: Load a job from a JSON file
    - load_job_from_dict: Load a job from a dictionary
    - ConfigError: Exception for job loading errors
    - job_to_options: Convert job options to PackingOptions
    - job_to_engine: Build a PackEngine from a job

Example:
    >>> from pathlib import Path
    >>> from cutplan.application.config import load_job, job_to_engine
    >>> engine = job_to_engine(load_job(Path("job.json")))
    >>> result, code = engine.run()
"""

from cutplan.application.config.adapter import job_to_engine, job_to_options
from cutplan.application.config.loader import (
    ConfigError,
    load_job,
    load_job_from_dict,
)
from cutplan.application.config.schema import (
    BinSchema,
    BoxSchema,
    OptionsSchema,
    PackingJobSchema,
)

__all__ = [
    "BinSchema",
    "BoxSchema",
    "ConfigError",
    "OptionsSchema",
    "PackingJobSchema",
    "job_to_engine",
    "job_to_options",
    "load_job",
    "load_job_from_dict",
]
