"""Application layer - job loading and orchestration."""

from .config import ConfigError, PackingJobSchema, job_to_engine, load_job

__all__ = [
    "ConfigError",
    "PackingJobSchema",
    "job_to_engine",
    "load_job",
]
