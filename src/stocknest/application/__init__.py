"""Application layer - use cases and orchestration."""

from .commands import NestLinearCommand, NestSheetsCommand, run_job

__all__ = [
    "NestLinearCommand",
    "NestSheetsCommand",
    "run_job",
]
