"""Application commands (use cases) for running nesting jobs."""

from __future__ import annotations

import logging
import random

from stocknest.application.config import (
    LinearNestingJob,
    SheetNestingJob,
    job_to_density_table,
    job_to_linear_config,
    job_to_linear_parts,
    job_to_parts,
    job_to_sheet_config,
    job_to_sheets,
)
from stocknest.infrastructure.linear_packing import LinearNestingResult, LinearPacker
from stocknest.infrastructure.sheet_packing import SheetNestingResult, SheetPacker

logger = logging.getLogger(__name__)


class NestSheetsCommand:
    """Command to run a sheet nesting job."""

    def execute(self, job: SheetNestingJob) -> SheetNestingResult:
        """Nest the job's parts onto its sheet definitions.

        Args:
            job: A validated sheet nesting job.

        Returns:
            SheetNestingResult with layouts and any unplaced parts.
        """
        parts = job_to_parts(job)
        sheets = job_to_sheets(job)
        logger.debug(
            "Running sheet job: %d part rows, %d sheet definitions",
            len(parts),
            len(sheets),
        )
        packer = SheetPacker(
            job_to_sheet_config(job),
            density_lookup=job_to_density_table(job),
        )
        return packer.pack(parts, sheets)


class NestLinearCommand:
    """Command to run a bar nesting job."""

    def execute(
        self,
        job: LinearNestingJob,
        seed: int | None = None,
    ) -> LinearNestingResult:
        """Nest the job's parts onto stock bars.

        Args:
            job: A validated linear nesting job.
            seed: Random seed overriding the job's own seed setting.

        Returns:
            LinearNestingResult with bar layouts and any unplaced parts.
        """
        if seed is None:
            seed = job.settings.seed
        parts = job_to_linear_parts(job)
        logger.debug(
            "Running linear job: %d part rows, goal=%s, seed=%s",
            len(parts),
            job.settings.goal.value,
            seed,
        )
        packer = LinearPacker(job_to_linear_config(job), rng=random.Random(seed))
        return packer.pack(parts)


def run_job(
    job: SheetNestingJob | LinearNestingJob,
    seed: int | None = None,
) -> SheetNestingResult | LinearNestingResult:
    """Run whichever command matches the job kind."""
    if isinstance(job, SheetNestingJob):
        return NestSheetsCommand().execute(job)
    return NestLinearCommand().execute(job, seed=seed)
