"""Conversion from validated job models to domain objects and packer configs."""

from __future__ import annotations

from typing import Sequence

from stocknest.application.config.schema import (
    LinearNestingJob,
    LinearPartConfig,
    SheetNestingJob,
    SheetPartConfig,
)
from stocknest.domain.materials import DensityTable
from stocknest.domain.value_objects import LinearPart, Part, SheetCapacity
from stocknest.infrastructure.linear_packing import LinearNestingConfig
from stocknest.infrastructure.sheet_packing import SheetNestingConfig


def resolve_part_ids(
    rows: Sequence[SheetPartConfig | LinearPartConfig],
) -> list[int]:
    """Return the id of every part row, filling in missing ones.

    A row without an id takes its 1-based row number, or the next number
    above it that no other row uses, so default ids never collide with
    explicit ones. Explicit ids are returned unchanged, duplicates included.
    """
    used = {row.id for row in rows if row.id is not None}
    ids: list[int] = []
    for row_number, row in enumerate(rows, start=1):
        if row.id is not None:
            ids.append(row.id)
            continue
        candidate = row_number
        while candidate in used:
            candidate += 1
        used.add(candidate)
        ids.append(candidate)
    return ids


def job_to_parts(job: SheetNestingJob) -> list[Part]:
    """Convert part rows to Part value objects.

    Rows without an id get one from resolve_part_ids(). Zero-quantity rows
    are dropped.
    """
    parts: list[Part] = []
    for part_id, row in zip(resolve_part_ids(job.parts), job.parts):
        if row.quantity == 0:
            continue
        parts.append(
            Part(
                id=part_id,
                original_id=row.original_id if row.original_id is not None else part_id,
                name=row.name,
                length=row.length,
                width=row.width,
                thickness=row.thickness,
                grade=row.grade,
                quantity=row.quantity,
            )
        )
    return parts


def job_to_sheets(job: SheetNestingJob) -> list[SheetCapacity]:
    return [
        SheetCapacity(
            id=sheet.id,
            length=sheet.length,
            width=sheet.width,
            thickness=sheet.thickness,
            grade=sheet.grade,
            quantity=sheet.quantity,
        )
        for sheet in job.sheets
    ]


def job_to_sheet_config(job: SheetNestingJob) -> SheetNestingConfig:
    settings = job.settings
    return SheetNestingConfig(
        part_clearance=settings.part_clearance,
        edge_clearance=settings.edge_clearance,
        rotation=settings.rotation,
        default_density=settings.default_density,
    )


def job_to_density_table(job: SheetNestingJob) -> DensityTable:
    """Build the density lookup from the standard table plus job overrides."""
    return DensityTable(
        custom=job.densities,
        default=job.settings.default_density,
    )


def job_to_linear_parts(job: LinearNestingJob) -> list[LinearPart]:
    """Convert bar part rows, adding the kerf to each effective length.

    Rows without an id get one from resolve_part_ids(). Zero-quantity rows
    are dropped.
    """
    kerf = job.settings.kerf
    parts: list[LinearPart] = []
    for part_id, row in zip(resolve_part_ids(job.parts), job.parts):
        if row.quantity == 0:
            continue
        parts.append(
            LinearPart.with_kerf(
                id=part_id,
                raw_material=row.raw_material,
                length=row.length,
                quantity=row.quantity,
                kerf=kerf,
            )
        )
    return parts


def job_to_linear_config(job: LinearNestingJob) -> LinearNestingConfig:
    settings = job.settings
    return LinearNestingConfig(
        stock_length=settings.stock_length,
        left_allowance=settings.left_allowance,
        right_allowance=settings.right_allowance,
        goal=settings.goal,
        search_iterations=settings.search_iterations,
    )
