"""Typer CLI for sheet and bar nesting."""

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from stocknest.application import run_job
from stocknest.application.config import ConfigError, load_job, validate_job
from stocknest.cli.commands import display_load_error, validate_command
from stocknest.infrastructure import (
    LinearNestingReportFormatter,
    LinearNestingResult,
    NestingJsonExporter,
    SheetNestingReportFormatter,
    SheetNestingResult,
)


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


app = typer.Typer(
    name="stocknest",
    help="Nest parts onto sheet and bar stock to minimize waste.",
)

# Register validate command
app.command(name="validate")(validate_command)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Nest parts onto sheet and bar stock to minimize waste."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _render(
    result: SheetNestingResult | LinearNestingResult,
    output_format: OutputFormat,
    show_placements: bool,
) -> str:
    exporter = NestingJsonExporter()
    if isinstance(result, SheetNestingResult):
        if output_format is OutputFormat.JSON:
            return exporter.export_sheet(result)
        return SheetNestingReportFormatter(include_placements=show_placements).format(
            result
        )
    if output_format is OutputFormat.JSON:
        return exporter.export_linear(result)
    return LinearNestingReportFormatter().format(result)


def _warn_unplaced(result: SheetNestingResult | LinearNestingResult) -> None:
    """Print unplaced parts as warnings; they never fail the run."""
    unplaced = [p for p in result.unplaced_parts if p.quantity > 0]
    if not unplaced:
        return
    total = sum(p.quantity for p in unplaced)
    typer.echo(
        f"Warning: {total} part(s) in {len(unplaced)} row(s) could not be placed",
        err=True,
    )


@app.command()
def nest(
    job_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON job file"),
    ],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.TEXT,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write output to a file instead of stdout"),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Random seed for waste-minimizing bar search"),
    ] = None,
    placements: Annotated[
        bool,
        typer.Option(
            "--placements/--no-placements",
            help="List placed parts under each sheet (text output)",
        ),
    ] = True,
) -> None:
    """Run a sheet or bar nesting job and print the result."""
    try:
        job = load_job(job_file)
    except ConfigError as e:
        display_load_error(e)
        raise typer.Exit(code=1)

    # Warnings (unplaceable parts) still run; errors such as duplicate ids do not
    validation = validate_job(job)
    if not validation.is_valid:
        typer.echo("Errors:", err=True)
        for error in validation.errors:
            typer.echo(f"  {error.path}: {error.message}", err=True)
        typer.echo("Job has errors; run 'stocknest validate' for details.", err=True)
        raise typer.Exit(code=1)

    result = run_job(job, seed=seed)
    content = _render(result, output_format, placements)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content + "\n", encoding="utf-8")
        typer.echo(f"Wrote {output}")
    else:
        typer.echo(content)

    _warn_unplaced(result)


if __name__ == "__main__":
    app()
