"""Typer CLI for guillotine cutting plans."""

import logging
from pathlib import Path
from typing import Annotated

import typer

from cutplan.application.config import ConfigError, job_to_engine, load_job
from cutplan.domain import (
    ErrorCode,
    OptimizationLevel,
    StackingPreference,
    make_signatures,
)
from cutplan.infrastructure import (
    BinDiagramRenderer,
    JsonExporter,
    PackingResult,
    PackingResultFormatter,
)

logger = logging.getLogger(__name__)

_OUTPUT_FORMATS = ("text", "json")

app = typer.Typer(
    name="cutplan",
    help="Plan guillotine cuts of rectangular boxes out of sheets and offcuts.",
)


def _parse_optimization(value: str | None) -> OptimizationLevel | None:
    if value is None:
        return None
    try:
        return OptimizationLevel(value.lower())
    except ValueError:
        choices = ", ".join(level.value for level in OptimizationLevel)
        typer.echo(f"Unknown optimization level: {value} (choose from {choices})", err=True)
        raise typer.Exit(code=1)


def _parse_stacking(value: str | None) -> StackingPreference | None:
    if value is None:
        return None
    try:
        return StackingPreference(value.lower())
    except ValueError:
        choices = ", ".join(pref.value for pref in StackingPreference)
        typer.echo(f"Unknown stacking preference: {value} (choose from {choices})", err=True)
        raise typer.Exit(code=1)


def _write_svgs(result: PackingResult, svg_dir: Path) -> None:
    svg_dir.mkdir(parents=True, exist_ok=True)
    renderer = BinDiagramRenderer()
    for i, svg in enumerate(renderer.render_all_svg(result), start=1):
        svg_path = svg_dir / f"bin_{i}.svg"
        svg_path.write_text(svg)
        typer.echo(f"SVG exported to: {svg_path}", err=True)


@app.command()
def pack(
    job_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON job file"),
    ],
    optimization: Annotated[
        str | None,
        typer.Option("--optimization", "-O", help="Optimization level: medium, advanced"),
    ] = None,
    stacking: Annotated[
        str | None,
        typer.Option("--stacking", help="Stacking preference: none, length, width, all"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Time budget in seconds"),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text, json"),
    ] = "text",
    svg_dir: Annotated[
        Path | None,
        typer.Option("--svg-dir", help="Directory receiving one SVG diagram per bin"),
    ] = None,
    show_cuts: Annotated[
        bool,
        typer.Option("--show-cuts", help="List every cut in text output"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log search progress and dump the packer tree"),
    ] = False,
) -> None:
    """Compute a cutting plan for a job file.

    Options given on the command line override the job file's options.

    Examples:
        cutplan pack job.json
        cutplan pack job.json -O advanced --format json
        cutplan pack job.json --svg-dir ./plans
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    output_format = output_format.lower()
    if output_format not in _OUTPUT_FORMATS:
        typer.echo(f"Unknown format: {output_format}", err=True)
        typer.echo(f"Available formats: {', '.join(_OUTPUT_FORMATS)}", err=True)
        raise typer.Exit(code=1)

    try:
        job = load_job(job_file)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        engine = job_to_engine(
            job,
            optimization=_parse_optimization(optimization),
            stacking=_parse_stacking(stacking),
            timeout=timeout,
            debug=True if debug else None,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    result, code = engine.run()
    logger.info("Packing finished with %s in %.3f s", code.value, engine.elapsed)

    if output_format == "json":
        typer.echo(JsonExporter().export(result, code))
    elif result is not None:
        typer.echo(PackingResultFormatter(show_cuts=show_cuts).format(result))

    if result is not None and svg_dir is not None:
        _write_svgs(result, svg_dir)

    if code != ErrorCode.NONE:
        if output_format == "text":
            typer.echo(f"Error: packing failed ({code.value})", err=True)
        raise typer.Exit(code=1)


@app.command()
def signatures(
    optimization: Annotated[
        str,
        typer.Option("--optimization", "-O", help="Optimization level: medium, advanced"),
    ] = "medium",
    stacking: Annotated[
        str,
        typer.Option("--stacking", help="Stacking preference: none, length, width, all"),
    ] = "all",
    list_all: Annotated[
        bool,
        typer.Option("--list", help="Print every signature"),
    ] = False,
) -> None:
    """Show the number of heuristic combinations tried per bin."""
    level = _parse_optimization(optimization)
    pref = _parse_stacking(stacking)
    sigs = make_signatures(level, pref)
    typer.echo(f"{len(sigs)} signature(s) for {level.value}/{pref.value}")
    if list_all:
        for sig in sigs:
            typer.echo(str(sig))


@app.command()
def validate(
    job_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON job file to validate"),
    ],
) -> None:
    """Check a job file without packing it.

    Exit codes:
        0 - Job is valid
        1 - Job has errors
    """
    try:
        job = load_job(job_file)
    except ConfigError as e:
        typer.echo("Errors:", err=True)
        if e.error_type == "validation":
            for detail in e.details:
                typer.echo(f"  {detail['path']}: {detail['message']}", err=True)
        else:
            typer.echo(f"  {e.message}", err=True)
        raise typer.Exit(code=1)

    n_bins = sum(b.count for b in job.bins)
    n_boxes = sum(b.count for b in job.boxes)
    typer.echo(f"Job is valid: {n_bins} bin(s), {n_boxes} box(es)")


if __name__ == "__main__":
    app()
