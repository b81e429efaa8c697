#!/usr/bin/env python3
"""
CV Generation CLI

Generates CV PDFs from raw JSON records using the cvpress pipeline.

Commands:
    generate  - Render a record to PDF (or base64)
    normalize - Print the display projection for a record
    preview   - Render the HTML markup only (no browser)

Examples:\n

    generate_cv.py generate cv.json                       # Writes cv.pdf next to the input

    generate_cv.py generate cv.json -o out/thandi.pdf     # Explicit output path

    generate_cv.py generate cv.json --base64 > cv.b64     # Base64 to stdout

    generate_cv.py normalize cv.json                      # Projection as JSON

    generate_cv.py preview cv.json -o cv.html             # Markup for browser inspection
"""

import asyncio
import base64
import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from cvpress.contexts.intake.normalizer import projection_to_record
from cvpress.exceptions import CVPressError
from cvpress.pipeline import CVPipeline
from cvpress.settings import load_settings
from cvpress.utils.logger import setup_logger
from cvpress.utils.timestamp import now

load_dotenv()

app = typer.Typer(
    help="Generate CV PDFs from raw JSON field records",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def load_record(record_path: Path) -> dict:
    """Load a raw record from a JSON file, exiting with a message on bad input."""
    try:
        record = json.loads(record_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.secho(f"Error: could not read record {record_path}: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if not isinstance(record, dict):
        typer.secho("Error: record must be a JSON object\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    return record


def _jsonable(value):
    return asdict(value) if is_dataclass(value) else value


@app.command("generate")
def generate_command(
    record_path: Annotated[Path, typer.Argument(help="JSON file with the raw CV record")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="PDF output path (default: record path with .pdf)"),
    ] = None,
    as_base64: Annotated[
        bool,
        typer.Option("--base64", help="Print the PDF base64-encoded to stdout instead of writing a file"),
    ] = False,
    retries: Annotated[
        Optional[int],
        typer.Option("--retries", "-r", help="Extra render attempts (default: from settings)", min=0, max=5),
    ] = None,
    log_dir: Annotated[
        Optional[Path],
        typer.Option("--log-dir", help="Directory for a DEBUG-level session log"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging on the console"),
    ] = False,
):
    """
    Render a raw CV record to PDF.

    Examples:\n

        $ generate_cv.py generate cv.json                 # Writes cv.pdf

        $ generate_cv.py generate cv.json --retries 2     # Up to three attempts
    """
    overrides = {"retry_attempts": retries} if retries is not None else None
    settings = load_settings(overrides=overrides)

    setup_logger(
        context_name="generate",
        log_dir=log_dir / f"generate_{now()}" if log_dir else None,
        console_level="DEBUG" if verbose else settings.log_level,
        extra_provenance={"Template": settings.template_name},
    )

    record = load_record(record_path)
    pipeline = CVPipeline(settings)

    try:
        report = asyncio.run(pipeline.agenerate_with_report(record))
    except CVPressError as e:
        typer.secho(f"✗ {e.user_message}", fg=typer.colors.RED, bold=True, err=True)
        raise typer.Exit(code=1)

    pdf = report.pdf
    if as_base64:
        typer.echo(base64.b64encode(pdf).decode("ascii"))
        raise typer.Exit(code=0)

    output = output or record_path.with_suffix(".pdf")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pdf)

    typer.secho("✓ PDF generated", fg=typer.colors.GREEN, bold=True, err=True)
    typer.echo(f"  Size: {len(pdf)} bytes", err=True)
    typer.echo(f"  Attempts: {report.attempts}", err=True)
    typer.echo(f"  PDF: {output}", err=True)


@app.command("normalize")
def normalize_command(
    record_path: Annotated[Path, typer.Argument(help="JSON file with the raw CV record")],
    as_record: Annotated[
        bool,
        typer.Option("--as-record", help="Print the projection serialized back to raw record keys"),
    ] = False,
):
    """
    Print the display projection a record normalizes to.

    Examples:\n

        $ generate_cv.py normalize cv.json                # Projection with synthesized keys

        $ generate_cv.py normalize cv.json --as-record    # Cleaned raw record
    """
    settings = load_settings()
    record = load_record(record_path)
    projection = CVPipeline(settings).project(record)

    if as_record:
        output = projection_to_record(projection)
    else:
        output = {key: _jsonable(value) for key, value in projection.items()}

    typer.echo(json.dumps(output, indent=2, ensure_ascii=False))


@app.command("preview")
def preview_command(
    record_path: Annotated[Path, typer.Argument(help="JSON file with the raw CV record")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="HTML output path (default: record path with .html)"),
    ] = None,
):
    """
    Render the CV markup without launching a browser.

    Examples:\n

        $ generate_cv.py preview cv.json                  # Writes cv.html
    """
    settings = load_settings()
    record = load_record(record_path)

    try:
        html = CVPipeline(settings).preview_html(record)
    except CVPressError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    output = output or record_path.with_suffix(".html")
    output.write_text(html, encoding="utf-8")
    typer.secho("✓ Markup rendered", fg=typer.colors.GREEN, bold=True, err=True)
    typer.echo(f"  HTML: {output}", err=True)


if __name__ == "__main__":
    app()
