"""The root ``vacuum`` command: scan roots and emit the manifest.

Manifest records and refusal envelopes go to stdout, progress and skip
warnings to stderr. Everything a human reads (errors, ledger warnings)
goes through the rich error console.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from vacuum import TOOL_NAME, __version__
from vacuum.core.config import Settings, load_settings
from vacuum.core.errors import ConfigError, LedgerError
from vacuum.core.pipeline import ScanPipeline, ScanRequest, ScanResult
from vacuum.output.contract import operator_manifest, record_schema, render
from vacuum.utils.formatting import configure_logging, print_error, print_warning
from vacuum.witness.ledger import WitnessLedger
from vacuum.witness.models import create_witness_record

logger = logging.getLogger(__name__)

app = typer.Typer(
    name=TOOL_NAME,
    help="Enumerate files under one or more roots as a deterministic JSONL manifest.",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"{TOOL_NAME} {__version__}")
        raise typer.Exit()


@app.command()
def scan(
    roots: Annotated[
        list[str] | None,
        typer.Argument(
            help="Directories to scan recursively.",
            show_default=False,
        ),
    ] = None,
    include: Annotated[
        list[str] | None,
        typer.Option(
            "--include",
            help="Keep only relative paths matching this glob (repeatable).",
            show_default=False,
        ),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude",
            help="Drop relative paths matching this glob (repeatable).",
            show_default=False,
        ),
    ] = None,
    no_follow: Annotated[
        bool,
        typer.Option(
            "--no-follow",
            help="Do not follow symbolic links.",
        ),
    ] = False,
    progress: Annotated[
        bool,
        typer.Option(
            "--progress",
            help="Emit structured progress events on stderr.",
        ),
    ] = False,
    no_witness: Annotated[
        bool,
        typer.Option(
            "--no-witness",
            help="Do not append to the witness ledger.",
        ),
    ] = False,
    describe: Annotated[
        bool,
        typer.Option(
            "--describe",
            help="Print the operator manifest and exit.",
        ),
    ] = False,
    schema: Annotated[
        bool,
        typer.Option(
            "--schema",
            help="Print the JSON Schema of a manifest record and exit.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Configuration file (default: ~/.config/vacuum/config.toml).",
            show_default=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging on stderr.",
        ),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Scan ROOTS and print one JSON record per file, sorted.

    Examples:
        vacuum ./data                        # Manifest of ./data
        vacuum ./a ./b --include '*.csv'     # CSV files at the top of two roots
        vacuum ./data --exclude '**/tmp/**'  # Skip everything under tmp/
        vacuum --describe                    # Operator manifest
    """
    if verbose:
        configure_logging(verbose=True, structured=progress)

    if describe:
        _write_document(render(operator_manifest()))
        return
    if schema:
        _write_document(render(record_schema()))
        return

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None

    request = build_request(
        settings,
        roots=roots or [],
        include=include or [],
        exclude=exclude or [],
        no_follow=no_follow,
        progress=progress,
    )
    result = ScanPipeline(request, stdout=sys.stdout, stderr=sys.stderr).run()

    if settings.config.witness and not no_witness:
        record_witness(settings, result)

    if result.exit_code != 0:
        raise typer.Exit(code=result.exit_code)


def build_request(
    settings: Settings,
    *,
    roots: list[str],
    include: list[str],
    exclude: list[str],
    no_follow: bool,
    progress: bool,
) -> ScanRequest:
    """Combine configured defaults with command-line options.

    Configured patterns come first; ``--no-follow`` always wins over the
    configured symlink policy.
    """
    config = settings.config
    return ScanRequest(
        roots=tuple(roots),
        include=(*config.include, *include),
        exclude=(*config.exclude, *exclude),
        follow_symlinks=config.follow_symlinks and not no_follow,
        progress=progress,
        progress_interval_ms=config.progress_interval_ms,
        progress_batch=config.progress_batch,
    )


def record_witness(settings: Settings, result: ScanResult) -> None:
    """Append the run to the witness ledger; failures only warn."""
    ledger = WitnessLedger(settings.witness_path)
    try:
        ledger.append(create_witness_record(result.outcome, result.input_hash))
    except LedgerError as e:
        print_warning(str(e))
        return
    logger.debug("Witness appended to %s", ledger.path)


def _write_document(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()
