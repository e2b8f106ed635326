"""Witness ledger commands.

Provides ``vacuum witness query|last|count`` for reading the audit trail
of past invocations.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from vacuum.core.config import load_settings
from vacuum.core.errors import ConfigError, QueryError
from vacuum.utils.formatting import (
    console,
    create_witness_table,
    format_outcome,
    print_error,
    print_info,
)
from vacuum.witness.ledger import WitnessLedger
from vacuum.witness.models import WitnessRecord
from vacuum.witness.query import WitnessFilter, count, select

app = typer.Typer(
    name="witness",
    help="Query the witness ledger.",
    add_completion=False,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Shared option declarations for the filtering commands
ToolOption = Annotated[str | None, typer.Option("--tool", help="Exact tool name.")]
OutcomeOption = Annotated[
    str | None,
    typer.Option("--outcome", help="Exact outcome (SCAN_COMPLETE, REFUSAL)."),
]
SinceOption = Annotated[
    str | None,
    typer.Option("--since", help="Records at or after this ISO 8601 date/time."),
]
UntilOption = Annotated[
    str | None,
    typer.Option("--until", help="Records at or before this ISO 8601 date/time."),
]
InputHashOption = Annotated[
    str | None,
    typer.Option("--input-hash", help="Substring of the input hash."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]


@app.callback()
def witness(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Configuration file (default: ~/.config/vacuum/config.toml).",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Inspect the witness ledger of past vacuum runs."""
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None
    ctx.obj = WitnessLedger(settings.witness_path)


@app.command()
def query(
    ctx: typer.Context,
    tool: ToolOption = None,
    since: SinceOption = None,
    until: UntilOption = None,
    outcome: OutcomeOption = None,
    input_hash: InputHashOption = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Keep at most N records."),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """List matching records, oldest first.

    Examples:
        vacuum witness query --outcome REFUSAL
        vacuum witness query --since 2026-01-01 --json
    """
    criteria = _build_filter(tool, outcome, since, until, input_hash)
    records = select(_read(ctx), criteria, limit=limit)

    if json_output:
        typer.echo(json.dumps([r.to_dict() for r in records], indent=2))
    elif records:
        _print_table(records)
    else:
        print_info("No matching witness records.")

    if not records:
        raise typer.Exit(code=1)


@app.command()
def last(
    ctx: typer.Context,
    json_output: JsonOption = False,
) -> None:
    """Show the most recent record."""
    ledger: WitnessLedger = ctx.obj
    try:
        record = ledger.last()
    except OSError as e:
        print_error(f"Cannot read witness ledger {ledger.path}: {e}")
        raise typer.Exit(code=2) from None

    if record is None:
        if json_output:
            typer.echo("null")
        else:
            print_info("Witness ledger is empty.")
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(record.to_dict(), indent=2))
    else:
        for key, value in record.to_dict().items():
            console.print(f"[muted]{key}:[/] {escape(str(value))}")


@app.command("count")
def count_command(
    ctx: typer.Context,
    tool: ToolOption = None,
    since: SinceOption = None,
    until: UntilOption = None,
    outcome: OutcomeOption = None,
    input_hash: InputHashOption = None,
    json_output: JsonOption = False,
) -> None:
    """Count matching records."""
    criteria = _build_filter(tool, outcome, since, until, input_hash)
    n = count(_read(ctx), criteria)

    if json_output:
        typer.echo(json.dumps({"count": n}))
    else:
        typer.echo(str(n))

    if n == 0:
        raise typer.Exit(code=1)


def _build_filter(
    tool: str | None,
    outcome: str | None,
    since: str | None,
    until: str | None,
    input_hash: str | None,
) -> WitnessFilter:
    try:
        return WitnessFilter.from_options(
            tool=tool,
            outcome=outcome,
            since=since,
            until=until,
            input_hash=input_hash,
        )
    except QueryError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None


def _read(ctx: typer.Context) -> list[WitnessRecord]:
    ledger: WitnessLedger = ctx.obj
    try:
        return ledger.read_all()
    except OSError as e:
        print_error(f"Cannot read witness ledger {ledger.path}: {e}")
        raise typer.Exit(code=2) from None


def _print_table(records: list[WitnessRecord]) -> None:
    table = create_witness_table()
    for record in records:
        table.add_row(
            record.ts,
            escape(record.tool),
            format_outcome(escape(record.outcome)),
            str(record.exit_code),
            record.input_hash or "-",
        )
    console.print(table)
