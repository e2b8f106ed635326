"""Configuration commands.

Provides ``vacuum config show`` and ``vacuum config init``.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from vacuum.core.config import VacuumConfig, load_settings, save_config
from vacuum.core.errors import ConfigError
from vacuum.core.paths import get_config_path
from vacuum.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    name="config",
    help="Show or initialize the configuration file.",
    add_completion=False,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def config(
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
    """Manage ~/.config/vacuum/config.toml."""
    ctx.obj = config_path or get_config_path()


@app.command()
def show(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Print the effective configuration."""
    try:
        settings = load_settings(ctx.obj)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None

    data = settings.config.model_dump(mode="json")
    data["witness_path"] = str(settings.witness_path)

    if json_output:
        typer.echo(json.dumps(data, indent=2))
        return

    source = settings.config_path if settings.config_path.exists() else "defaults"
    table = Table(
        title=f"Configuration ({source})",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", style="muted", no_wrap=True)
    table.add_column("Value", style="text")
    for key, value in data.items():
        text = ", ".join(value) if isinstance(value, list) else str(value)
        table.add_row(key, escape(text))
    console.print(table)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing configuration."),
    ] = False,
) -> None:
    """Write a configuration file with the default settings."""
    path: Path = ctx.obj
    if path.exists() and not force:
        print_info(f"Configuration already exists: {path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(VacuumConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None

    print_success(f"Configuration written to {saved}")
