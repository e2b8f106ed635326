"""Main CLI application entry point.

``vacuum ROOT...`` is the scan itself; ``vacuum witness ...`` and
``vacuum config ...`` are sub-command groups. The first argument decides
which Typer application handles the invocation, so a root directory
literally named ``witness`` or ``config`` must be passed as ``./witness``.
"""

import sys
from collections.abc import Sequence

import typer

from vacuum import TOOL_NAME
from vacuum.cli.commands import config, scan, witness

app = scan.app

SUBCOMMANDS: dict[str, typer.Typer] = {
    "witness": witness.app,
    "config": config.app,
}


def route(argv: Sequence[str]) -> tuple[typer.Typer, list[str], str]:
    """Pick the application for an argument vector.

    Returns:
        Tuple of (application, remaining arguments, program name).
    """
    args = list(argv)
    if args and args[0] in SUBCOMMANDS:
        name = args[0]
        return SUBCOMMANDS[name], args[1:], f"{TOOL_NAME} {name}"
    return app, args, TOOL_NAME


def main(argv: Sequence[str] | None = None) -> None:
    """Console script entry point."""
    target, args, prog_name = route(sys.argv[1:] if argv is None else argv)
    target(args=args, prog_name=prog_name)


if __name__ == "__main__":
    main()
