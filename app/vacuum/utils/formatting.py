"""Rich console formatting utilities.

Human-facing output only: manifest lines, refusal envelopes and progress
events are machine output and never go through these consoles.
"""

import json
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from vacuum import TOOL_NAME

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "outcome.complete": "#03b971",
        "outcome.refusal": "#f53263",
    }
)


def _detect_color_system() -> str | None:
    """Use truecolor on interactive terminals, otherwise let Rich decide."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


class JsonLogFormatter(logging.Formatter):
    """Render a log record as one JSON event line.

    Used in progress mode, where stderr carries line-delimited JSON events
    and Rich's column layout would break them.
    """

    def format(self, record: logging.LogRecord) -> str:
        event = {
            "type": "log",
            "tool": TOOL_NAME,
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        return json.dumps(event, ensure_ascii=False)


def build_log_handler(structured: bool = False) -> logging.Handler:
    """Create the stderr handler for library logging.

    Args:
        structured: Emit JSON event lines instead of Rich output.
    """
    if structured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonLogFormatter())
        return handler
    return RichHandler(console=err_console, show_path=False)


def configure_logging(verbose: bool, *, structured: bool = False) -> None:
    """Route library logging to stderr.

    Without ``verbose`` only warnings and above are shown. With
    ``structured`` every record becomes a ``{"type": "log"}`` JSON line so
    it can share stderr with progress events.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[build_log_handler(structured)],
    )


def create_witness_table(title: str = "Witness Ledger") -> Table:
    """Create a pre-configured table for witness records."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Timestamp", style="muted", no_wrap=True)
    table.add_column("Tool", style="text")
    table.add_column("Outcome", no_wrap=True)
    table.add_column("Exit", justify="right")
    table.add_column("Input hash", style="info", overflow="ellipsis")
    return table


def format_outcome(outcome: str) -> str:
    """Color an outcome string for table display."""
    if outcome == "SCAN_COMPLETE":
        return f"[outcome.complete]{outcome}[/]"
    return f"[outcome.refusal]{outcome}[/]"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")
