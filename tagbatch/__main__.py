"""
Console script entry point.

Runs the Typer application and turns errors that escape an action into a
Rich error panel and a non-zero exit status.
"""

import logging
import os
import sys

import click
import typer
from rich.console import Console

from tagbatch.cli.app import app
from tagbatch.cli.formatters import format_error_with_suggestions
from tagbatch.exceptions import TagbatchError

EXIT_FAILURE = 1


def _force_utf8_streams() -> None:
    # Windows consoles default to a legacy code page.
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(encoding="utf-8")


def main() -> None:
    if os.name == "nt":
        _force_utf8_streams()

    errors = Console(stderr=True)
    try:
        exit_code = app(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except (typer.Abort, KeyboardInterrupt):
        errors.print("\n[yellow]Interrupted, stopping.[/yellow]")
        sys.exit(0)
    except TagbatchError as e:
        errors.print(format_error_with_suggestions(e))
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        errors.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        logging.getLogger("tagbatch").debug("Unhandled exception", exc_info=True)
        sys.exit(EXIT_FAILURE)
    sys.exit(exit_code if isinstance(exit_code, int) else 0)


if __name__ == "__main__":
    main()
