"""
Launcher Output

Logging setup and the status lines printed to stderr.
"""

import logging
import shlex
from pathlib import Path
from typing import Mapping, Optional, Sequence

import click
from rich.console import Console
from rich.logging import RichHandler

from miri_launch.flags import MIRIFLAGS_VAR, PROPTEST_CASES_VAR, RUSTFLAGS_VAR

LOGGER_NAME = "miri_launch"

_handler: Optional[logging.Handler] = None


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """
    Attach a rich stderr handler to the package logger.

    Safe to call more than once; the handler is installed only once and the
    level is updated on every call.
    """
    global _handler
    logger = logging.getLogger(LOGGER_NAME)

    if _handler is None:
        _handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )
        logger.addHandler(_handler)
        logger.propagate = False

    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING
    logger.setLevel(resolved)
    return logger


def status(label: str, message: str) -> None:
    """Print a right-aligned, cargo-style status line."""
    click.echo(f"{click.style(label.rjust(12), fg='green', bold=True)} {message}", err=True)


def warn(message: str) -> None:
    click.echo(f"{click.style('warning', fg='yellow', bold=True)}: {message}", err=True)


def note(message: str) -> None:
    click.echo(f"{click.style('note', fg='cyan', bold=True)}: {message}", err=True)


def error(message: str) -> None:
    click.echo(f"{click.style('error', fg='red', bold=True)}: {message}", err=True)


def report_invocation(
    argv: Sequence[str],
    env: Mapping[str, str],
    root: Path,
    accelerated: bool = True,
) -> None:
    """Echo the effective environment, runner and command line."""
    for var in (MIRIFLAGS_VAR, RUSTFLAGS_VAR, PROPTEST_CASES_VAR):
        status("Env", f"{var}={env.get(var, '')}")
    status("Root", str(root))
    status("Runner", "cargo-nextest" if accelerated else "cargo miri test (built-in)")
    status("Running", shlex.join(argv))
