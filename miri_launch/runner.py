"""
Runner Selection

Chooses between cargo-nextest and the built-in `cargo miri test`, offering to
install nextest when it is missing.
"""

import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import click

from miri_launch import output
from miri_launch.config import INSTALL_NEXTEST_VAR, NO_NEXTEST_VAR, LauncherConfig
from miri_launch.errors import CargoNotFoundError, InstallError

logger = logging.getLogger(__name__)

ACCELERATED_SUBCOMMAND = ("miri", "nextest", "run")
FALLBACK_SUBCOMMAND = ("miri", "test")
NEXTEST_PLUGIN = "nextest"
NEXTEST_CRATE = "cargo-nextest"
LIB_FLAG = "--lib"

INSTALL_PROMPT = f"install {NEXTEST_CRATE} now?"


@dataclass(frozen=True)
class RunnerCommand:
    """Base test command, selected once per invocation."""

    base: Tuple[str, ...]
    accelerated: bool

    def argv(self, extra: Sequence[str] = ()) -> List[str]:
        """Full argument vector: base command, --lib, then caller args."""
        return [*self.base, LIB_FLAG, *extra]


def accelerated_command(cargo: str) -> RunnerCommand:
    return RunnerCommand(base=(cargo, *ACCELERATED_SUBCOMMAND), accelerated=True)


def fallback_command(cargo: str) -> RunnerCommand:
    return RunnerCommand(base=(cargo, *FALLBACK_SUBCOMMAND), accelerated=False)


def nextest_installed(cargo: str) -> bool:
    """
    Check whether cargo lists a `nextest` subcommand.

    A failing `cargo --list` is treated as "not installed".

    Raises:
        CargoNotFoundError: If cargo cannot be executed
    """
    try:
        result = subprocess.run(
            [cargo, "--list"],
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as e:
        raise CargoNotFoundError(cargo) from e

    if result.returncode != 0:
        logger.warning(
            "`%s --list` exited with %d; assuming %s is not installed",
            cargo,
            result.returncode,
            NEXTEST_CRATE,
        )
        return False

    for line in result.stdout.splitlines():
        fields = line.split()
        if fields and fields[0] == NEXTEST_PLUGIN:
            return True
    return False


def install_nextest(cargo: str) -> None:
    """
    Install cargo-nextest with `cargo install`, streaming its output.

    Raises:
        InstallError: If the installer exits non-zero
        CargoNotFoundError: If cargo cannot be executed
    """
    command = [cargo, "install", NEXTEST_CRATE, "--locked"]
    output.status("Installing", NEXTEST_CRATE)
    logger.debug("running %s", command)
    try:
        result = subprocess.run(command, check=False)
    except OSError as e:
        raise CargoNotFoundError(cargo) from e

    if result.returncode != 0:
        raise InstallError(result.returncode)


def _stdin_is_interactive() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def should_install(
    config: LauncherConfig,
    confirm: Callable[..., bool] = click.confirm,
    interactive: Optional[bool] = None,
) -> bool:
    """
    Decide whether to install cargo-nextest.

    An explicit MIRI_LAUNCH_INSTALL_NEXTEST answer wins. Without one, a
    non-interactive stdin declines instead of blocking on the prompt.
    """
    if config.install_answer is not None:
        logger.info("%s=%s answers the install prompt", INSTALL_NEXTEST_VAR, config.install_answer_raw)
        return config.install_answer

    if config.install_answer_raw is not None:
        output.warn(
            f"ignoring unrecognized {INSTALL_NEXTEST_VAR}={config.install_answer_raw!r} "
            "(expected yes or no)"
        )

    if interactive is None:
        interactive = _stdin_is_interactive()

    if not interactive:
        output.warn(
            f"stdin is not a terminal, not installing {NEXTEST_CRATE} "
            f"(set {INSTALL_NEXTEST_VAR}=yes to install it unattended)"
        )
        return False

    return confirm(INSTALL_PROMPT, default=False, err=True)


def select_runner(
    config: LauncherConfig,
    confirm: Callable[..., bool] = click.confirm,
    interactive: Optional[bool] = None,
) -> RunnerCommand:
    """
    Select the base test command.

    Args:
        config: Launcher configuration
        confirm: Yes/no prompt, click.confirm-compatible
        interactive: Override stdin TTY detection

    Returns:
        The accelerated command when nextest is (or becomes) available,
        otherwise the fallback command
    """
    cargo = config.cargo

    if config.force_fallback:
        logger.info("%s is set, using `cargo miri test`", NO_NEXTEST_VAR)
        return fallback_command(cargo)

    if nextest_installed(cargo):
        return accelerated_command(cargo)

    output.warn(f"missing {NEXTEST_CRATE} executable")
    if should_install(config, confirm=confirm, interactive=interactive):
        install_nextest(cargo)
        return accelerated_command(cargo)

    output.note(f"falling back to `{cargo} miri test`, which may be slower")
    output.note(f"set {NO_NEXTEST_VAR}=1 to skip this check")
    return fallback_command(cargo)
