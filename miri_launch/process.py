"""
Process Replacement

Hands control to the test run. On POSIX the launcher process is replaced so
signals and the exit status belong to the test run itself.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, Sequence

from miri_launch.errors import CargoNotFoundError, RootNotFoundError

logger = logging.getLogger(__name__)


def exec_test_command(argv: Sequence[str], env: Mapping[str, str], cwd: Path) -> int:
    """
    Run the test command from ``cwd`` with ``env``.

    On POSIX this does not return. On Windows, where exec does not keep the
    parent's console and exit status semantics, the command runs as a child
    with inherited streams and its return code is returned.

    Raises:
        RootNotFoundError: If ``cwd`` cannot be entered
        CargoNotFoundError: If the executable cannot be found or run
    """
    try:
        os.chdir(cwd)
    except OSError as e:
        raise RootNotFoundError(f"cannot enter repository root {cwd}: {e.strerror}") from e
    logger.debug("exec %s in %s", list(argv), cwd)

    try:
        if os.name == "nt":
            return subprocess.run(list(argv), env=dict(env), check=False).returncode
        os.execvpe(argv[0], list(argv), dict(env))
    except OSError as e:
        raise CargoNotFoundError(argv[0]) from e

    # execvpe only returns by raising
    raise AssertionError("unreachable")
