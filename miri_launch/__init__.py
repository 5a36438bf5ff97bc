"""
miri-launch

Runs a Rust workspace's unit tests under Miri, preferring cargo-nextest.
"""

__version__ = "0.1.0"

from miri_launch.config import LauncherConfig, find_repo_root, get_config
from miri_launch.errors import (
    CargoNotFoundError,
    InstallError,
    LauncherError,
    RootNotFoundError,
)
from miri_launch.flags import MIRI_FLAGS, RUST_FLAGS, build_environment, merge_flags
from miri_launch.runner import RunnerCommand, select_runner

__all__ = [
    "__version__",
    "CargoNotFoundError",
    "InstallError",
    "LauncherConfig",
    "LauncherError",
    "MIRI_FLAGS",
    "RUST_FLAGS",
    "RootNotFoundError",
    "RunnerCommand",
    "build_environment",
    "find_repo_root",
    "get_config",
    "merge_flags",
    "select_runner",
]
