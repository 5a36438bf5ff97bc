"""
Launcher Configuration

Environment settings, repository root detection and .env loading.
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from miri_launch.errors import RootNotFoundError

logger = logging.getLogger(__name__)

# Environment variables
NO_NEXTEST_VAR = "MIRI_NO_NEXTEST"
CARGO_VAR = "CARGO"
ROOT_VAR = "MIRI_LAUNCH_ROOT"
INSTALL_NEXTEST_VAR = "MIRI_LAUNCH_INSTALL_NEXTEST"
LOG_LEVEL_VAR = "MIRI_LAUNCH_LOG"

DEFAULT_CARGO = "cargo"
DEFAULT_LOG_LEVEL = "WARNING"
MANIFEST_FILE = "Cargo.toml"
ENV_FILE = ".env"

_TRUTHY = {"1", "y", "yes", "true", "on"}
_FALSY = {"0", "n", "no", "false", "off"}


def parse_answer(value: Optional[str]) -> Optional[bool]:
    """Interpret a yes/no environment value; None if unset or unrecognized."""
    if value is None:
        return None
    normalized = value.strip().casefold()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    return None


@dataclass
class LauncherConfig:
    """Snapshot of the environment inputs the launcher reads."""

    root: Path
    cargo: str = DEFAULT_CARGO
    force_fallback: bool = False
    install_answer: Optional[bool] = None
    install_answer_raw: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        """Ensure root is a Path."""
        if isinstance(self.root, str):
            self.root = Path(self.root)

    @classmethod
    def from_env(cls, root: Path, environ: Mapping[str, str]) -> "LauncherConfig":
        """Create from an environment mapping."""
        raw_answer = environ.get(INSTALL_NEXTEST_VAR)
        return cls(
            root=root,
            cargo=environ.get(CARGO_VAR) or DEFAULT_CARGO,
            force_fallback=bool(environ.get(NO_NEXTEST_VAR)),
            install_answer=parse_answer(raw_answer),
            install_answer_raw=raw_answer,
            log_level=(environ.get(LOG_LEVEL_VAR) or DEFAULT_LOG_LEVEL).upper(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "root": str(self.root),
            "cargo": self.cargo,
            "force_fallback": self.force_fallback,
            "install_answer": self.install_answer,
            "log_level": self.log_level,
        }


def _declares_workspace(manifest: Path) -> bool:
    try:
        with open(manifest, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("could not parse %s: %s", manifest, e)
        return False
    return "workspace" in data


def detect_repo_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Detect the Cargo workspace root.

    Walks up from start_path. The nearest directory whose Cargo.toml declares
    a [workspace] wins; otherwise the outermost directory holding a
    Cargo.toml is used.

    Args:
        start_path: Starting directory (defaults to cwd)

    Returns:
        Path to the repository root if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()
    outermost: Optional[Path] = None

    for directory in (current, *current.parents):
        manifest = directory / MANIFEST_FILE
        if not manifest.is_file():
            continue
        if _declares_workspace(manifest):
            return directory
        outermost = directory

    return outermost


def find_repo_root(
    environ: Optional[Mapping[str, str]] = None,
    start_path: Optional[Path] = None,
) -> Path:
    """
    Resolve the repository root or fail.

    MIRI_LAUNCH_ROOT takes precedence over detection.

    Raises:
        RootNotFoundError: If no root can be resolved
    """
    if environ is None:
        environ = os.environ

    explicit = environ.get(ROOT_VAR)
    if explicit:
        root = Path(explicit).expanduser()
        if not root.is_dir():
            raise RootNotFoundError(f"{ROOT_VAR} is not a directory: {root}")
        return root.resolve()

    root = detect_repo_root(start_path)
    if root is None:
        where = (start_path or Path.cwd()).resolve()
        raise RootNotFoundError(
            f"could not find a {MANIFEST_FILE} in {where} or any parent directory"
        )
    return root


def load_env_file(root: Path) -> Optional[Path]:
    """
    Load a .env file into os.environ without overriding existing variables.

    The repository root's .env is preferred over the current directory's.

    Returns:
        Path of the loaded file, or None
    """
    for env_path in (root / ENV_FILE, Path.cwd() / ENV_FILE):
        if env_path.is_file():
            load_dotenv(env_path, override=False)
            logger.debug("loaded environment from %s", env_path)
            return env_path
    return None


def get_config(
    environ: Optional[Mapping[str, str]] = None,
    start_path: Optional[Path] = None,
) -> LauncherConfig:
    """
    Get configuration with root detection.

    Args:
        environ: Environment to read (defaults to os.environ)
        start_path: Where root detection starts (defaults to cwd)

    Returns:
        Configured LauncherConfig instance
    """
    if environ is None:
        environ = os.environ

    root = find_repo_root(environ, start_path)
    if environ is os.environ:
        load_env_file(root)

    return LauncherConfig.from_env(root, environ)
