"""
Launcher Errors

Fatal conditions that stop the launcher before the test run starts.
"""

from typing import Optional


class LauncherError(Exception):
    """Base class for fatal launcher errors."""

    exit_code: int = 1

    def __init__(self, message: str, exit_code: Optional[int] = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class RootNotFoundError(LauncherError):
    """Raised when the repository root cannot be located."""

    pass


class InstallError(LauncherError):
    """Raised when installing cargo-nextest fails.

    The exit code is the installer's own, so the launcher exits the same way
    ``cargo install`` did.
    """

    def __init__(self, returncode: int) -> None:
        super().__init__(
            f"failed to install cargo-nextest (cargo install exited with {returncode})",
            exit_code=returncode or 1,
        )
        self.returncode = returncode


class CargoNotFoundError(LauncherError):
    """Raised when the cargo binary cannot be executed."""

    exit_code = 127

    def __init__(self, cargo: str) -> None:
        super().__init__(
            f"could not execute `{cargo}`. Is the Rust toolchain installed? "
            "Set CARGO to point at a cargo binary."
        )
        self.cargo = cargo
