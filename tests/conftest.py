"""
Pytest Configuration and Shared Fixtures

Provides fixtures for testing miri_launch components.
"""

import os
import subprocess
from pathlib import Path
from typing import Any, Dict, List

import pytest

from miri_launch.config import LauncherConfig

LAUNCHER_VARS = (
    "MIRI_NO_NEXTEST",
    "MIRIFLAGS",
    "RUSTFLAGS",
    "PROPTEST_CASES",
    "CARGO",
    "MIRI_LAUNCH_ROOT",
    "MIRI_LAUNCH_INSTALL_NEXTEST",
    "MIRI_LAUNCH_LOG",
)

CARGO_LIST_WITH_NEXTEST = """Installed Commands:
    add                  Add dependencies to a Cargo.toml manifest file
    build                Compile a local package and all of its dependencies
    miri
    nextest
    test                 Execute all unit and integration tests and build examples of a local package
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove launcher variables inherited from the developer's shell."""
    for var in LAUNCHER_VARS:
        # setenv first so teardown also undoes values loaded from .env files
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a Cargo workspace with one member crate."""
    root = tmp_path / "repo"
    (root / "crates" / "alloc" / "src").mkdir(parents=True)
    (root / "Cargo.toml").write_text('[workspace]\nmembers = ["crates/*"]\n')
    (root / "crates" / "alloc" / "Cargo.toml").write_text(
        '[package]\nname = "alloc"\nversion = "0.1.0"\n'
    )
    return root


@pytest.fixture
def config(workspace: Path) -> LauncherConfig:
    """Default configuration rooted at the sample workspace."""
    return LauncherConfig(root=workspace)


class FakeCargo:
    """Records subprocess.run calls and answers them like cargo would."""

    def __init__(self, list_output: str = CARGO_LIST_WITH_NEXTEST) -> None:
        self.list_output = list_output
        self.list_returncode = 0
        self.install_returncode = 0
        self.calls: List[List[str]] = []

    def __call__(self, args: List[str], **kwargs: Any) -> subprocess.CompletedProcess:
        self.calls.append(list(args))
        if args[1:] == ["--list"]:
            return subprocess.CompletedProcess(
                args, self.list_returncode, stdout=self.list_output, stderr=""
            )
        if args[1:2] == ["install"]:
            return subprocess.CompletedProcess(args, self.install_returncode)
        raise AssertionError(f"unexpected command: {args}")

    @property
    def installs(self) -> List[List[str]]:
        return [c for c in self.calls if c[1:2] == ["install"]]


@pytest.fixture
def fake_cargo(monkeypatch: pytest.MonkeyPatch) -> FakeCargo:
    """Replace subprocess.run with a fake cargo that has nextest installed."""
    fake = FakeCargo()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def fake_exec(monkeypatch: pytest.MonkeyPatch) -> Dict[str, Any]:
    """Capture os.execvpe instead of replacing the test process.

    The working directory is restored at teardown, so the launcher's real
    chdir is recorded as ``cwd``.
    """
    monkeypatch.chdir(os.getcwd())
    captured: Dict[str, Any] = {}

    def execvpe(file: str, args: List[str], env: Dict[str, str]) -> None:
        captured["file"] = file
        captured["args"] = args
        captured["env"] = env
        captured["cwd"] = Path.cwd()
        raise SystemExit(captured.get("exit_code", 0))

    monkeypatch.setattr(os, "execvpe", execvpe)
    return captured
