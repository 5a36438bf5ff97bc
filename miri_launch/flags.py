"""
Miri Flags

Fixed checker and compiler flags, and the policy for merging them into the
caller's environment.
"""

from typing import Dict, Mapping, Optional, Sequence

# Strict provenance checks. Isolation is disabled because proptest needs real
# entropy from the host.
MIRI_FLAGS = (
    "-Zmiri-strict-provenance",
    "-Zmiri-disable-isolation",
)

RUST_FLAGS = ("-Zrandomize-layout",)

MIRIFLAGS_VAR = "MIRIFLAGS"
RUSTFLAGS_VAR = "RUSTFLAGS"
PROPTEST_CASES_VAR = "PROPTEST_CASES"

DEFAULT_PROPTEST_CASES = "10"


def merge_flags(fixed: Sequence[str], existing: Optional[str]) -> str:
    """
    Prepend fixed flags to an existing flags string.

    Args:
        fixed: Flags that must always be present
        existing: Current value of the variable, if any

    Returns:
        ``"<fixed> <existing>"``, or just the fixed flags when there is
        nothing to preserve
    """
    rendered = " ".join(fixed)
    if not existing:
        return rendered
    return f"{rendered} {existing}"


def build_environment(environ: Mapping[str, str]) -> Dict[str, str]:
    """
    Build the environment for the test run.

    The input mapping is left untouched; a new dict is returned.

    Args:
        environ: Ambient environment

    Returns:
        Copy of ``environ`` with MIRIFLAGS, RUSTFLAGS and PROPTEST_CASES set
    """
    env = dict(environ)
    env[MIRIFLAGS_VAR] = merge_flags(MIRI_FLAGS, environ.get(MIRIFLAGS_VAR))
    env[RUSTFLAGS_VAR] = merge_flags(RUST_FLAGS, environ.get(RUSTFLAGS_VAR))
    if PROPTEST_CASES_VAR not in environ:
        env[PROPTEST_CASES_VAR] = DEFAULT_PROPTEST_CASES
    return env
