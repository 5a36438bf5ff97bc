"""
miri-launch Entry Point

Runs the crate's unit tests under Miri. Every argument is forwarded to the
test command after `--lib`; the launcher parses no options of its own.
"""

import logging
import os
import sys
from typing import List, Tuple

import click

from miri_launch import output
from miri_launch.config import get_config
from miri_launch.errors import LauncherError
from miri_launch.flags import build_environment
from miri_launch.process import exec_test_command
from miri_launch.runner import select_runner

logger = logging.getLogger(__name__)


class PassthroughCommand(click.Command):
    """Command that hands every argument to the callback unparsed, `--` included."""

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        ctx.params["cargo_args"] = tuple(args)
        return []


@click.command(cls=PassthroughCommand, add_help_option=False)
def cli(cargo_args: Tuple[str, ...]) -> None:
    """
    Run tests under Miri with strict provenance and layout randomization.

    Example: miri-launch -p alloc -- --nocapture
    """
    try:
        config = get_config()
        output.setup_logging(config.log_level)
        logger.debug("configuration: %s", config.to_dict())

        runner = select_runner(config)
        argv = runner.argv(cargo_args)
        env = build_environment(os.environ)

        output.report_invocation(argv, env, config.root, accelerated=runner.accelerated)
        returncode = exec_test_command(argv, env, config.root)
    except LauncherError as e:
        output.error(str(e))
        sys.exit(e.exit_code)

    sys.exit(returncode)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
