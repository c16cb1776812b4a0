"""Main CLI entry point for stackplan."""

import click
from .commands.plan import plan
from .commands.apply import apply
from .commands.destroy import destroy
from .commands.refresh import refresh
from .commands.state import state
from .commands.init import init
from .commands.version import version as version_command
from ..utils.logging import get_logger, set_verbosity
from .. import __version__

logger = get_logger("cli.main")


@click.group()
@click.version_option(version=__version__, prog_name="stackplan", message="%(prog)s version %(version)s")
@click.option('--verbose', '-v', is_flag=True, help='Log debug output to stderr')
def cli(verbose):
    """stackplan - plan and apply declared infrastructure in dependency order."""
    set_verbosity(verbose)


cli.add_command(plan)
cli.add_command(apply)
cli.add_command(destroy)
cli.add_command(refresh)
cli.add_command(state)
cli.add_command(init)
cli.add_command(version_command)
