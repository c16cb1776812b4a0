"""Destroy command - remove every recorded resource."""

import sys
import click
from ...graph.dependency_graph import DependencyGraph
from ...utils.errors import StackPlanError
from ...utils.logging import get_logger
from ..utils import format_error
from .apply import run_apply

logger = get_logger("cli.destroy")


@click.command()
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='Config YAML file')
@click.option('--state', 'state_path', type=click.Path(), help='State file (overrides config)')
@click.option('--auto-approve', is_flag=True, help='Skip the confirmation prompt')
@click.option('--json', 'json_output', is_flag=True, help='Output structured JSON')
def destroy(config_path, state_path, auto_approve, json_output):
    """Destroy everything in state, dependents before their dependencies."""
    try:
        run_apply(DependencyGraph(), config_path, state_path, auto_approve, json_output)
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Destroy failed: {e}"), err=True)
        sys.exit(1)
