"""Refresh command - drop state for resources that no longer exist remotely."""

import json
import sys
import click
from ...presentation.human_formatter import format_refresh_result
from ...utils.errors import StackPlanError
from ...utils.logging import get_logger
from ..utils import echo_text, format_error

logger = get_logger("cli.refresh")


@click.command()
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='Config YAML file')
@click.option('--state', 'state_path', type=click.Path(), help='State file (overrides config)')
@click.option('--json', 'json_output', is_flag=True, help='Output structured JSON')
def refresh(config_path, state_path, json_output):
    """Describe every recorded resource at the provider and update state."""
    from ... import refresh as refresh_workspace
    
    try:
        result = refresh_workspace(config_path=config_path, state_path=state_path)
        if json_output:
            click.echo(json.dumps(result.model_dump(), indent=2))
        else:
            echo_text(format_refresh_result(result))
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Refresh failed: {e}"), err=True)
        sys.exit(1)
