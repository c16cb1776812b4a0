"""State commands - inspect and edit recorded state."""

import json
import sys
import click
from ...utils.errors import StackPlanError
from ...utils.logging import get_logger
from ..utils import format_error, load_workspace

logger = get_logger("cli.state")

config_option = click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='Config YAML file')
state_option = click.option('--state', 'state_path', type=click.Path(), help='State file (overrides config)')


@click.group()
def state():
    """Inspect and edit recorded state."""
    pass


@state.command(name="list")
@config_option
@state_option
def list_records(config_path, state_path):
    """List recorded resources."""
    try:
        _, store = load_workspace(config_path, state_path)
        for record in sorted(store.snapshot(), key=lambda r: r.position):
            click.echo(f"{record.resource_id:<30} {record.kind.value:<14} {record.provider_id}")
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)


@state.command()
@click.argument('resource_id')
@config_option
@state_option
def show(resource_id, config_path, state_path):
    """Show one record as JSON."""
    try:
        _, store = load_workspace(config_path, state_path)
        record = store.get(resource_id)
        if record is None:
            click.echo(format_error(f"No state recorded for '{resource_id}'"), err=True)
            sys.exit(1)
        click.echo(json.dumps(record.model_dump(mode="json"), indent=2))
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)


@state.command(name="rm")
@click.argument('resource_id')
@config_option
@state_option
def remove(resource_id, config_path, state_path):
    """
    Forget a resource without destroying it.
    
    The remote resource is left alone; the next plan will create it anew
    if it is still declared.
    """
    try:
        _, store = load_workspace(config_path, state_path)
        if store.get(resource_id) is None:
            click.echo(format_error(f"No state recorded for '{resource_id}'"), err=True)
            sys.exit(1)
        store.delete(resource_id)
        click.echo(f"Removed {resource_id} from state.")
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
