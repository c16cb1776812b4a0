"""Apply command - plan, confirm and execute."""

import json
import sys
from typing import Optional
import click
from ...graph.dependency_graph import DependencyGraph
from ...planning.planner import build_plan
from ...presentation.human_formatter import format_plan, format_run_result
from ...providers.factory import get_provider
from ...utils.errors import StackPlanError
from ...utils.logging import get_logger
from ..utils import cancel_on_interrupt, echo_text, format_error, load_workspace
from .plan import load_declared_graph

logger = get_logger("cli.apply")


def run_apply(graph: DependencyGraph, config_path: Optional[str], state_path: Optional[str],
              auto_approve: bool, json_output: bool) -> None:
    """Shared flow for apply and destroy: plan, confirm, execute, report, exit."""
    from ... import execute_plan
    
    settings, store = load_workspace(config_path, state_path)
    plan_obj = build_plan(graph, store.snapshot())
    
    if not json_output:
        echo_text(format_plan(plan_obj))
    
    if not plan_obj.has_changes:
        if json_output:
            click.echo(json.dumps({"plan": plan_obj.model_dump(mode="json"), "result": None}, indent=2))
        return
    
    if not auto_approve and not click.confirm("Apply these changes?", default=False):
        click.echo("Apply cancelled.", err=True)
        return
    
    provider = get_provider(settings.provider)
    with cancel_on_interrupt() as cancel_event:
        result = execute_plan(plan_obj, settings, store, provider, cancel_event)
    
    if json_output:
        click.echo(json.dumps({
            "plan": plan_obj.model_dump(mode="json"),
            "result": result.model_dump(mode="json"),
        }, indent=2))
    else:
        click.echo("")
        echo_text(format_run_result(result))
    
    if not result.success:
        sys.exit(1)


@click.command()
@click.argument('declarations', type=click.Path(exists=False))
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='Config YAML file')
@click.option('--state', 'state_path', type=click.Path(), help='State file (overrides config)')
@click.option('--auto-approve', is_flag=True, help='Skip the confirmation prompt')
@click.option('--json', 'json_output', is_flag=True, help='Output structured JSON')
def apply(declarations, config_path, state_path, auto_approve, json_output):
    """
    Reconcile recorded state with DECLARATIONS.
    
    Exits 0 when every action applied, 1 when any action failed or was skipped.
    """
    try:
        graph = load_declared_graph(declarations)
        run_apply(graph, config_path, state_path, auto_approve, json_output)
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Apply failed: {e}"), err=True)
        sys.exit(1)
