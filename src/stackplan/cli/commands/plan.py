"""Plan command - compute and show actions without changing anything."""

import json
import sys
import click
from ...graph.dependency_graph import DependencyGraph
from ...planning.planner import build_plan
from ...presentation.human_formatter import format_plan
from ...utils.errors import StackPlanError
from ...utils.logging import get_logger
from ..utils import echo_text, format_error, load_workspace, resolve_file_path

logger = get_logger("cli.plan")


def load_declared_graph(declarations: str) -> DependencyGraph:
    """Resolve the declarations path and build the validated graph."""
    from ... import build_graph
    
    return build_graph(str(resolve_file_path(declarations)))


@click.command()
@click.argument('declarations', type=click.Path(exists=False))
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='Config YAML file')
@click.option('--state', 'state_path', type=click.Path(), help='State file (overrides config)')
@click.option('--json', 'json_output', is_flag=True, help='Output structured JSON instead of human-readable')
@click.option('--show-unchanged', is_flag=True, help='List NoOp actions too')
@click.option('--detailed-exitcode', is_flag=True, help='Exit 2 when the plan has changes')
def plan(declarations, config_path, state_path, json_output, show_unchanged, detailed_exitcode):
    """
    Show what apply would do for DECLARATIONS (YAML or JSON).
    
    Nothing is created, changed or written.
    """
    try:
        _, store = load_workspace(config_path, state_path)
        graph = load_declared_graph(declarations)
        plan_obj = build_plan(graph, store.snapshot())
        
        if json_output:
            click.echo(json.dumps(plan_obj.model_dump(mode="json"), indent=2))
        else:
            echo_text(format_plan(plan_obj, show_unchanged=show_unchanged))
        
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Plan failed: {e}"), err=True)
        sys.exit(1)
    
    if detailed_exitcode and plan_obj.has_changes:
        sys.exit(2)
