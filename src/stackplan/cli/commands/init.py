"""Init command - write a project config file."""

import sys
from pathlib import Path
import click
from ...config.manager import read_yaml_config, save_config
from ...config.paths import CONFIG_DIR_NAME, CONFIG_FILE_NAME, get_defaults_path
from ...utils.errors import StackPlanError
from ...utils.logging import get_logger
from ..utils import format_error

logger = get_logger("cli.init")

PROJECT_CONFIG = Path(CONFIG_DIR_NAME) / CONFIG_FILE_NAME


@click.command()
@click.option('--provider', type=click.Choice(['memory', 'http']), default='memory', help='Provider client to configure')
@click.option('--base-url', help='Control API base URL (http provider)')
@click.option('--force', is_flag=True, help='Overwrite an existing project config')
def init(provider, base_url, force):
    """Write .stackplan/config.yaml with default settings."""
    path = Path.cwd() / PROJECT_CONFIG
    if path.exists() and not force:
        click.echo(f"{PROJECT_CONFIG} already exists (use --force to overwrite).", err=True)
        return
    
    try:
        config = read_yaml_config(get_defaults_path())
        config["provider"]["type"] = provider
        if base_url:
            config["provider"]["base_url"] = base_url
        save_config(config, path)
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    
    click.echo(f"Wrote {PROJECT_CONFIG} (provider: {provider})")
