"""Where configuration files live."""

import os
from pathlib import Path
from typing import Optional

CONFIG_DIR_NAME = ".stackplan"
CONFIG_FILE_NAME = "config.yaml"
HOME_ENV = "STACKPLAN_HOME"


def get_user_config_path() -> Path:
    """``$STACKPLAN_HOME/config.yaml``, else ``~/.stackplan/config.yaml``."""
    override = os.environ.get(HOME_ENV)
    base = Path(override) if override else Path.home() / CONFIG_DIR_NAME
    return base / CONFIG_FILE_NAME


def get_project_config_path(start: Optional[Path] = None) -> Optional[Path]:
    """
    Nearest ``.stackplan/config.yaml`` in the working directory or a parent.
    
    The user config directory is never treated as project config.
    """
    user_config = get_user_config_path()
    directory = (start or Path.cwd()).resolve()
    for candidate_dir in [directory, *directory.parents]:
        candidate = candidate_dir / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if candidate.is_file() and candidate.resolve() != user_config.resolve():
            return candidate
    return None


def get_defaults_path() -> Path:
    """Packaged defaults shipped next to this module."""
    return Path(__file__).parent / "defaults.yaml"
