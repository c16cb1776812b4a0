"""Load and validate resource declaration files (YAML or JSON)."""

import json
from pathlib import Path
from typing import Dict, Any
import yaml
from ..utils.errors import DeclarationLoadError
from ..utils.logging import get_logger

logger = get_logger("ingest.declaration_loader")

SUPPORTED_SUFFIXES = (".yaml", ".yml", ".json")


def load_declarations_file(declarations_path: str) -> Dict[str, Any]:
    """
    Load a declarations file and check its top-level structure.
    
    Args:
        declarations_path: Path to a YAML or JSON declarations file
        
    Returns:
        Parsed declarations data with a ``resources`` list
        
    Raises:
        DeclarationLoadError: If the file cannot be loaded or is invalid
    """
    path = Path(declarations_path)
    
    if not path.exists():
        raise DeclarationLoadError(
            f"Declarations file not found: {declarations_path}. "
            "Please check the file path and ensure the file exists."
        )
    
    if not path.is_file():
        raise DeclarationLoadError(f"Path is not a file: {declarations_path}")
    
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise DeclarationLoadError(
            f"Unsupported declarations format '{path.suffix}'. "
            f"Use one of: {', '.join(SUPPORTED_SUFFIXES)}"
        )
    
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except json.JSONDecodeError as e:
        raise DeclarationLoadError(f"Invalid JSON in declarations file: {e}")
    except yaml.YAMLError as e:
        raise DeclarationLoadError(f"Invalid YAML in declarations file: {e}")
    except OSError as e:
        raise DeclarationLoadError(f"Error reading declarations file: {e}")
    
    if data is None:
        logger.warning(f"Declarations file {declarations_path} is empty")
        data = {}
    
    validate_declarations_structure(data)
    data.setdefault("resources", [])
    
    logger.info(f"Loaded {len(data['resources'])} declarations from {declarations_path}")
    return data


def validate_declarations_structure(data: Any) -> None:
    """Check the shape of raw declarations before normalization."""
    if not isinstance(data, dict):
        raise DeclarationLoadError("Declarations file must contain a mapping with a 'resources' list")
    
    resources = data.get("resources", [])
    if resources is None:
        return
    if not isinstance(resources, list):
        raise DeclarationLoadError("'resources' must be a list")
    
    for index, resource in enumerate(resources):
        if not isinstance(resource, dict):
            raise DeclarationLoadError(f"Resource #{index} must be a mapping")
        missing = [field for field in ("id", "kind") if field not in resource]
        if missing:
            raise DeclarationLoadError(f"Resource #{index} missing required fields: {', '.join(missing)}")
        if not isinstance(resource.get("attributes", {}) or {}, dict):
            raise DeclarationLoadError(f"Resource '{resource['id']}': 'attributes' must be a mapping")
        if not isinstance(resource.get("depends_on", []) or [], list):
            raise DeclarationLoadError(f"Resource '{resource['id']}': 'depends_on' must be a list")
