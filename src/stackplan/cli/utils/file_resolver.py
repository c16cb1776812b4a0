"""Locate declarations files for CLI commands."""

from pathlib import Path
from ...utils.errors import DeclarationLoadError

# looked up, in order, when a directory is given
DEFAULT_DECLARATION_NAMES = ("stackplan.yaml", "stackplan.yml", "stackplan.json")


def resolve_file_path(file_path: str) -> Path:
    """
    Resolve a declarations path relative to the current directory.
    
    A directory resolves to the first of ``stackplan.yaml``,
    ``stackplan.yml`` or ``stackplan.json`` found inside it.
    
    Raises:
        DeclarationLoadError: If no declarations file can be found
    """
    path = Path(file_path)
    if not path.is_absolute():
        path = Path.cwd() / path
    path = path.resolve()
    
    if path.is_dir():
        for name in DEFAULT_DECLARATION_NAMES:
            candidate = path / name
            if candidate.is_file():
                return candidate
        raise DeclarationLoadError(
            f"No declarations file in {file_path} (looked for {', '.join(DEFAULT_DECLARATION_NAMES)})"
        )
    
    if not path.exists():
        raise DeclarationLoadError(f"File not found: {file_path}. Please check the file path and try again.")
    return path
