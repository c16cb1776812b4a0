"""CLI utilities package."""

import signal
import threading
from contextlib import contextmanager
from typing import Optional, Tuple
import click
from ...config import Settings, load_settings
from ...state import StateStore
from ...utils.logging import get_logger
from .file_resolver import resolve_file_path

logger = get_logger("cli.utils")


def format_error(message: str, suggestion: Optional[str] = None) -> str:
    """
    Format error message with optional suggestion.
    
    Args:
        message: Error message
        suggestion: Optional suggestion or help text
        
    Returns:
        Formatted error string
    """
    error = f"Error: {message}"
    if suggestion:
        error += f"\nTip: {suggestion}"
    return error


def echo_text(text: str) -> None:
    """Echo text, falling back to ASCII on terminals that cannot encode it."""
    try:
        click.echo(text)
    except UnicodeEncodeError:
        click.echo(text.encode('ascii', errors='replace').decode('ascii'))


def load_workspace(config_path: Optional[str], state_path: Optional[str]) -> Tuple[Settings, StateStore]:
    """Shared setup for every command: settings plus the state store they point at."""
    from ... import open_state_store
    
    settings = load_settings(config_path)
    store = open_state_store(settings, state_path)
    return settings, store


@contextmanager
def cancel_on_interrupt():
    """
    Turn the first Ctrl-C into a run-level cancellation signal.
    
    In-flight provider calls finish; a second Ctrl-C interrupts immediately.
    """
    cancel_event = threading.Event()
    
    previous = signal.getsignal(signal.SIGINT)

    def _handler(signum, frame):
        click.echo("Interrupt received: waiting for in-flight actions to finish...", err=True)
        cancel_event.set()
        signal.signal(signal.SIGINT, previous or signal.default_int_handler)
    
    installed = False
    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGINT, _handler)
        installed = True
    try:
        yield cancel_event
    finally:
        if installed:
            signal.signal(signal.SIGINT, previous or signal.default_int_handler)


__all__ = ["resolve_file_path", "format_error", "echo_text", "load_workspace", "cancel_on_interrupt"]
