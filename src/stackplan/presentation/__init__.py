"""Presentation layer - human-friendly formatting."""

from .human_formatter import format_plan, format_run_result, format_refresh_result

__all__ = ["format_plan", "format_run_result", "format_refresh_result"]
