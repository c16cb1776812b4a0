"""Human-friendly output formatter - plans and run results as readable text."""

import os
from typing import List, Optional
from ..execution.models import OutcomeStatus, RunResult
from ..execution.refresh import RefreshResult
from ..planning.models import ActionVerb, Plan


def _use_ascii(ascii_mode: Optional[bool] = None) -> bool:
    """Resolve whether to use ASCII output (checked at format time)."""
    if ascii_mode is not None:
        return bool(ascii_mode)
    return os.environ.get("STACKPLAN_ASCII", "").lower() in ("1", "true", "yes")


def _box(title: str, width: int = 65, ascii_mode: bool = False) -> List[str]:
    """Return box-drawing header lines."""
    b = {"tl": "+", "tr": "+", "h": "-", "v": "|"} if ascii_mode else {"tl": "┌", "tr": "┐", "h": "─", "v": "│"}
    h = b["h"] * (width - 2)
    return [
        b["tl"] + h + b["tr"],
        f"{b['v']} {title:<{width - 4}} {b['v']}",
        ("+" if ascii_mode else "└") + h + ("+" if ascii_mode else "┘"),
        "",
    ]


def _verb_symbol(verb: ActionVerb, ascii_mode: bool) -> str:
    return {
        ActionVerb.CREATE: "+",
        ActionVerb.UPDATE: "~",
        ActionVerb.DESTROY: "-",
        ActionVerb.NO_OP: "=" if ascii_mode else "·",
    }[ActionVerb(verb)]


def _status_symbol(status: OutcomeStatus, ascii_mode: bool) -> str:
    if ascii_mode:
        return {OutcomeStatus.APPLIED: "[OK]", OutcomeStatus.SKIPPED: "[--]", OutcomeStatus.FAILED: "[!!]"}[status]
    return {OutcomeStatus.APPLIED: "✅", OutcomeStatus.SKIPPED: "⏭️ ", OutcomeStatus.FAILED: "❌"}[status]


def format_plan(plan: Plan, show_unchanged: bool = False, ascii_mode: Optional[bool] = None) -> str:
    """Render a plan as one line per action plus a count summary."""
    ascii_mode = _use_ascii(ascii_mode)
    lines = _box("STACKPLAN - EXECUTION PLAN", ascii_mode=ascii_mode)
    
    shown = plan.actions if show_unchanged else [a for a in plan.actions if a.verb != ActionVerb.NO_OP or a.record_refresh]
    if not shown:
        lines.append("No changes. Declared resources match recorded state.")
    for action in shown:
        lines.append(f"  {_verb_symbol(action.verb, ascii_mode)} {action.verb.value:<8} {action.target} ({action.kind.value})")
        lines.append(f"      {action.reason}")
    
    counts = plan.counts()
    lines.append("")
    lines.append(
        f"Plan: {counts['Create']} to create, {counts['Update']} to update, "
        f"{counts['Destroy']} to destroy, {counts['NoOp']} unchanged."
    )
    if plan.record_refreshes:
        lines.append(f"Recorded dependencies of {len(plan.record_refreshes)} unchanged resource(s) will be updated.")
    return "\n".join(lines)


def format_run_result(result: RunResult, ascii_mode: Optional[bool] = None) -> str:
    """Render per-action outcomes, failure causes and the applied/skipped/failed counts."""
    ascii_mode = _use_ascii(ascii_mode)
    lines = _box("STACKPLAN - APPLY RESULT", ascii_mode=ascii_mode)
    
    for outcome in result.outcomes:
        if outcome.verb == ActionVerb.NO_OP and outcome.status == OutcomeStatus.APPLIED:
            continue
        line = f"  {_status_symbol(outcome.status, ascii_mode)} {outcome.verb.value:<8} {outcome.target}"
        if outcome.provider_id:
            line += f" [{outcome.provider_id}]"
        if outcome.attempts > 1:
            line += f" after {outcome.attempts} attempts"
        lines.append(line)
    
    if result.failed:
        lines.append("")
        lines.append("Failures:")
        for outcome in result.failed:
            lines.append(f"  {outcome.target}: {outcome.error}")
    
    if result.skipped:
        lines.append("")
        lines.append("Skipped:")
        for outcome in result.skipped:
            lines.append(f"  {outcome.target}: {outcome.error}")
    
    counts = result.counts()
    lines.append("")
    if result.cancelled:
        lines.append("Run cancelled: no new actions were started after the signal.")
    lines.append(
        f"Apply {'complete' if result.success else 'incomplete'}: {counts['Applied']} applied, "
        f"{counts['Skipped']} skipped, {counts['Failed']} failed."
    )
    return "\n".join(lines)


def format_refresh_result(result: RefreshResult) -> str:
    """Render a refresh pass."""
    lines = [f"Refreshed {len(result.checked)} resources."]
    for resource_id in result.removed:
        lines.append(f"  - {resource_id}: gone at the provider, removed from state")
    for resource_id, keys in result.drifted.items():
        lines.append(f"  ~ {resource_id}: drifted ({', '.join(keys)})")
    return "\n".join(lines)
