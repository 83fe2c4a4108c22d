"""Rich formatting helpers for the agenteval CLI.

Provides functions that format agent and evaluation records for terminal
display. Rich auto-detects TTY and degrades gracefully when piped (no ANSI
codes).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from pathlib import Path

    from agenteval.agent.models import AgentRunResult, TraceStep
    from agenteval.evaluation.models import EvaluationReport


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def _score_style(score: float) -> str:
    if score >= 90:
        return "green"
    if score >= 70:
        return "yellow"
    return "red"


def _compact(value: object, limit: int = 100) -> str:
    text = json.dumps(value, default=str)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def format_step(step: TraceStep, console: Console) -> None:
    """Print one trace step as it is recorded."""
    if step.action == "error":
        console.print(
            f"[dim]{step.step:>3}[/dim] [red]error[/red] "
            f"{escape(str(step.result))}",
            highlight=False,
        )
        return

    detail = ""
    if step.action == "callApi" and isinstance(step.result, dict):
        status = step.result.get("status")
        valid = step.result.get("schemaValid")
        mark = "[green]valid[/green]" if valid else "[red]invalid[/red]"
        detail = f" -> {status} {mark}"
    console.print(
        f"[dim]{step.step:>3}[/dim] [cyan]{escape(step.action)}[/cyan]"
        f"({escape(_compact(step.args))}){detail}",
        highlight=False,
    )


def format_run_summary(result: AgentRunResult, console: Console) -> None:
    """Print how the agent run ended."""
    if result.completed:
        console.print(
            f"[green]Agent completed[/green] after {result.turns} turn(s), "
            f"{len(result.steps)} step(s)"
        )
    else:
        reason = result.stop_reason.value if result.stop_reason else "unknown"
        console.print(
            f"[yellow]Agent stopped early[/yellow] ({reason}) after "
            f"{result.turns} turn(s), {len(result.steps)} step(s)"
        )
    if result.usage.total_tokens:
        console.print(f"  Tokens: [dim]{result.usage.total_tokens}[/dim]")


def format_report(report: EvaluationReport, console: Console) -> None:
    """Display the score table followed by per-check results."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Metric")
    table.add_column("Score", justify="right")

    for label, score in (
        ("Step Accuracy", report.scores.step_accuracy),
        ("Tool Accuracy", report.scores.tool_accuracy),
        ("Schema Pass Rate", report.scores.schema_pass_rate),
        ("Failure Handling", report.scores.failure_handling),
        ("Final Correctness", report.scores.final_correctness),
    ):
        style = _score_style(score)
        table.add_row(label, f"[{style}]{score:.1f}%[/{style}]")
    overall = report.overall_score
    table.add_row(
        "[bold]Overall[/bold]", f"[bold {_score_style(overall)}]{overall:.1f}%[/]"
    )
    console.print(table)
    console.print()

    for key, check in report.details.items():
        status = "[green]PASS[/green]" if check.passed else "[red]FAIL[/red]"
        console.print(f"{status} [bold]{key}[/bold]: {escape(check.message)}")
        for err in check.errors:
            console.print(f"     [dim]-[/dim] {escape(err)}", highlight=False)

    badge = (
        "[green]Agent completed[/green]"
        if report.agent_completed
        else "[yellow]Agent incomplete[/yellow]"
    )
    console.print()
    console.print(f"{badge}  ({report.total_steps} steps, {report.timestamp})")


def format_artifacts(paths: list[Path], console: Console) -> None:
    for path in paths:
        console.print(f"Saved [dim]{escape(str(path))}[/dim]")


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
