"""agenteval evaluate -- score an existing trace file."""

from __future__ import annotations

from pathlib import Path

import click

from agenteval.cli.formatting import format_error, get_console


@click.command()
@click.argument("trace", type=click.Path(exists=True, dir_okay=False))
@click.option("--spec", "spec_path", default=None, type=click.Path(exists=True, dir_okay=False), help="JSON file with the expected workflow spec.")
@click.option("-o", "--output-dir", default=".", type=click.Path(file_okay=False), help="Directory for report.json and report.html.")
def evaluate(trace: str, spec_path: str | None, output_dir: str) -> None:
    """Evaluate TRACE (a JSON array of steps) and write reports.

    The trace may come from ``agenteval run`` or any other producer using
    the same step format.
    """
    from agenteval.cli import _finish_evaluation, _load_spec
    from agenteval.evaluation import evaluate_trace
    from agenteval.reporting import load_trace

    console = get_console()
    spec = _load_spec(spec_path)
    try:
        steps = load_trace(trace)
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        _finish_evaluation(evaluate_trace(steps, spec), out)
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
