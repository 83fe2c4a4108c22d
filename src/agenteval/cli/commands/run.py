"""agenteval run -- run the agent, save its trace, and score it."""

from __future__ import annotations

from pathlib import Path

import click

from agenteval.cli.formatting import (
    format_artifacts,
    format_error,
    format_run_summary,
    format_step,
    get_console,
)
from agenteval.config import build_llm_client
from agenteval.prompts import DEFAULT_TASK_PROMPT


@click.command()
@click.option("--prompt", default=DEFAULT_TASK_PROMPT, show_default=False, help="Task given to the agent.")
@click.option("--max-steps", type=click.IntRange(min=1), default=None, help="Maximum model turns (default: AGENTEVAL_MAX_STEPS or 15).")
@click.option("--mock", is_flag=True, help="Serve the users endpoint in-process instead of over the network.")
@click.option("--spec", "spec_path", default=None, type=click.Path(exists=True, dir_okay=False), help="JSON file with the expected workflow spec.")
@click.option("-o", "--output-dir", default=".", type=click.Path(file_okay=False), help="Directory for trace.json, report.json and report.html.")
def run(
    prompt: str,
    max_steps: int | None,
    mock: bool,
    spec_path: str | None,
    output_dir: str,
) -> None:
    """Run the API-testing agent and evaluate the resulting trace.

    Exits 0 whatever the score; 1 on configuration or artifact errors.
    """
    from agenteval.agent import AgentConfig, AgentLoop
    from agenteval.cli import _finish_evaluation, _load_config, _load_spec
    from agenteval.evaluation import evaluate_trace
    from agenteval.mock_endpoint import mock_transport
    from agenteval.reporting import save_trace
    from agenteval.toolkit import ToolCatalog

    console = get_console()
    config = _load_config()
    spec = _load_spec(spec_path)
    out = Path(output_dir)

    overrides: dict = {"on_step": lambda step: format_step(step, console)}
    if max_steps is not None:
        overrides["max_steps"] = max_steps
    agent_config = AgentConfig.from_config(config, **overrides)

    try:
        out.mkdir(parents=True, exist_ok=True)
        client = build_llm_client(config.llm)
        transport = mock_transport() if mock else None
        with client, ToolCatalog.from_settings(config.endpoint, transport=transport) as catalog:
            console.print(
                f"Running agent against [cyan]{agent_config.base_url}[/cyan]"
                + (" [dim](mock endpoint)[/dim]" if mock else "")
            )
            result = AgentLoop(catalog, agent_config, client=client).run(prompt)

        format_run_summary(result, console)
        trace_path = save_trace(result.steps, out / "trace.json")
        format_artifacts([trace_path], console)
        report = evaluate_trace(result.steps, spec)
        _finish_evaluation(report, out)
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
