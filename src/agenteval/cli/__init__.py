"""agenteval CLI -- run the API-testing agent and score its traces.

This module is NEVER imported from agenteval/__init__.py.
It is only loaded via the ``agenteval`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from agenteval.cli.formatting import format_artifacts, format_error, get_console

if TYPE_CHECKING:
    from agenteval.config import AgentEvalConfig
    from agenteval.evaluation.models import EvaluationReport, ExpectedWorkflowSpec

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    envvar="AGENTEVAL_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity (logs go to stderr).",
)
@click.option(
    "--env-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to a .env file (default: nearest .env from the working directory).",
)
def cli(log_level: str, env_file: str | None) -> None:
    """agenteval: run an LLM agent against a REST endpoint and score the trace."""
    dotenv_path = env_file or find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)
    # HTTP stack request lines stay at WARNING whatever the CLI level
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_config() -> AgentEvalConfig:
    """Build the process configuration, exiting with status 1 on errors."""
    from agenteval.config import AgentEvalConfig
    from agenteval.exceptions import ConfigError

    try:
        return AgentEvalConfig.from_env()
    except ConfigError as e:
        format_error(str(e), get_console())
        raise SystemExit(1) from None


def _load_spec(path: str | None) -> ExpectedWorkflowSpec:
    """Read an ExpectedWorkflowSpec JSON file, or return the default spec."""
    from agenteval.evaluation.models import ExpectedWorkflowSpec

    if path is None:
        return ExpectedWorkflowSpec()
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return ExpectedWorkflowSpec.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        format_error(f"Invalid workflow spec {path}: {e}", get_console())
        raise SystemExit(1) from None


def _write_reports(report: EvaluationReport, output_dir: Path) -> list[Path]:
    from agenteval.reporting import save_html_report, save_report

    return [
        save_report(report, output_dir / "report.json"),
        save_html_report(report, output_dir / "report.html"),
    ]


def _finish_evaluation(report: EvaluationReport, output_dir: Path) -> None:
    """Write the JSON and HTML reports and print the results."""
    from agenteval.cli.formatting import format_report

    console = get_console()
    paths = _write_reports(report, output_dir)
    console.print()
    format_report(report, console)
    console.print()
    format_artifacts(paths, console)


# Register subcommands after cli group is defined
from agenteval.cli.commands.check import check_connection  # noqa: E402
from agenteval.cli.commands.evaluate import evaluate  # noqa: E402
from agenteval.cli.commands.ids import ids  # noqa: E402
from agenteval.cli.commands.run import run  # noqa: E402

cli.add_command(run)
cli.add_command(evaluate)
cli.add_command(check_connection)
cli.add_command(ids)
