"""agenteval ids -- print the deterministic test ids."""

from __future__ import annotations

import json

import click

from agenteval.cli.formatting import get_console
from agenteval.toolkit import generate_test_ids


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print as a JSON array.")
def ids(as_json: bool) -> None:
    """Show the ids the generateTestIds tool hands to the agent."""
    values = generate_test_ids()
    if as_json:
        click.echo(json.dumps(values))
        return
    console = get_console()
    console.print(", ".join(str(v) for v in values), highlight=False)
