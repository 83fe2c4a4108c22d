"""agenteval check-connection -- smoke-test the model gateway."""

from __future__ import annotations

import click

from agenteval.cli.formatting import format_error, get_console
from agenteval.config import build_llm_client


@click.command("check-connection")
def check_connection() -> None:
    """Send a trivial prompt to the configured model and report the result."""
    from agenteval.cli import _load_config
    from agenteval.llm import check_connection as gateway_check

    console = get_console()
    config = _load_config()
    try:
        with build_llm_client(config.llm) as client:
            ok = gateway_check(client)
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    if not ok:
        format_error(f"No valid reply from the {config.llm.provider} gateway", console)
        raise SystemExit(1)
    console.print(f"[green]Connection OK[/green] ({config.llm.provider})")
