"""Self test command.

Runs items with their built-in test parameters against one server, filling in
the connection parameters from the command line.
"""

from __future__ import annotations

import json as _json
from typing import List

import click
from rich.console import Console
from rich.table import Table

from redis_monitor.core.keys import parse_item_key
from redis_monitor.items import ItemResult, run_item
from redis_monitor.items.registry import get_descriptor, list_descriptors


def _test_params(test_params: str, arity: int, connection: List[str]) -> List[str]:
    if arity == 0:
        return []
    _, params = parse_item_key(f"test[{test_params}]")
    # Connection parameters always come first
    return connection[: min(arity, len(connection))] + params[len(connection) :]


@click.command("test")
@click.argument("keys", nargs=-1)
@click.option("--server", default="", help="Redis server (blank for the configured default)")
@click.option("--port", default="", help="Redis port (blank for the configured default)")
@click.option("--timeout", default="", help="Timeout in seconds (blank for the configured default)")
@click.option("--password", default="", help="Redis password")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
def selftest(keys, server: str, port: str, timeout: str, password: str, as_json: bool):
    """Run items with their test parameters against a server."""
    if keys:
        descriptors = []
        for key in keys:
            descriptor = get_descriptor(key)
            if descriptor is None:
                raise click.BadParameter(f"Unknown item key: {key}", param_hint="KEYS")
            descriptors.append(descriptor)
    else:
        descriptors = list_descriptors()

    connection = [server, port, timeout, password]
    results: List[ItemResult] = []
    for descriptor in descriptors:
        params = _test_params(descriptor.test_params, descriptor.arity, connection)
        results.append(run_item(descriptor.key, params))

    if as_json:
        print(_json.dumps([r.to_dict() for r in results], indent=2))
        return

    console = Console()
    table = Table(title="Redis Monitor Self Test", show_lines=False)
    table.add_column("Key")
    table.add_column("Status", no_wrap=True)
    table.add_column("Value / Message")

    for r in results:
        status = "[green]OK[/green]" if r.ok else "[red]FAIL[/red]"
        table.add_row(r.key, status, str(r.value) if r.ok else r.message)

    console.print(table)
    failed = sum(1 for r in results if not r.ok)
    click.echo(f"{len(results) - failed} passed, {failed} failed")
