"""Item CLI commands.

``get`` collects a single item the way a monitoring agent would request it and
``list`` shows every supported item key.
"""

from __future__ import annotations

import json as _json
import sys

import click
from rich.console import Console
from rich.table import Table

from redis_monitor.core.keys import ItemKeyError, parse_item_key
from redis_monitor.items import run_item
from redis_monitor.items.registry import list_descriptors


@click.command("get")
@click.argument("item_key")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
def get(item_key: str, as_json: bool):
    """Collect one item, e.g. 'redis.info[,,,,string,server,redis_version,]'."""
    try:
        name, params = parse_item_key(item_key)
    except ItemKeyError as e:
        raise click.BadParameter(str(e), param_hint="ITEM_KEY")

    result = run_item(name, params)

    if as_json:
        print(_json.dumps(result.to_dict(), indent=2))
    elif result.ok:
        click.echo(result.value)
    else:
        click.echo(f"❌ {result.message}", err=True)

    if not result.ok:
        sys.exit(1)


@click.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
def list_items(as_json: bool):
    """List supported item keys."""
    descriptors = list_descriptors()

    if as_json:
        rows = [
            {
                "key": d.key,
                "signature": d.signature,
                "params": d.arity,
                "type": d.output.value if d.output else "datatype",
                "description": d.description,
            }
            for d in descriptors
        ]
        print(_json.dumps(rows, indent=2))
        return

    console = Console()
    table = Table(title="Redis Monitor Items", show_lines=False)
    table.add_column("Key", no_wrap=True)
    table.add_column("Parameters")
    table.add_column("Type", no_wrap=True)
    table.add_column("Description")

    for d in descriptors:
        params = ",".join(spec.arg for spec in d.params) or "-"
        table.add_row(d.key, params, d.output.value if d.output else "datatype", d.description)

    console.print(table)
