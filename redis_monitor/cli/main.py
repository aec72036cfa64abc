"""CLI interface for Redis Monitor."""

import importlib
import logging

import click

from redis_monitor.core.config import settings

# Map command names to their module:attribute for lazy import
_COMMANDS = {
    "get": "redis_monitor.cli.items:get",
    "list": "redis_monitor.cli.items:list_items",
    "test": "redis_monitor.cli.selftest:selftest",
}


class LazyGroup(click.Group):
    """
    Lazy loading of CLI commands.

    Commands live in separate modules and are only imported when invoked.
    """

    def list_commands(self, ctx):
        # Keep stable ordering for help output
        return list(_COMMANDS.keys())

    def get_command(self, ctx, name):
        target = _COMMANDS.get(name)
        if not target:
            return None
        module_path, attr = target.split(":", 1)
        mod = importlib.import_module(module_path)
        return getattr(mod, attr)


@click.command(cls=LazyGroup)
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level")
def main(verbose: bool):
    """Redis Monitor CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )


if __name__ == "__main__":
    main()
