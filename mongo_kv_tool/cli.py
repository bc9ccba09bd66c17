"""CLI entry point for mongo-kv-tool."""

import click

from mongo_kv_tool import __version__
from mongo_kv_tool.kvstore.commands.info_commands import info_command, status_command
from mongo_kv_tool.kvstore.commands.kv_commands import (
    all_command,
    delete_command,
    exists_command,
    get_command,
    list_command,
    rename_command,
    set_command,
)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """A CLI that exposes MongoDB collections as a simple key-value store"""
    pass


@main.group("kvstore")
def kvstore() -> None:
    """MongoDB-backed key-value store of {key, value} records"""
    pass


# Register kv commands
kvstore.add_command(set_command)
kvstore.add_command(get_command)
kvstore.add_command(exists_command)
kvstore.add_command(delete_command)
kvstore.add_command(rename_command)
kvstore.add_command(list_command)
kvstore.add_command(all_command)

# Register info/status commands
kvstore.add_command(info_command)
kvstore.add_command(status_command)

if __name__ == "__main__":
    main()
