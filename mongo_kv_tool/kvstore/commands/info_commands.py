"""
Info commands for kvstore - record metadata and connection status.
"""

import click

from ..constants import DEFAULT_DATABASE, DEFAULT_URI, ENV_DATABASE, ENV_URI
from ..core.client import MongoDBClient
from ..core.info_operations import get_key_info, get_store_status
from ..exceptions import KeyNotFoundError, KVStoreError
from ..logging_config import get_logger, setup_logging
from ..models import CaseInsensitiveKey
from ..utils import error_json, error_text, output_json, output_text

logger = get_logger(__name__)


@click.command("info")
@click.argument("collection")
@click.argument("key")
@click.option("--ignore-case", is_flag=True, help="Match the key regardless of case")
@click.option("--uri", envvar=ENV_URI, default=DEFAULT_URI, help="MongoDB connection URI")
@click.option("--database", envvar=ENV_DATABASE, default=DEFAULT_DATABASE, help="Database name")
@click.option("--text", is_flag=True, help="Output as human-readable text")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
)
@click.pass_context
def info_command(
    ctx: click.Context,
    collection: str,
    key: str,
    ignore_case: bool,
    uri: str,
    database: str,
    text: bool,
    verbose: int,
) -> None:
    """Get metadata about a specific key.

    Shows the record id, the shape of the stored value and how many records
    share the key (more than one means concurrent first writes raced).

    Examples:

    \b
        mongo-kv-tool kvstore info moneys p1

    \b
    Output Format:
        Returns JSON:
        {"key": "p1", "id": "665f...", "kind": "scalar",
         "value_type": "int", "value_size": 4, "records": 1}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Getting info for key '{key}' in '{collection}'")

        lookup = CaseInsensitiveKey(key) if ignore_case else key
        with MongoDBClient(uri, database) as client:
            result = get_key_info(client, collection, lookup)

        if text:
            output_text(f"Key: {result['key']}")
            output_text(f"Id: {result['id']}")
            output_text(f"Kind: {result['kind']} ({result['value_type']})")
            output_text(f"Size: {result['value_size']} characters")
            if result["records"] > 1:
                output_text(f"⚠️  {result['records']} records share this key")
        else:
            output_json(result)

    except KeyNotFoundError as e:
        if text:
            click.echo(error_text(str(e), "Check key name with 'list' command"), err=True)
        else:
            click.echo(error_json(str(e), "Key not found", 1), err=True)
        ctx.exit(1)

    except KVStoreError as e:
        if text:
            click.echo(error_text(str(e), "Check MongoDB is running and reachable"), err=True)
        else:
            click.echo(error_json(str(e), "Check MongoDB connection settings", 3), err=True)
        ctx.exit(3)


@click.command("status")
@click.argument("collection", required=False)
@click.option("--uri", envvar=ENV_URI, default=DEFAULT_URI, help="MongoDB connection URI")
@click.option("--database", envvar=ENV_DATABASE, default=DEFAULT_DATABASE, help="Database name")
@click.option("--text", is_flag=True, help="Output as human-readable text")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
)
@click.pass_context
def status_command(
    ctx: click.Context,
    collection: str | None,
    uri: str,
    database: str,
    text: bool,
    verbose: int,
) -> None:
    """Check the MongoDB connection.

    Pings the server and, when COLLECTION is given, counts its records.

    Exit codes:
    - 0: Server answered
    - 3: Server unreachable or command failed

    Examples:

    \b
        mongo-kv-tool kvstore status
        mongo-kv-tool kvstore status moneys

    \b
    Output Format:
        Returns JSON:
        {"database": "mongo-kv-tool", "connected": true, "collection": "moneys", "records": 2}
    """
    setup_logging(verbose)

    try:
        logger.info("Checking MongoDB connection")
        logger.debug(f"Database: {database}")

        with MongoDBClient(uri, database) as client:
            result = get_store_status(client, collection)

        if text:
            if result["connected"]:
                output_text(f"✅ Connected to database '{database}'")
            else:
                output_text(f"❌ Cannot reach database '{database}'")
            if "records" in result:
                output_text(f"Collection '{collection}': {result['records']} record(s)")
        else:
            output_json(result)

        if not result["connected"]:
            ctx.exit(3)

    except KVStoreError as e:
        if text:
            click.echo(error_text(str(e), "Check MongoDB is running and reachable"), err=True)
        else:
            click.echo(error_json(str(e), "Check MongoDB connection settings", 3), err=True)
        ctx.exit(3)
