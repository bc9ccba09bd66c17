"""
Key-value commands for kvstore.
"""

from typing import Any

import click

from ..constants import DEFAULT_DATABASE, DEFAULT_URI, ENV_DATABASE, ENV_URI
from ..core.client import MongoDBClient
from ..core.kv_operations import (
    exists_value,
    get_all,
    list_keys,
    remove_value,
    rename_key,
    set_if_not_exists,
    set_value,
)
from ..core.typed_operations import get_value
from ..exceptions import KeyNotFoundError, KVStoreError, ValueTypeError
from ..logging_config import get_logger, setup_logging
from ..models import CaseInsensitiveKey
from ..utils import (
    error_json,
    error_text,
    output_json,
    output_text,
    parse_value,
    validate_collection_name,
    validate_key,
)

logger = get_logger(__name__)

VALUE_TYPES: dict[str, Any] = {
    "any": None,
    "int": int,
    "float": float,
    "str": str,
    "bool": bool,
}


def _lookup_key(key: str, ignore_case: bool) -> Any:
    return CaseInsensitiveKey(key) if ignore_case else key


def _usage_error(ctx: click.Context, message: str, text: bool) -> None:
    if text:
        click.echo(error_text(message, "Check the arguments with --help"), err=True)
    else:
        click.echo(error_json(message, "Check the arguments", 2), err=True)
    ctx.exit(2)


def _store_error(ctx: click.Context, error: KVStoreError, text: bool) -> None:
    if text:
        click.echo(
            error_text(str(error), "Check MongoDB is running and --uri/--database are correct"),
            err=True,
        )
    else:
        click.echo(error_json(str(error), "Check MongoDB connection settings", 3), err=True)
    ctx.exit(3)


@click.command("set")
@click.argument("collection")
@click.argument("key")
@click.argument("value")
@click.option("--json", "as_json", is_flag=True, help="Parse VALUE as JSON")
@click.option("--if-not-exists", is_flag=True, help="Only set if key doesn't exist")
@click.option("--ignore-case", is_flag=True, help="Match an existing key regardless of case")
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
def set_command(
    ctx: click.Context,
    collection: str,
    key: str,
    value: str,
    as_json: bool,
    if_not_exists: bool,
    ignore_case: bool,
    uri: str,
    database: str,
    text: bool,
    verbose: int,
) -> None:
    """Store a value under a key, replacing any existing record.

    Use --json to store numbers, booleans, lists and documents instead of
    plain strings. Use --if-not-exists to keep an existing value (this check
    is not atomic).

    Examples:

    \b
        # Store a string
        mongo-kv-tool kvstore set settings motd "hello world"

    \b
        # Store a number
        mongo-kv-tool kvstore set moneys p1 5000 --json

    \b
        # Store a document only if the key is new
        mongo-kv-tool kvstore set profiles alice '{"level": 3}' --json --if-not-exists

    \b
    Output Format:
        Returns JSON:
        {"key": "p1", "value": 5000, "replaced": false}
    """
    setup_logging(verbose)

    try:
        validate_collection_name(collection)
        validate_key(key)
        parsed = parse_value(value, as_json)
    except ValueError as e:
        logger.error(str(e))
        _usage_error(ctx, str(e), text)
        return

    try:
        logger.info(f"Setting key '{key}' in '{collection}'")
        logger.debug(f"Database: {database}, JSON: {as_json}, If not exists: {if_not_exists}")

        with MongoDBClient(uri, database) as client:
            lookup = _lookup_key(key, ignore_case)
            if if_not_exists:
                if not set_if_not_exists(client, collection, lookup, parsed):
                    message = f"Key '{key}' already exists in '{collection}'"
                    if text:
                        click.echo(error_text(message, "Drop --if-not-exists to overwrite"), err=True)
                    else:
                        click.echo(error_json(message, "Key exists", 1), err=True)
                    ctx.exit(1)
                result = {"key": key, "value": parsed, "replaced": False}
            else:
                result = set_value(client, collection, lookup, parsed)

        if text:
            output_text(f"✅ Set {key} = {result['value']}")
        else:
            output_json(result)

    except KVStoreError as e:
        _store_error(ctx, e, text)


@click.command("get")
@click.argument("collection")
@click.argument("key")
@click.option("--default", help="Default value if key not found")
@click.option(
    "--type",
    "value_type",
    type=click.Choice(list(VALUE_TYPES)),
    default="any",
    help="Expected value type",
)
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
def get_command(
    ctx: click.Context,
    collection: str,
    key: str,
    default: str | None,
    value_type: str,
    ignore_case: bool,
    uri: str,
    database: str,
    text: bool,
    verbose: int,
) -> None:
    """Retrieve a value by key.

    Use --type to require a value type (a float is never read as an int) and
    --default to provide a fallback value.

    Examples:

    \b
        # Get a key
        mongo-kv-tool kvstore get moneys p1

    \b
        # Require an integer
        mongo-kv-tool kvstore get moneys p1 --type int

    \b
        # Get with default fallback
        mongo-kv-tool kvstore get settings motd --default "not set"

    \b
    Output Format:
        Returns JSON:
        {"key": "p1", "value": 5000}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Getting key '{key}' from '{collection}'")
        logger.debug(f"Database: {database}, Type: {value_type}, Default: {default}")

        with MongoDBClient(uri, database) as client:
            try:
                value = get_value(
                    client, collection, _lookup_key(key, ignore_case), VALUE_TYPES[value_type]
                )
                result: dict[str, Any] = {"key": key, "value": value}
            except (KeyNotFoundError, ValueTypeError):
                if default is None:
                    raise
                result = {"key": key, "value": default, "default": True}

        if text:
            if result.get("default"):
                output_text(f"⚠️  {key} = {result['value']} (default)")
            else:
                output_text(f"{key} = {result['value']}")
        else:
            output_json(result)

    except KeyNotFoundError as e:
        if text:
            click.echo(
                error_text(
                    str(e),
                    f"Use 'mongo-kv-tool kvstore set {collection} {key} <value>' or provide --default",
                ),
                err=True,
            )
        else:
            click.echo(error_json(str(e), "Set key or use --default", 1), err=True)
        ctx.exit(1)

    except ValueTypeError as e:
        if text:
            click.echo(error_text(str(e), "Use --type any to read the raw value"), err=True)
        else:
            click.echo(error_json(str(e), "Value has a different type", 1), err=True)
        ctx.exit(1)

    except KVStoreError as e:
        _store_error(ctx, e, text)


@click.command("exists")
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
def exists_command(
    ctx: click.Context,
    collection: str,
    key: str,
    ignore_case: bool,
    uri: str,
    database: str,
    text: bool,
    verbose: int,
) -> None:
    """Check if a key exists.

    Exit codes:
    - 0: Key exists
    - 1: Key does not exist
    - 3: MongoDB error (unreachable, rejected, etc.)

    Examples:

    \b
        # Use in shell script
        if mongo-kv-tool kvstore exists moneys p1; then
            echo "Key exists"
        fi

    \b
    Output Format:
        Returns JSON:
        {"key": "p1", "exists": true}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Checking if key '{key}' exists in '{collection}'")

        with MongoDBClient(uri, database) as client:
            exists = exists_value(client, collection, _lookup_key(key, ignore_case))

        if text:
            if exists:
                output_text(f"✅ Key '{key}' exists")
            else:
                output_text(f"❌ Key '{key}' does not exist")
        else:
            output_json({"key": key, "exists": exists})

        if not exists:
            ctx.exit(1)

    except KVStoreError as e:
        _store_error(ctx, e, text)


@click.command("delete")
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
def delete_command(
    ctx: click.Context,
    collection: str,
    key: str,
    ignore_case: bool,
    uri: str,
    database: str,
    text: bool,
    verbose: int,
) -> None:
    """Delete the record stored under a key.

    Deletion is idempotent - deleting a non-existent key succeeds.

    Examples:

    \b
        mongo-kv-tool kvstore delete moneys p1

    \b
    Output Format:
        Returns JSON:
        {"key": "p1", "deleted": true, "value": 5000}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Deleting key '{key}' from '{collection}'")

        with MongoDBClient(uri, database) as client:
            removed = remove_value(client, collection, _lookup_key(key, ignore_case))

        result: dict[str, Any] = {"key": key, "deleted": removed is not None}
        if removed is not None:
            result["value"] = removed.get("value")

        if text:
            if removed is not None:
                output_text(f"✅ Deleted {key}")
            else:
                output_text(f"Key '{key}' did not exist")
        else:
            output_json(result)

    except KVStoreError as e:
        _store_error(ctx, e, text)


@click.command("rename")
@click.argument("collection")
@click.argument("old_key")
@click.argument("new_key")
@click.option("--ignore-case", is_flag=True, help="Match OLD_KEY regardless of case")
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
def rename_command(
    ctx: click.Context,
    collection: str,
    old_key: str,
    new_key: str,
    ignore_case: bool,
    uri: str,
    database: str,
    text: bool,
    verbose: int,
) -> None:
    """Move a record to a new key.

    A record already stored under NEW_KEY is overwritten. The rename is not
    atomic; avoid concurrent writers on either key.

    Examples:

    \b
        mongo-kv-tool kvstore rename moneys p1 player-1
        mongo-kv-tool kvstore rename moneys P1 player-1 --ignore-case

    \b
    Output Format:
        Returns JSON:
        {"old_key": "p1", "new_key": "player-1", "renamed": true}
    """
    setup_logging(verbose)

    try:
        validate_key(new_key)
    except ValueError as e:
        _usage_error(ctx, str(e), text)
        return

    try:
        logger.info(f"Renaming key '{old_key}' to '{new_key}' in '{collection}'")

        with MongoDBClient(uri, database) as client:
            renamed = rename_key(
                client, collection, _lookup_key(old_key, ignore_case), new_key
            )

        if not renamed:
            message = f"Key '{old_key}' not found in collection '{collection}'"
            if text:
                click.echo(error_text(message, "Check key name with 'list' command"), err=True)
            else:
                click.echo(error_json(message, "Key not found", 1), err=True)
            ctx.exit(1)

        if text:
            output_text(f"✅ Renamed {old_key} -> {new_key}")
        else:
            output_json({"old_key": old_key, "new_key": new_key, "renamed": True})

    except KVStoreError as e:
        _store_error(ctx, e, text)


@click.command("list")
@click.argument("collection")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "keys"]),
    default="json",
    help="Output format",
)
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
def list_command(
    ctx: click.Context,
    collection: str,
    output_format: str,
    uri: str,
    database: str,
    text: bool,
    verbose: int,
) -> None:
    """List every key in a collection.

    Examples:

    \b
        # List all keys
        mongo-kv-tool kvstore list moneys

    \b
        # Output only keys, one per line
        mongo-kv-tool kvstore list moneys --format keys

    \b
    Output Format:
        Returns JSON:
        {"collection": "moneys", "keys": ["p1", "p2"], "count": 2}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Listing keys in '{collection}'")

        with MongoDBClient(uri, database) as client:
            keys = list_keys(client, collection)

        if output_format == "keys":
            for key in keys:
                output_text(key)
        elif text:
            if not keys:
                output_text(f"No keys found in '{collection}'")
            else:
                output_text(f"Found {len(keys)} key(s):")
                for key in keys:
                    output_text(f"  {key}")
        else:
            output_json({"collection": collection, "keys": keys, "count": len(keys)})

    except KVStoreError as e:
        _store_error(ctx, e, text)


@click.command("all")
@click.argument("collection")
@click.option(
    "--where",
    "conditions",
    multiple=True,
    metavar="FIELD=VALUE",
    help="Only include records whose FIELD equals VALUE (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Parse each --where VALUE as JSON")
@click.option("--uri", envvar=ENV_URI, default=DEFAULT_URI, help="MongoDB connection URI")
@click.option("--database", envvar=ENV_DATABASE, default=DEFAULT_DATABASE, help="Database name")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
)
@click.pass_context
def all_command(
    ctx: click.Context,
    collection: str,
    conditions: tuple[str, ...],
    as_json: bool,
    uri: str,
    database: str,
    verbose: int,
) -> None:
    """Dump a collection as a key -> value object.

    Examples:

    \b
        # Everything
        mongo-kv-tool kvstore all settings

    \b
        # Only records whose value is "enabled"
        mongo-kv-tool kvstore all features --where value=enabled

    \b
        # Only records whose value is the number 5000
        mongo-kv-tool kvstore all moneys --where value=5000 --json

    \b
    Output Format:
        Returns JSON:
        {"motd": "hello world", "theme": "dark"}
    """
    setup_logging(verbose)

    filters: dict[str, Any] = {}
    for condition in conditions:
        field, sep, expected = condition.partition("=")
        if not sep or not field:
            _usage_error(ctx, f"Invalid --where condition '{condition}', expected FIELD=VALUE", False)
            return
        try:
            filters[field] = parse_value(expected, as_json)
        except ValueError as e:
            _usage_error(ctx, str(e), False)
            return

    try:
        logger.info(f"Reading all records in '{collection}'")
        logger.debug(f"Filters: {filters}")

        with MongoDBClient(uri, database) as client:
            output_json(get_all(client, collection, filters))

    except KVStoreError as e:
        _store_error(ctx, e, False)
