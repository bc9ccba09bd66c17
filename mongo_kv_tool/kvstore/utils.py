"""
Utility functions for kvstore commands.
"""

import json
import sys
from typing import Any

from .constants import MAX_COLLECTION_NAME_LENGTH, MAX_KEY_LENGTH


def output_json(data: Any, quiet: bool = False) -> None:
    """
    Output JSON to stdout.

    Args:
        data: Data to output as JSON (ObjectIds and dates are rendered as strings)
        quiet: If True, suppress output
    """
    if not quiet:
        print(json.dumps(data, default=str))


def output_text(message: str, quiet: bool = False) -> None:
    """
    Output text to stdout.

    Args:
        message: Message to output
        quiet: If True, suppress output
    """
    if not quiet:
        print(message)


def error_json(error: str, solution: str, exit_code: int) -> str:
    """
    Format error as a JSON line.

    Args:
        error: Error message
        solution: Solution suggestion
        exit_code: Exit code

    Returns:
        Serialized error object
    """
    return json.dumps({"error": error, "solution": solution, "exit_code": exit_code})


def error_text(error: str, solution: str) -> str:
    """
    Format error as human-readable text.

    Args:
        error: Error message
        solution: Solution suggestion

    Returns:
        Formatted error message
    """
    return f"❌ Error: {error}\n\n💡 Solution: {solution}"


def parse_value(raw: str, as_json: bool) -> Any:
    """
    Turn a command line VALUE into the value to store.

    Args:
        raw: Argument as typed
        as_json: Parse the argument as JSON instead of storing the string

    Raises:
        ValueError: If as_json is set and raw is not valid JSON
    """
    if not as_json:
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"VALUE is not valid JSON: {e.msg}") from e


def validate_collection_name(name: str) -> bool:
    """
    Validate MongoDB collection name.

    Args:
        name: Collection name to validate

    Returns:
        True if valid

    Raises:
        ValueError: If collection name is invalid
    """
    if not name:
        raise ValueError("Collection name cannot be empty")
    if len(name) > MAX_COLLECTION_NAME_LENGTH:
        raise ValueError(f"Collection name cannot exceed {MAX_COLLECTION_NAME_LENGTH} characters")
    if "$" in name or "\0" in name:
        raise ValueError("Collection name cannot contain '$' or null characters")
    if name.startswith("system."):
        raise ValueError("Collection names starting with 'system.' are reserved")
    return True


def validate_key(key: str) -> bool:
    """
    Validate key name.

    Args:
        key: Key to validate

    Returns:
        True if valid

    Raises:
        ValueError: If key is invalid
    """
    if not key:
        raise ValueError("Key cannot be empty")
    if len(key) > MAX_KEY_LENGTH:
        raise ValueError(f"Key cannot exceed {MAX_KEY_LENGTH} characters")
    return True
