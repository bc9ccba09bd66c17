"""
Logging setup for kvstore commands.

Verbosity maps onto log levels:
    0 (default) -> WARNING
    1 (-v)      -> INFO
    2 (-vv)     -> DEBUG
    3 (-vvv)    -> DEBUG, including pymongo driver logs
"""

import logging
import sys

DRIVER_LOGGERS = ("pymongo", "pymongo.command", "pymongo.connection", "pymongo.serverSelection")


def setup_logging(verbose_count: int = 0) -> None:
    """
    Configure root logging for the CLI.

    Args:
        verbose_count: Number of -v flags given
    """
    if verbose_count <= 0:
        level = logging.WARNING
    elif verbose_count == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )

    # Driver logs are noisy; only show them at TRACE
    driver_level = logging.DEBUG if verbose_count >= 3 else logging.WARNING
    for name in DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(driver_level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
