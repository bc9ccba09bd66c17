import logging

import pytest

from mongo_kv_tool.kvstore.logging_config import setup_logging
from mongo_kv_tool.kvstore.utils import parse_value, validate_collection_name, validate_key


def test_parse_value_keeps_strings():
    assert parse_value("5000", as_json=False) == "5000"


def test_parse_value_json():
    assert parse_value('{"level": 3}', as_json=True) == {"level": 3}


def test_parse_value_invalid_json():
    with pytest.raises(ValueError, match="not valid JSON"):
        parse_value("{oops", as_json=True)


@pytest.mark.parametrize("name", ["", "bad$name", "system.users", "x" * 256])
def test_invalid_collection_names(name):
    with pytest.raises(ValueError):
        validate_collection_name(name)


def test_valid_key():
    assert validate_key("p1") is True


def test_empty_key():
    with pytest.raises(ValueError):
        validate_key("")


@pytest.mark.parametrize(
    "count,root_level,driver_level",
    [
        (0, logging.WARNING, logging.WARNING),
        (1, logging.INFO, logging.WARNING),
        (2, logging.DEBUG, logging.WARNING),
        (3, logging.DEBUG, logging.DEBUG),
    ],
)
def test_verbosity_levels(count, root_level, driver_level):
    setup_logging(count)

    assert logging.getLogger().level == root_level
    assert logging.getLogger("pymongo").level == driver_level
