import json

import pytest

from mongo_kv_tool.kvstore.core.kv_operations import set_document, set_value
from mongo_kv_tool.kvstore.core.typed_operations import (
    get_bool,
    get_float,
    get_int,
    get_list,
    get_object,
    get_object_json,
    get_objects,
    get_string,
    get_value,
)
from mongo_kv_tool.kvstore.exceptions import KeyNotFoundError, ValueTypeError
from mongo_kv_tool.kvstore.models import CaseInsensitiveKey

from .domain import Player

COLLECTION = "records"


class TestDefaults:
    def test_missing_keys_return_defaults(self, client):
        assert get_int(client, COLLECTION, "nope", default=7) == 7
        assert get_string(client, COLLECTION, "nope", default="x") == "x"
        assert get_float(client, COLLECTION, "nope", default=1.5) == 1.5
        assert get_bool(client, COLLECTION, "nope", default=True) is True

    def test_builtin_defaults(self, client):
        assert get_int(client, COLLECTION, "nope") == 0
        assert get_string(client, COLLECTION, "nope") == ""
        assert get_float(client, COLLECTION, "nope") == 0.0
        assert get_bool(client, COLLECTION, "nope") is False

    def test_type_mismatch_returns_default(self, client):
        set_value(client, COLLECTION, "ratio", 0.5)
        set_value(client, COLLECTION, "name", "ann")

        assert get_int(client, COLLECTION, "ratio", default=-1) == -1
        assert get_bool(client, COLLECTION, "name", default=True) is True
        assert get_string(client, COLLECTION, "ratio", default="n/a") == "n/a"


class TestTypedReads:
    def test_int(self, client):
        set_value(client, COLLECTION, "p1", 5000)

        assert get_int(client, COLLECTION, "p1") == 5000

    def test_float_widens_int(self, client):
        set_value(client, COLLECTION, "p1", 3)

        assert get_float(client, COLLECTION, "p1") == 3.0

    def test_bool_is_not_an_int(self, client):
        set_value(client, COLLECTION, "flag", True)

        assert get_bool(client, COLLECTION, "flag") is True
        assert get_int(client, COLLECTION, "flag", default=9) == 9

    def test_case_insensitive_read(self, client):
        set_value(client, COLLECTION, "Greeting", "hi")

        assert get_string(client, COLLECTION, CaseInsensitiveKey("greeting")) == "hi"

    def test_custom_value_field(self, client):
        set_document(client, COLLECTION, "p1", {"key": "p1", "value": 1, "score": 99})

        assert get_int(client, COLLECTION, "p1", value_field="score") == 99


class TestGetValue:
    def test_raw_value(self, client):
        set_value(client, COLLECTION, "cfg", {"a": 1})

        assert get_value(client, COLLECTION, "cfg") == {"a": 1}

    def test_missing_without_default_raises(self, client):
        with pytest.raises(KeyNotFoundError):
            get_value(client, COLLECTION, "nope")

    def test_missing_with_default(self, client):
        assert get_value(client, COLLECTION, "nope", int, default=3) == 3

    def test_none_is_a_usable_default(self, client):
        set_value(client, COLLECTION, "p1", 1.5)

        assert get_value(client, COLLECTION, "nope", default=None) is None
        assert get_value(client, COLLECTION, "p1", int, default=None) is None

    def test_mismatch_without_default_raises(self, client):
        set_value(client, COLLECTION, "p1", 1.5)

        with pytest.raises(ValueTypeError):
            get_value(client, COLLECTION, "p1", int)

    def test_mismatch_with_default(self, client):
        set_value(client, COLLECTION, "p1", 1.5)

        assert get_value(client, COLLECTION, "p1", int, default=0) == 0

    def test_decodes_objects(self, client):
        set_value(client, COLLECTION, "hero", Player(name="ann", level=3))

        assert get_value(client, COLLECTION, "hero", Player) == Player(name="ann", level=3)


class TestObjects:
    def test_get_object_missing_raises(self, client):
        with pytest.raises(KeyNotFoundError):
            get_object(client, COLLECTION, "nope", Player)

    def test_get_object_reads_json_text(self, client):
        set_value(client, COLLECTION, "hero", '{"name": "bob", "level": 2}')

        assert get_object(client, COLLECTION, "hero", Player) == Player(name="bob", level=2)

    def test_get_object_wrong_shape_raises(self, client):
        set_value(client, COLLECTION, "hero", 5)

        with pytest.raises(ValueTypeError):
            get_object(client, COLLECTION, "hero", Player)

    def test_get_objects_decodes_every_match(self, client, records):
        records.insert_many(
            [
                {"key": "team", "value": {"name": "a", "level": 1}},
                {"key": "team", "value": {"name": "b", "level": 2}},
            ]
        )

        players = get_objects(client, COLLECTION, "team", Player)

        assert sorted(p.name for p in players) == ["a", "b"]

    def test_get_object_json(self, client):
        set_value(client, COLLECTION, "p1", 5)

        document = json.loads(get_object_json(client, COLLECTION, "p1"))

        assert document["key"] == "p1"
        assert document["value"] == 5
        assert "$oid" in document["_id"]

    def test_get_object_json_missing(self, client):
        assert get_object_json(client, COLLECTION, "nope") is None


class TestGetList:
    def test_missing_key_is_none(self, client):
        assert get_list(client, COLLECTION, "nope") is None

    def test_empty_list_is_not_none(self, client):
        set_value(client, COLLECTION, "empty", [])

        assert get_list(client, COLLECTION, "empty") == []

    def test_decodes_elements(self, client):
        set_value(client, COLLECTION, "scores", [1, 2, 3])

        assert get_list(client, COLLECTION, "scores", int) == [1, 2, 3]

    def test_decodes_objects(self, client):
        set_value(client, COLLECTION, "team", [Player(name="a", level=1), Player(name="b", level=2)])

        team = get_list(client, COLLECTION, "team", Player)

        assert team == [Player(name="a", level=1), Player(name="b", level=2)]

    def test_non_sequence_raises(self, client):
        set_value(client, COLLECTION, "scalar", 5)

        with pytest.raises(ValueTypeError):
            get_list(client, COLLECTION, "scalar", int)

    def test_bad_element_raises(self, client):
        set_value(client, COLLECTION, "mixed", [1, "two"])

        with pytest.raises(ValueTypeError):
            get_list(client, COLLECTION, "mixed", int)
