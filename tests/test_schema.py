import pytest

from pyseam.errors import SchemaError
from pyseam.paths import parse_path
from pyseam.schema import SchemaResolver

SCHEMA = {
    "definitions": {"address": {"properties": {"street": {}, "city": {}}}},
    "$defs": {"a/b": {"x-order": ["q", "p"]}},
    "properties": {
        "home": {"$ref": "#/definitions/address"},
        "odd": {"$ref": "#/$defs/a~1b"},
    },
    "patternProperties": {"^x-": {"type": "string"}},
}


def test_ref_is_followed_for_order():
    resolver = SchemaResolver(SCHEMA)
    assert resolver.property_order_at(parse_path("home")) == ["street", "city"]
    assert resolver.property_order_at(parse_path("odd")) == ["q", "p"]
    assert resolver.property_order_at(()) == ["home", "odd"]


def test_unknown_locations_have_no_order():
    resolver = SchemaResolver(SCHEMA)
    assert resolver.property_order_at(parse_path("nope.deeper")) == []
    assert resolver.property_order_at(parse_path("home[0]")) == []
    assert SchemaResolver().property_order_at(parse_path("a")) == []


def test_pattern_and_additional_properties():
    resolver = SchemaResolver(SCHEMA)
    assert resolver.get_property_schema(SCHEMA, "x-foo") == {"type": "string"}
    assert resolver.get_property_schema(SCHEMA, "other") is None
    open_schema = {"additionalProperties": {"type": "number"}}
    assert resolver.get_property_schema(open_schema, "n") == {"type": "number"}


def test_bad_refs_raise():
    resolver = SchemaResolver(SCHEMA)
    with pytest.raises(SchemaError):
        resolver.resolve({"$ref": "#/definitions/missing"})
    with pytest.raises(SchemaError):
        resolver.resolve({"$ref": "other.json#/a"})


def test_resolution_is_cached():
    resolver = SchemaResolver(SCHEMA)
    first = resolver.resolve({"$ref": "#/definitions/address"})
    assert resolver.resolve({"$ref": "#/definitions/address"}) is first
    resolver.clear_cache()
    assert resolver.root is SCHEMA
