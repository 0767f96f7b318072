import logging

import pytest

from pyseam.document import DocumentModel
from pyseam.errors import UnknownFormatError
from pyseam.paths import parse_path

JSONC = '{\n  // greeting\n  "name": "old",\n  "count": 1\n}'


def test_deserialize_and_read():
    doc = DocumentModel.deserialize(JSONC, "jsonc")
    assert doc.data == {"name": "old", "count": 1}
    assert doc.get_value("name") == "old"
    assert doc.get_value(parse_path("count")) == 1
    assert doc.format == "jsonc"
    assert doc.serialize() == JSONC


def test_deserialize_bad_text_keeps_raw(caplog):
    with caplog.at_level(logging.ERROR):
        doc = DocumentModel.deserialize("{bad", "json")
    assert doc.get_data() == {}
    assert doc.serialize() == "{bad"
    assert "Failed to parse" in caplog.text


def test_non_mapping_root_becomes_empty():
    assert DocumentModel.deserialize("[1, 2]", "json").data == {}
    assert DocumentModel.deserialize("just text", "yaml").data == {}


def test_set_value_patches_text_and_notifies():
    doc = DocumentModel.deserialize(JSONC, "jsonc")
    seen = []
    doc.subscribe(seen.append)
    doc.set_value("name", "new")
    assert seen == [doc]
    assert doc.serialize() == JSONC.replace('"old"', '"new"')


def test_delete_value():
    doc = DocumentModel.deserialize(JSONC, "jsonc")
    doc.delete_value("count")
    assert doc.data == {"name": "old"}
    assert "// greeting" in doc.serialize()
    assert '"count"' not in doc.serialize()


def test_mutations_always_notify():
    doc = DocumentModel({"a": 1})
    calls = []
    doc.subscribe(lambda d: calls.append(d.data))
    doc.set_value("a", 1)
    doc.delete_value("missing")
    assert len(calls) == 2


def test_subscribe_dedup_and_unsubscribe():
    doc = DocumentModel()
    calls = []

    def listener(d):
        calls.append(d)

    unsubscribe = doc.subscribe(listener)
    doc.subscribe(listener)
    doc.set_value("a", 1)
    assert len(calls) == 1
    unsubscribe()
    doc.set_value("a", 2)
    assert len(calls) == 1


def test_unsubscribe_keeps_other_listeners():
    doc = DocumentModel()
    first, second = [], []
    unsubscribe = doc.subscribe(first.append)
    doc.subscribe(second.append)
    unsubscribe()
    unsubscribe()
    doc.set_value("a", 1)
    assert first == []
    assert second == [doc]


def test_close_drops_listeners():
    doc = DocumentModel()
    calls = []
    doc.subscribe(calls.append)
    doc.close()
    doc.set_value("a", 1)
    assert calls == []


def test_listener_mutation_is_queued_not_nested():
    doc = DocumentModel({"n": 0})
    first, second = [], []

    def bump(d):
        first.append(d.get_value("n"))
        if d.get_value("n") == 1:
            d.set_value("n", 2)

    doc.subscribe(bump)
    doc.subscribe(lambda d: second.append(d.get_value("n")))
    doc.set_value("n", 1)
    assert first == [1, 2]
    assert second == [2, 2]
    assert doc.data == {"n": 2}


def test_empty_raw_text_uses_plain_serialization():
    doc = DocumentModel({"a": 1}, format="json")
    assert doc.raw_text == ""
    assert doc.serialize() == '{\n  "a": 1\n}'
    doc.set_value("b", True)
    assert doc.raw_text == '{\n  "a": 1,\n  "b": true\n}'


def test_yaml_insertion_follows_schema():
    schema = {"properties": {"name": {}, "newKey": {}, "z": {}}}
    doc = DocumentModel.deserialize("name: test\nz: 1\n", "yaml", schema)
    doc.set_value("newKey", "v")
    assert doc.serialize() == "name: test\nnewKey: v\nz: 1\n"


def test_yaml_new_key_without_schema():
    doc = DocumentModel.deserialize("name: test\n", "yaml")
    doc.set_value("newKey", "v")
    assert doc.serialize() == "name: test\nnewKey: v\n"


def test_set_data():
    doc = DocumentModel.deserialize('{"a": 1}', "json")
    calls = []
    doc.subscribe(calls.append)
    doc.set_data({"a": 2})
    assert doc.serialize() == '{"a": 2}'
    assert calls == [doc]
    with pytest.raises(TypeError):
        doc.set_data([1])


def test_set_schema_replaces_resolver():
    doc = DocumentModel.deserialize("a: 1\n", "yaml")
    calls = []
    doc.subscribe(calls.append)
    old_resolver = doc.resolver
    doc.set_schema({"properties": {"b": {}, "a": {}}})
    assert doc.resolver is not old_resolver
    assert doc.schema == {"properties": {"b": {}, "a": {}}}
    assert doc.serialize() == "a: 1\n"
    assert len(calls) == 1
    doc.set_value("b", 2)
    assert doc.serialize() == "b: 2\na: 1\n"


def test_set_format_reserializes():
    doc = DocumentModel.deserialize(JSONC, "jsonc")
    calls = []
    doc.subscribe(calls.append)
    doc.set_format("yaml")
    assert doc.format == "yaml"
    assert doc.serialize() == "name: old\ncount: 1\n"
    assert len(calls) == 1
    with pytest.raises(UnknownFormatError):
        doc.set_format("toml")


def test_update_from_content():
    doc = DocumentModel.deserialize("a: 1\n", "yaml")
    calls = []
    doc.subscribe(calls.append)
    assert doc.update_from_content("# edited\na: 2\n")
    assert doc.data == {"a": 2}
    assert doc.serialize() == "# edited\na: 2\n"
    assert len(calls) == 1


def test_update_from_bad_content_keeps_state(caplog):
    doc = DocumentModel.deserialize("a: 1\n", "yaml")
    calls = []
    doc.subscribe(calls.append)
    with caplog.at_level(logging.ERROR):
        assert not doc.update_from_content("a: [1, 2\n")
    assert doc.data == {"a": 1}
    assert doc.serialize() == "a: 1\n"
    assert calls == []
    assert "Failed to update" in caplog.text


def test_jsonc_document_rejects_json5_extras(caplog):
    with caplog.at_level(logging.ERROR):
        doc = DocumentModel.deserialize("{a: 1}", "jsonc")
    assert doc.data == {}
    assert doc.serialize() == "{a: 1}"
    assert "Failed to parse" in caplog.text
    doc = DocumentModel.deserialize(JSONC, "jsonc")
    with caplog.at_level(logging.ERROR):
        assert not doc.update_from_content("{'name': 'new'}")
    assert doc.data == {"name": "old", "count": 1}


def test_set_past_end_of_list_leaves_text_alone():
    text = "# note\na: 5  # five\n"
    doc = DocumentModel.deserialize(text, "yaml")
    doc.set_value(parse_path("a[3]"), "x")
    doc.set_value(parse_path("b[2]"), "x")
    assert doc.data == {"a": 5}
    assert doc.serialize() == text


def test_snapshots_are_not_mutated():
    doc = DocumentModel({"user": {"name": "a"}})
    before = doc.data
    doc.set_value("user.name", "b")
    assert before == {"user": {"name": "a"}}
    assert doc.get_value("user.name") == "b"
