from pyseam.position import get_path_at_position, offset_at

JSON_TEXT = '{\n  "a": {\n    "b": 1\n  },\n  "list": [10, 20]\n}'

YAML_TEXT = "server:\n  host: x\n  ports:\n    - 80\n    - 443\nname: y\n"


def test_offset_at():
    assert offset_at("ab\ncd", 2, 1) == 3
    assert offset_at("ab\ncd", 1, 99) == 2
    assert offset_at("ab", 3, 1) is None
    assert offset_at("ab", 1, 0) is None


def test_json_positions():
    assert get_path_at_position(JSON_TEXT, 3, 6, "json") == "a.b"
    assert get_path_at_position(JSON_TEXT, 2, 4, "json") == "a"
    assert get_path_at_position(JSON_TEXT, 5, 16, "json") == "list[1]"
    assert get_path_at_position(JSON_TEXT, 1, 1, "json") is None


def test_jsonc_with_comments():
    text = '{\n  // note\n  "a": 1\n}'
    assert get_path_at_position(text, 3, 4, "jsonc") == "a"


def test_yaml_positions():
    assert get_path_at_position(YAML_TEXT, 2, 3, "yaml") == "server.host"
    assert get_path_at_position(YAML_TEXT, 5, 7, "yaml") == "server.ports[1]"
    assert get_path_at_position(YAML_TEXT, 1, 1, "yaml") == "server"
    assert get_path_at_position(YAML_TEXT, 6, 1, "yaml") == "name"


def test_invalid_input_gives_none():
    assert get_path_at_position("{bad", 1, 2, "json") is None
    assert get_path_at_position("a: [1, 2\n", 1, 1, "yaml") is None
    assert get_path_at_position(YAML_TEXT, 99, 1, "yaml") is None
