import pytest

from pyseam.paths import (
    IndexSegment,
    PropertySegment,
    ancestors,
    is_ancestor,
    make_path,
    parent_path,
    parse_path,
    path_to_string,
    paths_equal,
)


def test_parse_dotted_path_with_indexes():
    assert parse_path("user.addresses[0].street") == (
        PropertySegment("user"),
        PropertySegment("addresses"),
        IndexSegment(0),
        PropertySegment("street"),
    )


def test_empty_string_is_root():
    assert parse_path("") == ()


def test_tuples_pass_through():
    path = (PropertySegment("a"),)
    assert parse_path(path) is path


def test_path_to_string():
    assert path_to_string(parse_path("items[2].name")) == "items[2].name"
    assert path_to_string((IndexSegment(0), PropertySegment("a"))) == "[0].a"
    assert path_to_string(()) == ""


def test_index_segment_validation():
    with pytest.raises(ValueError):
        IndexSegment(-1)
    with pytest.raises(TypeError):
        IndexSegment(True)


def test_make_path_accepts_bare_keys_and_ints():
    assert make_path(["a", 0, PropertySegment("b")]) == (
        PropertySegment("a"),
        IndexSegment(0),
        PropertySegment("b"),
    )


def test_ancestry_helpers():
    path = parse_path("a.b")
    assert ancestors(path) == [(), (PropertySegment("a"),), path]
    assert parent_path(path) == (PropertySegment("a"),)
    assert is_ancestor((), path)
    assert is_ancestor((PropertySegment("a"),), path)
    assert not is_ancestor(path, path)
    assert paths_equal(parse_path("a[0]"), make_path(["a", 0]))
    assert not paths_equal(parse_path("a[0]"), parse_path("a.0"))
