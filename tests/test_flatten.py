"""Tests for flattening trees and the flat property source."""

import typing as _typing

import pytest as _pytest

import layerconf.factory as factory
import layerconf.flatten as flatten
import layerconf.sources as sources
import layerconf.tree as tree

SAMPLE = tree.ConfigTree(
    {
        "foo": "abc",
        "bar": {"baz": 123, "qux": "def"},
        "myList": ["a", "b", "c"],
    }
)


class TestFlatten:
    """flatten()"""

    def test_sample(self) -> None:
        flat = flatten.flatten(SAMPLE)

        assert list(flat.items()) == [
            ("bar.baz", 123),
            ("bar.qux", "def"),
            ("foo", "abc"),
            ("myList", ["a", "b", "c"]),
            ("myList[0]", "a"),
            ("myList[1]", "b"),
            ("myList[2]", "c"),
        ]

    def test_objects_are_not_entries(self) -> None:
        assert "bar" not in flatten.flatten(SAMPLE)

    def test_objects_inside_lists(self) -> None:
        flat = flatten.flatten({"servers": [{"host": "a"}, {"host": "b"}]})

        assert flat["servers[0].host"] == "a"
        assert flat["servers[1].host"] == "b"
        assert "servers[0]" not in flat
        assert flat["servers"] == [{"host": "a"}, {"host": "b"}]

    def test_nested_lists(self) -> None:
        flat = flatten.flatten({"m": [[1, 2]]})

        assert flat["m[0]"] == [1, 2]
        assert flat["m[0][1]"] == 2

    def test_none_is_a_value(self) -> None:
        assert flatten.flatten({"a": None}) == {"a": None}

    def test_empty(self) -> None:
        assert flatten.flatten(tree.ConfigTree.empty()) == {}

    def test_values_are_plain(self) -> None:
        flat = flatten.flatten(SAMPLE)

        assert type(flat["myList"]) is list


class TestConfigVisitor:
    """Listener callbacks."""

    def test_paths_and_parents(self) -> None:
        seen: list[tuple[str, str, str]] = []

        def record(kind: str) -> flatten.Listener:
            def listener(parent: str, path: str, value: _typing.Any) -> None:
                del value
                seen.append((kind, parent, path))

            return listener

        (
            flatten.ConfigVisitor()
            .on_map(record("map"))
            .on_list(record("list"))
            .on_value(record("value"))
            .visit_root({"a": {"b": [1]}})
        )

        assert seen == [
            ("map", "", "a"),
            ("list", "a", "a.b"),
            ("value", "a.b", "a.b[0]"),
        ]

    def test_on_any_sees_every_node(self) -> None:
        paths: list[str] = []
        flatten.ConfigVisitor().on_any(lambda parent, path, value: paths.append(path)).visit_root(
            SAMPLE
        )

        assert set(paths) == {
            "foo",
            "bar",
            "bar.baz",
            "bar.qux",
            "myList",
            "myList[0]",
            "myList[1]",
            "myList[2]",
        }


class TestConfigPropertySource:
    """Flat named property view."""

    def test_lookup(self) -> None:
        props = sources.ConfigPropertySource.of("app", SAMPLE)

        assert props.name == "app"
        assert props.get("bar.baz") == 123
        assert props.get("myList[1]") == "b"
        assert props.contains("foo")
        assert not props.contains("bar")
        assert props.get("missing", "fallback") == "fallback"

    def test_property_names_sorted(self) -> None:
        props = sources.ConfigPropertySource.of("app", SAMPLE)

        assert props.property_names == tuple(sorted(props.property_names))
        assert len(props.property_names) == 7

    def test_as_dict_is_a_copy(self) -> None:
        props = sources.ConfigPropertySource.of("app", SAMPLE)

        props.as_dict()["foo"] = "changed"

        assert props.get("foo") == "abc"

    def test_empty_name_rejected(self) -> None:
        with _pytest.raises(ValueError):
            sources.ConfigPropertySource("", SAMPLE)

    def test_none_config_rejected(self) -> None:
        with _pytest.raises(ValueError):
            sources.ConfigPropertySource.of("app", None)  # type: ignore[arg-type]

    def test_load_uses_factory(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(factory, "load", lambda: SAMPLE)

        props = sources.ConfigPropertySource.load()

        assert props.name == sources.ConfigPropertySource.DEFAULT_PROPERTY_SOURCE_NAME
        assert props.get("bar.qux") == "def"
