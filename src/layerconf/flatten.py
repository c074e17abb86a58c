"""
Flattening config trees into dotted/indexed property names.

Frameworks that only understand flat key/value properties get one entry
per leaf:

    foo: abc                      foo        = "abc"
    bar:                          bar.baz    = 123
      baz: 123            ->      bar.qux    = "def"
      qux: def                    myList     = ["a", "b", "c"]
    myList: [a, b, c]             myList[0]  = "a"
                                  myList[1]  = "b"
                                  myList[2]  = "c"

Objects never appear as entries themselves, only their descendants.
Lists appear both whole and element by element.
"""

import collections.abc as _abc
import typing as _typing

import layerconf.tree as tree

Listener: _typing.TypeAlias = _typing.Callable[[str, str, _typing.Any], None]
"""Called as listener(parent_path, path, value). Root entries have parent ""."""


def _nop(parent_path: str, path: str, value: _typing.Any) -> None:
    del parent_path, path, value


class ConfigVisitor:
    """
    Walks a tree and reports every node with its property path.

    Listeners are optional; configure them fluently:

        ConfigVisitor().on_value(collect).on_list(collect).visit_root(cfg)
    """

    def __init__(self) -> None:
        self._on_map: Listener = _nop
        self._on_list: Listener = _nop
        self._on_value: Listener = _nop
        self._on_any: Listener = _nop

    def on_map(self, callback: Listener) -> "ConfigVisitor":
        self._on_map = callback
        return self

    def on_list(self, callback: Listener) -> "ConfigVisitor":
        self._on_list = callback
        return self

    def on_value(self, callback: Listener) -> "ConfigVisitor":
        self._on_value = callback
        return self

    def on_any(self, callback: Listener) -> "ConfigVisitor":
        self._on_any = callback
        return self

    def visit_root(self, config: _abc.Mapping[str, _typing.Any]) -> None:
        for key, value in tree.thaw(config).items():
            self.visit("", key, value)

    def visit(self, parent_path: str, path: str, value: _typing.Any) -> None:
        self._on_any(parent_path, path, value)
        if isinstance(value, dict):
            self.visit_map(parent_path, path, value)
        elif isinstance(value, list):
            self.visit_list(parent_path, path, value)
        else:
            self._on_value(parent_path, path, value)

    def visit_map(
        self,
        parent_path: str,
        path: str,
        value: dict[str, _typing.Any],
    ) -> None:
        self._on_map(parent_path, path, value)
        for key, child in value.items():
            self.visit(path, f"{path}.{key}", child)

    def visit_list(
        self,
        parent_path: str,
        path: str,
        value: list[_typing.Any],
    ) -> None:
        self._on_list(parent_path, path, value)
        for index, child in enumerate(value):
            self.visit(path, f"{path}[{index}]", child)


def flatten(config: _abc.Mapping[str, _typing.Any]) -> dict[str, _typing.Any]:
    """
    Flatten a tree into {property_path: value}, sorted by path.

    Values are plain Python values (lists stay lists). Object nodes are
    not emitted.
    """
    entries: dict[str, _typing.Any] = {}

    def collect(parent_path: str, path: str, value: _typing.Any) -> None:
        del parent_path
        entries[path] = value

    ConfigVisitor().on_list(collect).on_value(collect).visit_root(config)
    return {key: entries[key] for key in sorted(entries)}
