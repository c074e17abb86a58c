"""
ConfigTree: an immutable hierarchical configuration value.

A tree is a mapping of string keys to nested objects, lists and scalars
(str, int, float, bool, None). Trees are never modified after
construction; every combining operation returns a new tree.

Thread safety: trees are immutable, so sharing them between threads is
safe.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import layerconf.tree._frozen as _frozen
import layerconf.tree._merge as _merge

# Sentinel for "no default given" in get_path()
_MISSING = object()


class ConfigTree(_abc.Mapping[str, _typing.Any]):
    """
    Immutable configuration tree with recursive fallback merging.

    Example:
        >>> defaults = ConfigTree({"db": {"host": "localhost", "port": 5432}})
        >>> prod = ConfigTree({"db": {"host": "db.internal"}})
        >>> prod.with_fallback(defaults).to_dict()
        {'db': {'host': 'db.internal', 'port': 5432}}

    Args:
        data: Mapping to copy into the tree. Keys are converted to str.
        origin: Human-readable description of where the data came from
            (a file path, a URL, "merge of ..."). Used in messages only.
    """

    __slots__ = ("_data", "_origin")

    def __init__(
        self,
        data: _abc.Mapping[str, _typing.Any] | None = None,
        *,
        origin: str | None = None,
    ) -> None:
        if data is not None and not isinstance(data, _abc.Mapping):
            raise TypeError(
                f"ConfigTree data must be a mapping, got {type(data).__name__}"
            )
        self._data: dict[str, _typing.Any] = _frozen.thaw(data) if data else {}
        self._origin = origin

    @classmethod
    def empty(cls, origin: str | None = None) -> ConfigTree:
        """Return a tree with no keys."""
        return cls(origin=origin or "empty config")

    @classmethod
    def _adopt(cls, data: dict[str, _typing.Any], origin: str | None) -> ConfigTree:
        """Wrap a plain dict the caller owns without copying it again."""
        tree = cls.__new__(cls)
        tree._data = data
        tree._origin = origin
        return tree

    @property
    def origin(self) -> str:
        """Description of where this tree came from."""
        return self._origin or "config"

    @property
    def is_empty(self) -> bool:
        return not self._data

    # =========================================================================
    # Merging
    # =========================================================================

    def with_fallback(self, other: _abc.Mapping[str, _typing.Any]) -> ConfigTree:
        """
        Return a tree where this tree's values win and other fills the gaps.

        Nested objects merge recursively; lists, scalars and type
        mismatches take this tree's value wholesale.

        Args:
            other: The lower-priority tree (or any mapping).

        Returns:
            New merged tree. Neither input is modified.
        """
        if not other:
            return self
        if not self._data and isinstance(other, ConfigTree):
            return other
        other_origin = other.origin if isinstance(other, ConfigTree) else "mapping"
        merged = _merge.merge_dicts(_frozen.thaw(self._data), _frozen.thaw(other))
        return ConfigTree._adopt(merged, f"merge of {self.origin},{other_origin}")

    def merge_on_top_of(self, lower: _abc.Mapping[str, _typing.Any]) -> ConfigTree:
        """Same as with_fallback(), named from the fallback's side."""
        return self.with_fallback(lower)

    # =========================================================================
    # Path access
    # =========================================================================

    def get_path(self, path: str, default: _typing.Any = _MISSING) -> _typing.Any:
        """
        Look up a dotted path such as "db.pool.size".

        Raises:
            KeyError: If the path does not exist and no default is given.
        """
        current: _typing.Any = self._data
        for part in _split_path(path):
            if not isinstance(current, dict) or part not in current:
                if default is _MISSING:
                    raise KeyError(path)
                return default
            current = current[part]
        return _frozen.freeze(current)

    def has_path(self, path: str) -> bool:
        """True if the dotted path exists (a None value counts as present)."""
        return self.get_path(path, _MISSING_PATH) is not _MISSING_PATH

    def get_tree(self, path: str) -> ConfigTree:
        """
        Return the object at a dotted path as its own tree.

        Raises:
            KeyError: If the path does not exist.
            TypeError: If the value at the path is not an object.
        """
        value = self.get_path(path)
        if not isinstance(value, _abc.Mapping):
            raise TypeError(f"{path} is {type(value).__name__}, not an object")
        return ConfigTree(value, origin=f"{self.origin} @ {path}")

    # =========================================================================
    # Mapping protocol
    # =========================================================================

    def __getitem__(self, key: str) -> _typing.Any:
        return _frozen.freeze(self._data[key])

    def __iter__(self) -> _typing.Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _abc.Mapping):
            return self._data == _frozen.thaw(other)
        return NotImplemented

    def __hash__(self) -> int:
        raise TypeError(f"unhashable type: '{type(self).__name__}'")

    def __repr__(self) -> str:
        return f"ConfigTree({self._data!r}, origin={self.origin!r})"

    def to_dict(self) -> dict[str, _typing.Any]:
        """Return an independent deep copy as plain dicts and lists."""
        return _frozen.thaw(self._data)


_MISSING_PATH = object()


def _split_path(path: str) -> list[str]:
    if not path:
        raise ValueError("config path must not be empty")
    parts = path.split(".")
    if any(not part for part in parts):
        raise ValueError(f"invalid config path: {path!r}")
    return parts
