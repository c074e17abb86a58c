"""
Read-only views over configuration containers.

A ConfigTree stores plain dicts and lists internally. Everything handed
out to callers goes through these views, so a resolved tree cannot be
mutated through its accessors. Nested containers are frozen on access.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing


class FrozenMapping(_abc.Mapping[str, _typing.Any]):
    """
    Read-only view of a configuration object (dict).

    Example:
        >>> view = FrozenMapping({"db": {"ports": [5432, 5433]}})
        >>> view["db"]["ports"][0]
        5432
        >>> view["db"]["ports"][0] = 1  # TypeError: immutable
    """

    __slots__ = ("_data",)

    def __init__(self, data: _abc.Mapping[str, _typing.Any]) -> None:
        # dicts are wrapped by reference; callers own the copy semantics
        self._data = data if isinstance(data, dict) else dict(data)

    def __getitem__(self, key: str) -> _typing.Any:
        return freeze(self._data[key])

    def __iter__(self) -> _typing.Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FrozenMapping({self._data!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _abc.Mapping):
            return thaw(self) == thaw(other)
        return NotImplemented

    def __hash__(self) -> int:
        raise TypeError(f"unhashable type: '{type(self).__name__}'")


class FrozenSequence(_abc.Sequence[_typing.Any]):
    """Read-only view of a configuration list."""

    __slots__ = ("_data",)

    def __init__(self, data: _abc.Sequence[_typing.Any]) -> None:
        self._data = data if isinstance(data, list) else list(data)

    @_typing.overload
    def __getitem__(self, index: int) -> _typing.Any: ...

    @_typing.overload
    def __getitem__(self, index: slice) -> FrozenSequence: ...

    def __getitem__(self, index: int | slice) -> _typing.Any:
        value = self._data[index]
        if isinstance(index, slice):
            return FrozenSequence(value)
        return freeze(value)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FrozenSequence({self._data!r})"

    def __eq__(self, other: object) -> bool:
        # Strings are sequences too, but never equal to a config list
        if isinstance(other, (str, bytes)):
            return NotImplemented
        if isinstance(other, _abc.Sequence):
            return thaw(self) == thaw(other)
        return NotImplemented

    def __hash__(self) -> int:
        raise TypeError(f"unhashable type: '{type(self).__name__}'")


def is_sequence(value: _typing.Any) -> bool:
    """True for list-like config values (str, bytes and tuples excluded)."""
    return isinstance(value, _abc.Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def freeze(value: _typing.Any) -> _typing.Any:
    """
    Wrap mutable containers in frozen views.

    - Mapping -> FrozenMapping
    - list-like Sequence -> FrozenSequence
    - frozen views and scalars are returned unchanged
    """
    if isinstance(value, (FrozenMapping, FrozenSequence)):
        return value
    if isinstance(value, _abc.Mapping):
        return FrozenMapping(value)
    if is_sequence(value) and not isinstance(value, tuple):
        return FrozenSequence(value)
    return value


def thaw(value: _typing.Any) -> _typing.Any:
    """
    Return an independent plain-Python copy of a config value.

    Mappings become dicts with string keys, list-like values become lists,
    scalars are returned as-is. The result shares nothing with the input.

    Args:
        value: Any config value, frozen or not.

    Returns:
        Deep copy made of dict, list and scalar values only.
    """
    if isinstance(value, FrozenMapping):
        value = value._data
    elif isinstance(value, FrozenSequence):
        value = value._data

    if isinstance(value, _abc.Mapping):
        return {str(k): thaw(v) for k, v in value.items()}
    if is_sequence(value):
        return [thaw(v) for v in value]
    return value
