"""Adapters exposing resolved config trees to other frameworks.

This module provides:

- LayeredSettingsSource: a pydantic-settings source that fills a
  BaseSettings class from a loading strategy's resolved tree.
- ConfigPropertySource: a named, flat key/value view of a tree for code
  that expects dotted property names (see layerconf.flatten).

Using LayeredSettingsSource, precedence is whatever the Settings class
declares in settings_customise_sources(); typically:

1. Constructor arguments
2. Environment variables
3. Layered config (this source)
4. Field defaults
"""

import collections.abc as _abc
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings

import layerconf.factory as factory
import layerconf.flatten as flatten
import layerconf.strategy as strategy
import layerconf.tree as tree


class LayeredSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source backed by a layerconf loading strategy.

    Example:
        class AppSettings(pydantic_settings.BaseSettings):
            @classmethod
            def settings_customise_sources(cls, settings_cls, init_settings,
                                           env_settings, dotenv_settings,
                                           file_secret_settings):
                return (
                    init_settings,
                    env_settings,
                    LayeredSettingsSource(settings_cls),
                )

    The tree is resolved once, when the source is constructed (i.e. each
    time the Settings class is instantiated).
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        loading_strategy: factory.ConfigLoadingStrategy | None = None,
        *,
        path: str | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            loading_strategy: Strategy to resolve. Defaults to a
                zero-argument CustomConfigLoadingStrategy, i.e. the installed
                one, or the built-in default when nothing is installed.
            path: Optional dotted path of the subtree to use, e.g. "myapp".
        """
        super().__init__(settings_cls)
        if loading_strategy is None:
            loading_strategy = strategy.CustomConfigLoadingStrategy()
        resolved = loading_strategy.parse_application_config()
        self._tree = resolved.get_tree(path) if path else resolved

    @property
    def tree(self) -> tree.ConfigTree:
        """The resolved tree this source reads from."""
        return self._tree

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """
        Get value for a field from the resolved tree.

        Returns:
            Tuple of (value, field_name, is_complex).
            is_complex is True if the value is a dict or list.
        """
        if field_name not in self._tree:
            return None, field_name, False
        value = tree.thaw(self._tree[field_name])
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the full resolved tree as a plain dict for validation."""
        return self._tree.to_dict()


class ConfigPropertySource:
    """
    Flat, named property view of a config tree.

    Property names follow layerconf.flatten: "bar.baz", "myList[0]".
    The flattened map and its key list are computed once, at construction.
    """

    DEFAULT_PROPERTY_SOURCE_NAME = "ConfigPropertySource(application)"

    def __init__(self, name: str, source: _abc.Mapping[str, _typing.Any]) -> None:
        if not name:
            raise ValueError("property source name must not be empty")
        self._name = name
        self._properties = flatten.flatten(source)
        self._names = tuple(self._properties)

    @classmethod
    def load(cls, name: str = DEFAULT_PROPERTY_SOURCE_NAME) -> "ConfigPropertySource":
        """Create a property source from factory.load()."""
        return cls(name, factory.load())

    @classmethod
    def of(cls, name: str, config: tree.ConfigTree) -> "ConfigPropertySource":
        """Create a property source from an already-loaded tree."""
        if config is None:
            raise ValueError("config must not be None")
        return cls(name, config)

    @property
    def name(self) -> str:
        return self._name

    @property
    def property_names(self) -> tuple[str, ...]:
        return self._names

    def contains(self, property_name: str) -> bool:
        return property_name in self._properties

    def get(self, property_name: str, default: _typing.Any = None) -> _typing.Any:
        return self._properties.get(property_name, default)

    def as_dict(self) -> dict[str, _typing.Any]:
        return dict(self._properties)

    def __repr__(self) -> str:
        return f"ConfigPropertySource({self._name!r}, {len(self._names)} properties)"
