"""
Layer stacks: ordered, lazily evaluated configuration sources.

A layer is any zero-argument callable returning a ConfigTree (or a plain
mapping), or None to contribute nothing. A LayerStack holds layers in
priority order: each add() is LOWER priority than everything added
before it, so a builder chain reads from most to least specific:

    stack = (
        LayerStack()
        .parse_resources_any_syntax("application-prod")
        .parse_resources_any_syntax("application")
        .parse_package_resource("myapp", "defaults.yaml")
    )
    cfg = stack.resolve()

Layers are never cached: every resolve() calls every layer again, so
files, URLs and profile lists are re-read each time.
"""

import abc as _abc
import collections.abc as _cabc
import functools as _functools
import logging as _logging
import os as _os
import typing as _typing

import httpx as _httpx

import layerconf.config as config
import layerconf.errors as errors
import layerconf.factory as factory
import layerconf.parse as parse
import layerconf.tree as tree

_logger = _logging.getLogger(__name__)

LayerProducer: _typing.TypeAlias = _typing.Callable[
    [], tree.ConfigTree | _cabc.Mapping[str, _typing.Any] | None
]
"""Zero-argument callable producing one layer (None = skip, mappings are copied)."""

P = _typing.TypeVar("P")

ProfileCallback: _typing.TypeAlias = _typing.Callable[[P, "LayerBuilder"], object]
"""Called once per profile with a builder collecting that profile's layers."""

Profiles: _typing.TypeAlias = (
    _cabc.Sequence[P] | _typing.Callable[[], _cabc.Iterable[P]]
)


class LayerBuilder(_abc.ABC):
    """
    Fluent helpers for declaring layers.

    Subclasses implement add(); every helper here is expressed through
    with_loader(), which defers any callable until resolution. If the
    loader you need has no helper, call with_loader() directly:

        builder.with_loader(parse.parse_file, "app.toml", opts)
    """

    @_abc.abstractmethod
    def add(self, producer: LayerProducer) -> _typing.Self:
        """Add a layer with lower priority than every earlier addition."""
        ...

    def with_loader(
        self,
        loader: _typing.Callable[..., _cabc.Mapping[str, _typing.Any] | None],
        *args: _typing.Any,
        **kwargs: _typing.Any,
    ) -> _typing.Self:
        """Add a layer that calls loader(*args, **kwargs) at resolution time."""
        if not args and not kwargs:
            return self.add(loader)
        return self.add(_functools.partial(loader, *args, **kwargs))

    def with_config(
        self,
        config_tree: _cabc.Mapping[str, _typing.Any],
    ) -> _typing.Self:
        """Add an already-built tree (a plain mapping is copied into one)."""
        value = (
            config_tree
            if isinstance(config_tree, tree.ConfigTree)
            else parse.parse_mapping(config_tree)
        )
        return self.add(lambda: value)

    def parse_url(
        self,
        url: str | _httpx.URL,
        options: parse.ParseOptions | None = None,
    ) -> _typing.Self:
        """
        Add a layer fetched from a URL.

        The URL is validated now; fetching and parsing happen at resolution.

        Raises:
            MalformedInputError: If url is not an absolute http, https or
                file URL.
        """
        return self.with_loader(parse.parse_url, parse.validate_url(url), options)

    def parse_file(
        self,
        path: str | _os.PathLike[str],
        options: parse.ParseOptions | None = None,
    ) -> _typing.Self:
        return self.with_loader(parse.parse_file, path, options)

    def parse_resources(
        self,
        name: str,
        options: parse.ParseOptions | None = None,
    ) -> _typing.Self:
        return self.with_loader(parse.parse_resources, name, options)

    def parse_resources_any_syntax(
        self,
        basename: str,
        options: parse.ParseOptions | None = None,
    ) -> _typing.Self:
        return self.with_loader(parse.parse_resources_any_syntax, basename, options)

    def parse_package_resource(
        self,
        package: str,
        name: str,
        options: parse.ParseOptions | None = None,
    ) -> _typing.Self:
        return self.with_loader(parse.parse_package_resource, package, name, options)

    def default_application(
        self,
        options: parse.ParseOptions | None = None,
    ) -> _typing.Self:
        """
        Add the layer the built-in default strategy would load.

        Always uses DefaultConfigLoadingStrategy, never the installed
        strategy, which may itself contain this layer.
        """
        strategy = factory.DefaultConfigLoadingStrategy()
        return self.with_loader(strategy.parse_application_config, options)

    def for_each_profile(
        self,
        profiles: Profiles[P],
        prefer_first: bool,
        callback: ProfileCallback[P],
    ) -> _typing.Self:
        """
        Add one composite layer built by calling callback per profile.

        Args:
            profiles: A sequence of profiles, or a zero-argument callable
                returning one. A callable is invoked on every resolution,
                so later changes to the active profiles are picked up.
            prefer_first: If True the first profile has the highest
                priority; if False the last one does.
            callback: Called as callback(profile, builder); layers it adds
                to builder make up that profile's part of the layer.
        """
        return self.add(combine_profiles(profiles, prefer_first, callback))


class LayerStack(LayerBuilder):
    """
    Ordered layers, highest priority first, merged on demand.

    A LayerStack is itself a LayerProducer, so stacks nest.

    Thread safety: resolve() takes no locks and may run concurrently as
    long as the layers themselves are safe to call concurrently. add()
    is meant for build time and must not race with resolve().
    """

    def __init__(self) -> None:
        self._layers: list[LayerProducer] = []

    def add(self, producer: LayerProducer) -> "LayerStack":
        if not callable(producer):
            raise TypeError(f"layer must be callable, got {type(producer).__name__}")
        self._layers.append(producer)
        return self

    def resolve(self) -> tree.ConfigTree:
        """
        Call every layer and merge the results.

        Layers are evaluated from lowest to highest priority; each result
        is merged on top of what came before. Layers returning None are
        skipped; a plain mapping is accepted and copied into a tree.

        Raises:
            ConfigError: Whatever a layer raised, if a ConfigError.
            UncaughtProducerError: If a layer raised anything else, or
                returned something that is not a tree, a mapping or None.
        """
        result = tree.ConfigTree.empty()
        skipped = 0
        for layer in reversed(self._layers):
            try:
                value = layer()
            except errors.ConfigError:
                raise
            except Exception as e:
                raise errors.UncaughtProducerError(
                    f"Uncaught exception while loading config layer {layer!r}: {e}"
                ) from e
            if value is None:
                skipped += 1
                continue
            if not isinstance(value, tree.ConfigTree):
                if not isinstance(value, _cabc.Mapping):
                    raise errors.UncaughtProducerError(
                        f"Config layer {layer!r} returned {type(value).__name__}, "
                        "expected a ConfigTree, a mapping or None"
                    )
                value = parse.parse_mapping(value)
            result = value.with_fallback(result)

        _logger.debug(
            "Resolved %d config layers (%d absent)", len(self._layers), skipped
        )
        return result

    def copy(self) -> "LayerStack":
        """Return a new stack with the same layers (layers are shared)."""
        clone = LayerStack()
        clone._layers = list(self._layers)
        return clone

    def __call__(self) -> tree.ConfigTree:
        return self.resolve()

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> _typing.Iterator[LayerProducer]:
        return iter(self._layers)

    def __repr__(self) -> str:
        return f"LayerStack({len(self._layers)} layers)"


# =============================================================================
# Profiles
# =============================================================================


def _collect_profiles(
    profiles: _cabc.Iterable[P],
    prefer_first: bool,
    callback: ProfileCallback[P],
) -> LayerStack:
    ordered = list(profiles)
    if not prefer_first:
        ordered.reverse()
    collector = LayerStack()
    for profile in ordered:
        callback(profile, collector)
    return collector


def combine_profiles(
    profiles: Profiles[P],
    prefer_first: bool,
    callback: ProfileCallback[P],
) -> LayerProducer:
    """
    Build the composite layer used by LayerBuilder.for_each_profile().

    Each callback call adds layers below those of earlier calls, so the
    iteration direction alone decides which profile wins.

    Raises:
        TypeError: If profiles is a str (pass a list of profiles instead).
    """
    if isinstance(profiles, (str, bytes)):
        raise TypeError("profiles must be a sequence of profiles, not a string")

    if callable(profiles):
        supplier = profiles

        def resolve_current_profiles() -> tree.ConfigTree:
            current = supplier()
            if isinstance(current, (str, bytes)):
                raise TypeError("profile supplier returned a string, expected a sequence")
            _logger.debug("Active profiles: %s", current)
            return _collect_profiles(current, prefer_first, callback).resolve()

        return resolve_current_profiles

    return _collect_profiles(profiles, prefer_first, callback)


def env_profiles(
    name: str | None = None,
    separator: str = ",",
) -> _typing.Callable[[], list[str]]:
    """
    Return a profile supplier reading an environment variable on each call.

    Args:
        name: Variable to read. Defaults to LAYERCONF_PROFILES (via
            Settings).
        separator: Delimiter between profiles.
    """

    def read_profiles() -> list[str]:
        if name is None:
            return config.split_profiles(config.Settings.current().profiles, separator)
        return config.split_profiles(_os.environ.get(name), separator)

    return read_profiles
