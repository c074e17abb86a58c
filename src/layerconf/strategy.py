"""
A configurable loading strategy that merges layers into one config.

Build a strategy from layers, then install it so every
layerconf.factory.load() goes through it:

    import layerconf.layers as layers
    import layerconf.strategy as strategy

    (
        strategy.CustomConfigLoadingStrategy.builder()
        .for_each_profile(
            layers.env_profiles(),
            True,
            lambda profile, b: b.parse_resources_any_syntax(f"application-{profile}"),
        )
        .default_application()
        .install()
    )

install() sets LAYERCONF_STRATEGY to this class so the factory creates
instances of it with no arguments; each such instance delegates to the
installed resolver. If the environment variable is set at startup
instead (e.g. by a launcher), call soft_install() once the strategy is
built.
"""

import logging as _logging
import os as _os
import threading as _threading
import typing as _typing

import layerconf.constants as constants
import layerconf.factory as factory
import layerconf.layers as layers
import layerconf.parse as parse
import layerconf.tree as tree

_logger = _logging.getLogger(__name__)

Resolver: _typing.TypeAlias = _typing.Callable[
    [parse.ParseOptions | None], tree.ConfigTree
]
"""What a strategy calls to produce the application config."""

# Process-wide slot holding the installed resolver. Only read and written
# under _installed_lock, and only for the reference swap itself.
_installed_lock = _threading.Lock()
_installed_resolver: Resolver | None = None


def installed_resolver() -> Resolver | None:
    """The currently installed resolver, or None."""
    with _installed_lock:
        return _installed_resolver


def _set_installed(resolver: Resolver) -> None:
    global _installed_resolver
    with _installed_lock:
        _installed_resolver = resolver


def _clear_installed(expected: Resolver) -> bool:
    """Clear the slot if it still holds expected. Returns whether it did."""
    global _installed_resolver
    with _installed_lock:
        if _installed_resolver is not expected:
            return False
        _installed_resolver = None
        return True


def _stack_resolver(stack: layers.LayerStack) -> Resolver:
    def resolve(options: parse.ParseOptions | None = None) -> tree.ConfigTree:
        del options  # layers carry their own parse options
        return stack.resolve()

    return resolve


class CustomConfigLoadingStrategy(factory.ConfigLoadingStrategy):
    """
    Loading strategy backed by a LayerStack.

    Created two ways:
    - builder().build(): wraps the configured layers.
    - CustomConfigLoadingStrategy(): what the factory does. Delegates to
      the installed resolver if there is one, otherwise to
      DefaultConfigLoadingStrategy.
    """

    def __init__(self, resolver: Resolver | None = None) -> None:
        if resolver is None:
            resolver = installed_resolver()
        if resolver is None:
            resolver = factory.DefaultConfigLoadingStrategy().parse_application_config
        self._resolver: Resolver = resolver

    @classmethod
    def builder(cls) -> "Builder":
        return Builder(cls)

    def parse_application_config(
        self,
        options: parse.ParseOptions | None = None,
    ) -> tree.ConfigTree:
        """Resolve the application config (without the reference fallback)."""
        return self._resolver(options)

    def load(self, options: parse.ParseOptions | None = None) -> tree.ConfigTree:
        """Like factory.load(), but using this strategy's application config."""
        return factory.load(self.parse_application_config(options))

    # =========================================================================
    # Installation
    # =========================================================================

    @classmethod
    def import_path(cls) -> str:
        return f"{cls.__module__}:{cls.__qualname__}"

    def install(self) -> None:
        """
        Make the factory use this strategy for load() and default_application().

        Sets LAYERCONF_STRATEGY to CustomConfigLoadingStrategy, then
        soft_install(). The base class is registered even for subclasses:
        its zero-argument instances delegate to the installed resolver, and
        subclasses defined in a local scope cannot be imported by name.
        """
        _os.environ[constants.ENV_STRATEGY] = CustomConfigLoadingStrategy.import_path()
        self.soft_install()

    def soft_install(self) -> None:
        """Install this strategy's resolver without touching the environment."""
        _set_installed(self._resolver)
        _logger.debug("Installed config strategy %r", self)
        factory.invalidate_caches()

    def uninstall(self) -> None:
        """
        Remove this strategy's resolver if it is still the installed one.

        A no-op when this strategy was never installed, was already
        uninstalled, or was replaced by a later install().
        """
        if _clear_installed(self._resolver):
            _logger.debug("Uninstalled config strategy %r", self)
            factory.invalidate_caches()
        else:
            _logger.debug("Config strategy %r not installed, nothing to uninstall", self)

    def is_installed(self) -> bool:
        return installed_resolver() is self._resolver

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._resolver!r})"


class Builder(layers.LayerBuilder):
    """
    Fluent builder for CustomConfigLoadingStrategy.

    In the merged result, layers added earlier win over layers added later:

        CustomConfigLoadingStrategy.builder()
        .parse_resources_any_syntax("application-foo")   # highest
        .parse_resources_any_syntax("application")
        .parse_resources_any_syntax("defaults")          # lowest
        .build()

    Any loader function can be added with with_loader(func, *args).
    """

    def __init__(
        self,
        strategy_cls: type[CustomConfigLoadingStrategy] = CustomConfigLoadingStrategy,
    ) -> None:
        self._strategy_cls = strategy_cls
        self._stack = layers.LayerStack()

    def add(self, producer: layers.LayerProducer) -> "Builder":
        self._stack.add(producer)
        return self

    def build(self) -> CustomConfigLoadingStrategy:
        """Create a strategy from the layers added so far. No global effect."""
        return self._strategy_cls(_stack_resolver(self._stack.copy()))

    def install(self) -> CustomConfigLoadingStrategy:
        """build() then install() the result."""
        strategy = self.build()
        strategy.install()
        return strategy

    def soft_install(self) -> CustomConfigLoadingStrategy:
        """build() then soft_install() the result."""
        strategy = self.build()
        strategy.soft_install()
        return strategy


def uninstall_all() -> None:
    """Clear any installed resolver and the LAYERCONF_STRATEGY variable."""
    global _installed_resolver
    with _installed_lock:
        _installed_resolver = None
    if _os.environ.get(constants.ENV_STRATEGY) == CustomConfigLoadingStrategy.import_path():
        del _os.environ[constants.ENV_STRATEGY]
    factory.invalidate_caches()
