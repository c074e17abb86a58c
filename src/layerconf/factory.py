"""
Process-wide configuration loading.

This is the framework layer applications call to get "the" config:

    import layerconf.factory as factory
    cfg = factory.load()

load() returns the application tree with the reference tree as fallback.
Which code produces the application tree is decided by a loading
strategy:

- If LAYERCONF_STRATEGY names a class, it is imported and instantiated
  with no arguments (see layerconf.strategy for a configurable one).
- Otherwise DefaultConfigLoadingStrategy is used.

Results are cached per process until invalidate_caches() is called.

Thread safety: one lock guards the cache and is held while a cached
value is computed, so concurrent first calls load the config once.
That includes slow sources such as URL fetches; invalidate_caches()
(and therefore soft_install() and uninstall()) waits for an in-flight
load to finish.
"""

import abc as _abc
import importlib as _importlib
import logging as _logging
import threading as _threading

import layerconf.config as config
import layerconf.constants as constants
import layerconf.errors as errors
import layerconf.parse as parse
import layerconf.tree as tree

_logger = _logging.getLogger(__name__)


class ConfigLoadingStrategy(_abc.ABC):
    """Produces the application config tree for the factory."""

    @_abc.abstractmethod
    def parse_application_config(
        self,
        options: parse.ParseOptions | None = None,
    ) -> tree.ConfigTree:
        """Parse and return the application config (without reference)."""
        ...


class DefaultConfigLoadingStrategy(ConfigLoadingStrategy):
    """
    Built-in strategy used when no other strategy is configured.

    Loads, in order of preference:
    1. LAYERCONF_FILE, LAYERCONF_URL or LAYERCONF_RESOURCE if one is set
       (the source must exist)
    2. The "application" resource in any syntax (may be missing)
    """

    def parse_application_config(
        self,
        options: parse.ParseOptions | None = None,
    ) -> tree.ConfigTree:
        options = options if options is not None else parse.ParseOptions.defaults()
        override = config.Settings.current().application_override()

        if override is None:
            result = parse.parse_resources_any_syntax(
                constants.DEFAULT_APPLICATION_RESOURCE,
                options.with_allow_missing(True),
            )
        else:
            kind, value = override
            strict = options.with_allow_missing(False)
            _logger.debug("Loading application config from %s %s", kind, value)
            if kind == "file":
                result = parse.parse_file(value, strict)
            elif kind == "url":
                result = parse.parse_url(value, strict)
            else:
                result = parse.parse_resources_any_syntax(value, strict)

        if result is None:
            return tree.ConfigTree.empty(constants.DEFAULT_APPLICATION_RESOURCE)
        return result


# =============================================================================
# Strategy lookup
# =============================================================================


def load_strategy_class(name: str) -> type[ConfigLoadingStrategy]:
    """
    Import a strategy class from "module:Class" or "module.Class".

    Raises:
        MalformedInputError: If the name cannot be imported or does not
            name a ConfigLoadingStrategy subclass.
    """
    if ":" in name:
        module_name, _, attr = name.partition(":")
    else:
        module_name, _, attr = name.rpartition(".")
    if not module_name or not attr:
        raise errors.MalformedInputError(f"invalid strategy class name: {name!r}")

    try:
        module = _importlib.import_module(module_name)
        cls = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise errors.MalformedInputError(
            f"cannot load strategy class {name!r}: {e}"
        ) from e

    if not isinstance(cls, type) or not issubclass(cls, ConfigLoadingStrategy):
        raise errors.MalformedInputError(
            f"{name!r} is not a ConfigLoadingStrategy subclass"
        )
    return cls


def current_strategy() -> ConfigLoadingStrategy:
    """Instantiate the strategy named by LAYERCONF_STRATEGY, or the default."""
    name = config.Settings.current().strategy
    if not name:
        return DefaultConfigLoadingStrategy()
    _logger.debug("Using config strategy %s", name)
    return load_strategy_class(name)()


# =============================================================================
# Cached loading
# =============================================================================

_cache_lock = _threading.RLock()
_cache: dict[str, tree.ConfigTree] = {}


def default_application(options: parse.ParseOptions | None = None) -> tree.ConfigTree:
    """
    Application config as produced by the current strategy.

    Cached when called without options.
    """
    if options is not None:
        return current_strategy().parse_application_config(options)
    with _cache_lock:
        cached = _cache.get("application")
        if cached is None:
            cached = current_strategy().parse_application_config()
            _cache["application"] = cached
        return cached


def default_reference() -> tree.ConfigTree:
    """The "reference" resource in any syntax (missing allowed), cached."""
    with _cache_lock:
        cached = _cache.get("reference")
        if cached is None:
            cached = parse.parse_resources_any_syntax(
                constants.DEFAULT_REFERENCE_RESOURCE
            ) or tree.ConfigTree.empty(constants.DEFAULT_REFERENCE_RESOURCE)
            _cache["reference"] = cached
        return cached


def load(application: tree.ConfigTree | None = None) -> tree.ConfigTree:
    """
    Return the application config with reference as fallback.

    Args:
        application: Use this tree instead of default_application().
            Results for an explicit tree are not cached.
    """
    if application is not None:
        return application.with_fallback(default_reference())
    with _cache_lock:
        cached = _cache.get("load")
        if cached is None:
            cached = default_application().with_fallback(default_reference())
            _cache["load"] = cached
        return cached


def invalidate_caches() -> None:
    """Forget cached trees so the next load() re-reads every source."""
    with _cache_lock:
        _cache.clear()
    _logger.debug("Config caches invalidated")
