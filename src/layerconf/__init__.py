"""
layerconf - layered configuration loading.

Declare an ordered list of configuration sources (files, URLs, resources,
profile variants) and merge them into one tree, earlier sources winning.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("layerconf")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from layerconf.errors import (  # noqa: E402
    ConfigError,
    ConfigParseError,
    MalformedInputError,
    SourceUnavailableError,
    UncaughtProducerError,
)
from layerconf.layers import LayerStack  # noqa: E402
from layerconf.parse import ParseOptions, Syntax  # noqa: E402
from layerconf.strategy import CustomConfigLoadingStrategy  # noqa: E402
from layerconf.tree import ConfigTree  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "ConfigError",
    "ConfigParseError",
    "ConfigTree",
    "CustomConfigLoadingStrategy",
    "LayerStack",
    "MalformedInputError",
    "ParseOptions",
    "SourceUnavailableError",
    "Syntax",
    "UncaughtProducerError",
]
