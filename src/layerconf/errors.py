"""
Error types raised by layerconf.

Every failure that can surface from resolving a configuration derives
from ConfigError, so callers can catch a single family regardless of
which layer failed.
"""

import typing as _typing


class ConfigError(Exception):
    """Base class for all configuration errors."""


class MalformedInputError(ConfigError):
    """A value given at builder time is not usable (e.g. a bad URL string)."""


class SourceError(ConfigError):
    """Error tied to one configuration source (file, URL, resource)."""

    def __init__(self, source: _typing.Any, message: str) -> None:
        self.source = source
        super().__init__(f"Error in config source {source}: {message}")


class SourceUnavailableError(SourceError):
    """A source could not be read and missing sources were not allowed."""


class ConfigParseError(SourceError):
    """A source was read but its content is not a valid configuration."""


class UncaughtProducerError(ConfigError):
    """A layer producer raised something other than a ConfigError.

    The original exception is available as ``__cause__``.
    """
