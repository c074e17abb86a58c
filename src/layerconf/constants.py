"""
Shared constants for layerconf.

This module provides a single source of truth for names and defaults
that are used across multiple modules.
"""

# Environment
ENV_PREFIX = "LAYERCONF_"
"""Prefix for every environment variable read by layerconf."""

ENV_STRATEGY = "LAYERCONF_STRATEGY"
"""Names the strategy class the factory instantiates (no constructor args).

Accepts "package.module:ClassName" or "package.module.ClassName".
"""

ENV_RESOURCE_PATH = "LAYERCONF_RESOURCE_PATH"
"""Extra resource search directories, os.pathsep separated."""

ENV_PROFILES = "LAYERCONF_PROFILES"
"""Comma-separated list of active profiles."""

# Resource names
DEFAULT_APPLICATION_RESOURCE = "application"
"""Basename loaded by the default strategy when nothing else is configured."""

DEFAULT_REFERENCE_RESOURCE = "reference"
"""Basename of the lowest-priority reference tree used by factory.load()."""

# Syntaxes, in the order parse_resources_any_syntax tries them
ANY_SYNTAX_EXTENSIONS = (".yaml", ".yml", ".json", ".toml")

# Network
DEFAULT_HTTP_TIMEOUT = 30.0
"""Default timeout for URL fetches, in seconds."""

URL_SCHEMES = ("http", "https", "file")
"""URL schemes accepted by parse_url."""
