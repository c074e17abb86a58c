"""
Parsing configuration sources into ConfigTree values.

Supports YAML (PyYAML), JSON and TOML from strings, files, http(s)/file
URLs, resources on the search path and package data files.
"""

from layerconf.parse._options import ParseOptions, Syntax
from layerconf.parse._sources import (
    parse_file,
    parse_mapping,
    parse_package_resource,
    parse_resources,
    parse_resources_any_syntax,
    parse_string,
    parse_url,
    validate_url,
)

__all__ = [
    "ParseOptions",
    "Syntax",
    "parse_file",
    "parse_mapping",
    "parse_package_resource",
    "parse_resources",
    "parse_resources_any_syntax",
    "parse_string",
    "parse_url",
    "validate_url",
]
