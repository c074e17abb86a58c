"""Turning configuration text into plain dicts."""

import json as _json
import tomllib as _tomllib
import typing as _typing

import yaml as _yaml

import layerconf.errors as errors
import layerconf.parse._options as _options


def parse_text(
    content: str,
    syntax: _options.Syntax,
    source: _typing.Any,
) -> dict[str, _typing.Any] | None:
    """
    Parse configuration text into a dict.

    Args:
        content: The raw text.
        syntax: Which parser to use.
        source: Where the text came from (for error messages).

    Returns:
        Parsed top-level mapping, or None if the document is empty.

    Raises:
        ConfigParseError: If the text is malformed or its top level is not
            a mapping.
    """
    try:
        if syntax is _options.Syntax.JSON:
            parsed = _json.loads(content) if content.strip() else None
        elif syntax is _options.Syntax.TOML:
            parsed = _tomllib.loads(content)
        else:
            parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise errors.ConfigParseError(source, f"invalid YAML: {e}") from e
    except _json.JSONDecodeError as e:
        raise errors.ConfigParseError(source, f"invalid JSON: {e}") from e
    except _tomllib.TOMLDecodeError as e:
        raise errors.ConfigParseError(source, f"invalid TOML: {e}") from e

    if parsed is None:
        return None

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise errors.ConfigParseError(
            source,
            f"config must be a mapping at the top level, got {type_name}",
        )

    return parsed
