"""
Parsing configuration trees from strings, files, URLs and resources.

Every function returns a ConfigTree, or None when the source does not
exist and ParseOptions.allow_missing is set. None means "no layer" to
the layer engine.

Resource lookup order:
1. Directories from LAYERCONF_RESOURCE_PATH (os.pathsep separated)
2. The current working directory

The first directory containing a match wins.
"""

import importlib.resources as _resources
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import httpx as _httpx

import layerconf.config as config
import layerconf.constants as constants
import layerconf.errors as errors
import layerconf.parse._options as _options
import layerconf.parse._syntax as _syntax
import layerconf.tree as tree

_logger = _logging.getLogger(__name__)


def _resolve_options(options: _options.ParseOptions | None) -> _options.ParseOptions:
    return options if options is not None else _options.ParseOptions.defaults()


def _to_tree(
    parsed: dict[str, _typing.Any] | None,
    origin: str,
    options: _options.ParseOptions,
) -> tree.ConfigTree:
    origin = options.origin_description or origin
    if parsed is None:
        return tree.ConfigTree.empty(origin)
    return tree.ConfigTree(parsed, origin=origin)


def _missing(
    source: _typing.Any,
    options: _options.ParseOptions,
    reason: str,
) -> None:
    """Return None for an allowed-missing source, otherwise raise."""
    if options.allow_missing:
        _logger.debug("Config source %s not found, skipping", source)
        return None
    raise errors.SourceUnavailableError(source, reason)


# =============================================================================
# Strings and mappings
# =============================================================================


def parse_string(
    content: str,
    options: _options.ParseOptions | None = None,
) -> tree.ConfigTree:
    """
    Parse configuration text (YAML unless options.syntax says otherwise).

    Raises:
        ConfigParseError: If the text is malformed.
    """
    options = _resolve_options(options)
    syntax = options.syntax or _options.Syntax.YAML
    origin = options.origin_description or "string"
    return _to_tree(_syntax.parse_text(content, syntax, origin), origin, options)


def parse_mapping(
    data: _typing.Mapping[str, _typing.Any],
    options: _options.ParseOptions | None = None,
) -> tree.ConfigTree:
    """Wrap an in-memory mapping as a tree."""
    options = _resolve_options(options)
    return tree.ConfigTree(data, origin=options.origin_description or "mapping")


# =============================================================================
# Files
# =============================================================================


def parse_file(
    path: str | _os.PathLike[str],
    options: _options.ParseOptions | None = None,
) -> tree.ConfigTree | None:
    """
    Parse a configuration file.

    The syntax is taken from options.syntax, else the file extension,
    else YAML.

    Returns:
        The parsed tree, or None if the file does not exist and missing
        files are allowed.

    Raises:
        SourceUnavailableError: If the file is missing (and not allowed to
            be) or cannot be read.
        ConfigParseError: If the content is not UTF-8 or is malformed.
    """
    options = _resolve_options(options)
    file_path = _pathlib.Path(path)

    try:
        content = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return _missing(file_path, options, "file not found")
    except PermissionError as e:
        raise errors.SourceUnavailableError(file_path, f"permission denied: {e}") from e
    except OSError as e:
        raise errors.SourceUnavailableError(file_path, f"cannot read file: {e}") from e
    except UnicodeDecodeError as e:
        raise errors.ConfigParseError(file_path, f"invalid UTF-8: {e}") from e

    syntax = (
        options.syntax
        or _options.Syntax.from_extension(file_path.name)
        or _options.Syntax.YAML
    )
    _logger.debug("Parsed config file %s as %s", file_path, syntax.value)
    return _to_tree(_syntax.parse_text(content, syntax, file_path), str(file_path), options)


# =============================================================================
# URLs
# =============================================================================


def validate_url(url: str | _httpx.URL) -> _httpx.URL:
    """
    Check that a string is an absolute http, https or file URL.

    Raises:
        MalformedInputError: If the URL cannot be parsed, has no supported
            scheme, or lacks a host (http/https) or path (file).
    """
    try:
        parsed = url if isinstance(url, _httpx.URL) else _httpx.URL(url)
    except (_httpx.InvalidURL, TypeError) as e:
        raise errors.MalformedInputError(f"URL is not valid: {url}") from e

    if parsed.scheme not in constants.URL_SCHEMES:
        raise errors.MalformedInputError(f"URL is not valid: {url}")
    if parsed.scheme == "file":
        if not parsed.path or parsed.path == "/":
            raise errors.MalformedInputError(f"URL is not valid: {url}")
    elif not parsed.host:
        raise errors.MalformedInputError(f"URL is not valid: {url}")
    return parsed


def _make_client(timeout: float) -> _httpx.Client:
    return _httpx.Client(timeout=timeout, follow_redirects=True)


def parse_url(
    url: str | _httpx.URL,
    options: _options.ParseOptions | None = None,
) -> tree.ConfigTree | None:
    """
    Fetch and parse a configuration from a URL.

    file: URLs are read from disk like parse_file(). http(s) URLs are
    fetched with httpx; a 404 counts as missing. The syntax comes from
    options.syntax, else the Content-Type header, else the URL path
    extension, else YAML.

    Raises:
        MalformedInputError: If the URL is not valid.
        SourceUnavailableError: If the fetch fails (or 404 and missing is
            not allowed).
        ConfigParseError: If the body is malformed.
    """
    options = _resolve_options(options)
    parsed_url = validate_url(url)

    if parsed_url.scheme == "file":
        file_options = options.with_origin_description(
            options.origin_description or str(parsed_url)
        )
        return parse_file(parsed_url.path, file_options)

    timeout = config.Settings.current().http_timeout
    _logger.debug("Fetching config from %s (timeout %ss)", parsed_url, timeout)
    try:
        with _make_client(timeout) as client:
            response = client.get(parsed_url)
    except _httpx.HTTPError as e:
        raise errors.SourceUnavailableError(parsed_url, f"request failed: {e}") from e

    if response.status_code == 404:
        return _missing(parsed_url, options, "HTTP 404 Not Found")
    try:
        response.raise_for_status()
    except _httpx.HTTPStatusError as e:
        raise errors.SourceUnavailableError(
            parsed_url, f"HTTP {response.status_code}"
        ) from e

    syntax = (
        options.syntax
        or _options.Syntax.from_content_type(response.headers.get("content-type"))
        or _options.Syntax.from_extension(parsed_url.path)
        or _options.Syntax.YAML
    )
    return _to_tree(
        _syntax.parse_text(response.text, syntax, parsed_url),
        str(parsed_url),
        options,
    )


# =============================================================================
# Resources
# =============================================================================


def _find_resource(name: str) -> _pathlib.Path | None:
    for directory in config.Settings.current().resource_dirs():
        candidate = directory / name
        if candidate.is_file():
            _logger.debug("Resource %s found at %s", name, candidate)
            return candidate
    return None


def parse_resources(
    name: str,
    options: _options.ParseOptions | None = None,
) -> tree.ConfigTree | None:
    """
    Parse a named resource (including its extension) from the search path.

    Returns:
        The parsed tree, or None if no directory has the resource and
        missing resources are allowed.
    """
    options = _resolve_options(options)
    found = _find_resource(name)
    if found is None:
        return _missing(f"resource {name}", options, "resource not found")
    return parse_file(found, options.with_allow_missing(False))


def parse_resources_any_syntax(
    basename: str,
    options: _options.ParseOptions | None = None,
) -> tree.ConfigTree | None:
    """
    Parse a resource trying every supported extension.

    If basename already ends in a supported extension this is the same
    as parse_resources(). Otherwise, for each search directory in order,
    basename.yaml, .yml, .json and .toml are tried; the first directory
    with any match wins, and matches within it are merged with earlier
    extensions taking priority.
    """
    options = _resolve_options(options)
    if _options.Syntax.from_extension(basename) is not None:
        return parse_resources(basename, options)

    for directory in config.Settings.current().resource_dirs():
        found = [
            directory / f"{basename}{ext}"
            for ext in constants.ANY_SYNTAX_EXTENSIONS
            if (directory / f"{basename}{ext}").is_file()
        ]
        if not found:
            continue
        _logger.debug("Resource %s found as %s", basename, [str(p) for p in found])
        result: tree.ConfigTree | None = None
        for path in reversed(found):
            parsed = parse_file(path, options.with_allow_missing(False).with_syntax(None))
            result = parsed if result is None else parsed.with_fallback(result)
        return result

    return _missing(f"resource {basename}", options, "resource not found (any syntax)")


def parse_package_resource(
    package: str,
    name: str,
    options: _options.ParseOptions | None = None,
) -> tree.ConfigTree | None:
    """
    Parse a data file shipped inside a Python package.

    Args:
        package: Importable package name, e.g. "myapp.defaults".
        name: File name within the package, e.g. "application.yaml".
    """
    options = _resolve_options(options)
    source = f"{package}/{name}"
    try:
        resource = _resources.files(package).joinpath(name)
    except ModuleNotFoundError as e:
        raise errors.SourceUnavailableError(source, f"package not found: {e}") from e

    if not resource.is_file():
        return _missing(source, options, "package resource not found")
    try:
        content = resource.read_text(encoding="utf-8")
    except OSError as e:
        raise errors.SourceUnavailableError(source, f"cannot read resource: {e}") from e
    except UnicodeDecodeError as e:
        raise errors.ConfigParseError(source, f"invalid UTF-8: {e}") from e

    syntax = (
        options.syntax or _options.Syntax.from_extension(name) or _options.Syntax.YAML
    )
    return _to_tree(_syntax.parse_text(content, syntax, source), source, options)
