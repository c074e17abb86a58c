"""
Command-line entry point for layerconf.

A developer tool for inspecting what a set of layers resolves to:

    layerconf show -r application -p prod,eu
    layerconf show -f override.yaml -r application --json
    layerconf flatten -f app.yaml
"""

import json as _json
import logging as _logging
import os as _os
import sys as _sys
import typing as _typing

import click as _click
import yaml as _yaml

import layerconf
import layerconf.config as config
import layerconf.constants as constants
import layerconf.errors as errors
import layerconf.flatten as flatten
import layerconf.parse as parse
import layerconf.strategy as strategy
import layerconf.tree as tree

CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(version=layerconf.__version__, prog_name="layerconf")
@_click.option("-v", "--verbose", is_flag=True, help="Log layer resolution to stderr")
def cli(verbose: bool) -> None:
    """layerconf - inspect layered configuration."""
    if verbose:
        _logging.basicConfig(
            level=_logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=_sys.stderr,
        )


def _source_options(func: _typing.Callable[..., _typing.Any]) -> _typing.Callable[..., _typing.Any]:
    """Options shared by every command that builds a layer stack."""
    options = [
        _click.option(
            "-f", "--file", "files", multiple=True, type=_click.Path(dir_okay=False),
            help="Config file layer (repeatable, first wins)",
        ),
        _click.option(
            "-r", "--resource", "resources", multiple=True,
            help="Resource basename layer, any syntax (repeatable, first wins)",
        ),
        _click.option(
            "-u", "--url", "urls", multiple=True,
            help="URL layer (repeatable, first wins)",
        ),
        _click.option(
            "-p", "--profiles", default=None, envvar=constants.ENV_PROFILES,
            help="Comma-separated profiles; adds <resource>-<profile> above each resource",
        ),
        _click.option(
            "--default-application", is_flag=True,
            help="Add the default application config as the lowest layer",
        ),
        _click.option("--path", "path", default=None, help="Only show this dotted path"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_strategy(
    files: tuple[str, ...],
    resources: tuple[str, ...],
    urls: tuple[str, ...],
    profiles: str | None,
    default_application: bool,
) -> strategy.CustomConfigLoadingStrategy:
    """
    Build a strategy from command-line layers.

    Without any layer options, the zero-argument strategy is returned:
    the installed one, else the built-in default.
    """
    if not (files or resources or urls or default_application):
        return strategy.CustomConfigLoadingStrategy()

    strict = parse.ParseOptions(allow_missing=False)
    profile_list = config.split_profiles(profiles)
    builder = strategy.CustomConfigLoadingStrategy.builder()

    for file in files:
        builder.parse_file(file, strict)
    for resource in resources:
        if profile_list:
            builder.for_each_profile(
                profile_list,
                True,
                lambda profile, b, base=resource: b.parse_resources_any_syntax(
                    f"{base}-{profile}"
                ),
            )
        builder.parse_resources_any_syntax(resource)
    for url in urls:
        builder.parse_url(url)
    if default_application:
        builder.default_application()

    return builder.build()


def _resolve(
    files: tuple[str, ...],
    resources: tuple[str, ...],
    urls: tuple[str, ...],
    profiles: str | None,
    default_application: bool,
    path: str | None,
) -> dict[str, _typing.Any]:
    try:
        loading = _build_strategy(files, resources, urls, profiles, default_application)
        resolved = loading.parse_application_config()
        if path is None:
            return resolved.to_dict()
        value = resolved.get_path(path)
    except errors.ConfigError as e:
        raise _click.ClickException(str(e)) from e
    except KeyError:
        raise _click.ClickException(f"Unknown path: {path}") from None
    except ValueError as e:
        raise _click.ClickException(str(e)) from e
    return {path: tree.thaw(value)}


@cli.command(name="show")
@_source_options
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--flat", is_flag=True, help="Output flattened property = value lines")
@_click.option(
    "--color/--no-color",
    "use_color",
    default=None,
    help="Enable/disable syntax highlighting (default: auto-detect TTY)",
)
def show(
    files: tuple[str, ...],
    resources: tuple[str, ...],
    urls: tuple[str, ...],
    profiles: str | None,
    default_application: bool,
    path: str | None,
    as_json: bool,
    flat: bool,
    use_color: bool | None,
) -> None:
    """Show the merged configuration.

    Layers are added in this order, each lower priority than the last:
    files, resources (each preceded by its profile variants), URLs, then
    the default application config.

    Examples:
        layerconf show -r application -p prod     # application-prod over application
        layerconf show -f local.yaml -r app --json
        layerconf show --path db.host             # one value
    """
    data = _resolve(files, resources, urls, profiles, default_application, path)

    # YAML timestamps load as date/datetime; print them as ISO strings
    if as_json:
        _click.echo(_json.dumps(data, indent=2, default=str))
    elif flat:
        _print_flat(data)
    else:
        color_enabled, force_color = _should_use_color(use_color)
        yaml_text = _yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        _print_yaml(yaml_text, color=color_enabled, force_color=force_color)


@cli.command(name="flatten")
@_source_options
def flatten_cmd(
    files: tuple[str, ...],
    resources: tuple[str, ...],
    urls: tuple[str, ...],
    profiles: str | None,
    default_application: bool,
    path: str | None,
) -> None:
    """Show the merged configuration as flat property = value lines."""
    _print_flat(_resolve(files, resources, urls, profiles, default_application, path))


def _print_flat(data: dict[str, _typing.Any]) -> None:
    for key, value in flatten.flatten(data).items():
        _click.echo(f"{key} = {_json.dumps(value, default=str)}")


def _should_use_color(cli_flag: bool | None) -> tuple[bool, bool]:
    """Determine whether to use color output.

    Priority:
    1. CLI flag (--color / --no-color) if specified
    2. NO_COLOR env var (if set, disable color)
    3. Auto-detect: color if stdout is a TTY

    Returns:
        Tuple of (color_enabled, force_color).
    """
    if cli_flag is not None:
        return (cli_flag, cli_flag)
    if _os.environ.get("NO_COLOR") is not None:
        return (False, False)
    return (_sys.stdout.isatty(), False)


def _print_yaml(yaml_text: str, *, color: bool = True, force_color: bool = False) -> None:
    """Print YAML text, optionally with syntax highlighting."""
    if color:
        import rich.console as _rich_console
        import rich.syntax as _rich_syntax

        console = _rich_console.Console(
            force_terminal=force_color,
            no_color=False if force_color else None,
            color_system="truecolor" if force_color else "auto",
        )
        syntax = _rich_syntax.Syntax(
            yaml_text,
            "yaml",
            theme="monokai",
            background_color="default",
        )
        console.print(syntax)
        return

    _click.echo(yaml_text)
