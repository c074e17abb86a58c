"""
layerconf's own settings, loaded with pydantic-settings.

Everything here comes from LAYERCONF_* environment variables:

  LAYERCONF_STRATEGY=myapp.config:AppStrategy
  LAYERCONF_FILE=/etc/myapp/application.yaml
  LAYERCONF_RESOURCE_PATH=/etc/myapp:/opt/myapp/conf
  LAYERCONF_PROFILES=prod,eu

Settings are read fresh by every caller (Settings.current()), so changes
to the environment are observed on the next load without restarting.
"""

import os as _os
import pathlib as _pathlib

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import layerconf.constants as constants
import layerconf.errors as errors


class Settings(_pydantic_settings.BaseSettings):
    """
    Environment-driven settings for the loading framework.

    At most one of resource, file and url may be set; together they
    replace what the default strategy loads as the application config.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        extra="ignore",
        frozen=True,
    )

    strategy: str | None = _pydantic.Field(
        default=None,
        description="Import path of the strategy class the factory instantiates",
    )
    resource: str | None = _pydantic.Field(
        default=None,
        description="Resource name to load instead of 'application'",
    )
    file: str | None = _pydantic.Field(
        default=None,
        description="File to load instead of the 'application' resource",
    )
    url: str | None = _pydantic.Field(
        default=None,
        description="URL to load instead of the 'application' resource",
    )
    resource_path: str | None = _pydantic.Field(
        default=None,
        description="Extra resource directories, os.pathsep separated",
    )
    http_timeout: float = _pydantic.Field(
        default=constants.DEFAULT_HTTP_TIMEOUT,
        gt=0,
        description="Timeout for URL fetches in seconds",
    )
    profiles: str | None = _pydantic.Field(
        default=None,
        description="Comma-separated active profiles",
    )

    @_pydantic.field_validator("strategy", "resource", "file", "url", "profiles")
    @classmethod
    def _blank_is_unset(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @classmethod
    def current(cls) -> "Settings":
        """Read settings from the environment as it is right now."""
        return cls()

    def application_override(self) -> tuple[str, str] | None:
        """
        Get the explicit application source, if one is configured.

        Returns:
            ("resource" | "file" | "url", value), or None when the default
            'application' resource should be used.

        Raises:
            ConfigError: If more than one override is set.
        """
        overrides = [
            (kind, value)
            for kind, value in (
                ("resource", self.resource),
                ("file", self.file),
                ("url", self.url),
            )
            if value is not None
        ]
        if len(overrides) > 1:
            names = ", ".join(f"{constants.ENV_PREFIX}{k.upper()}" for k, _ in overrides)
            raise errors.ConfigError(f"only one of {names} may be set")
        return overrides[0] if overrides else None

    def resource_dirs(self) -> list[_pathlib.Path]:
        """
        Directories searched for resources, in lookup order.

        LAYERCONF_RESOURCE_PATH entries come first, then the current
        working directory.
        """
        dirs: list[_pathlib.Path] = []
        if self.resource_path:
            dirs.extend(
                _pathlib.Path(entry).expanduser()
                for entry in self.resource_path.split(_os.pathsep)
                if entry.strip()
            )
        dirs.append(_pathlib.Path.cwd())
        return dirs

    def profile_list(self) -> list[str]:
        """Active profiles from LAYERCONF_PROFILES, blanks dropped."""
        return split_profiles(self.profiles)


def split_profiles(value: str | None, separator: str = ",") -> list[str]:
    """Split a separator-delimited profile string, dropping blank entries."""
    if not value:
        return []
    return [part.strip() for part in value.split(separator) if part.strip()]
