"""Parse options and supported syntaxes."""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import pathlib as _pathlib


class Syntax(_enum.Enum):
    """Serialization formats a configuration source can be written in."""

    YAML = "yaml"
    JSON = "json"
    TOML = "toml"

    @classmethod
    def from_extension(cls, name: str) -> Syntax | None:
        """Infer the syntax from a file name or URL path, if recognizable."""
        suffix = _pathlib.PurePosixPath(name).suffix.lower()
        return _EXTENSIONS.get(suffix)

    @classmethod
    def from_content_type(cls, content_type: str | None) -> Syntax | None:
        """Infer the syntax from an HTTP Content-Type header."""
        if not content_type:
            return None
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type.endswith("json"):
            return cls.JSON
        if media_type.endswith("yaml") or media_type.endswith("yml"):
            return cls.YAML
        if media_type.endswith("toml"):
            return cls.TOML
        return None


_EXTENSIONS: dict[str, Syntax] = {
    ".yaml": Syntax.YAML,
    ".yml": Syntax.YAML,
    ".json": Syntax.JSON,
    ".toml": Syntax.TOML,
}


@_dataclasses.dataclass(frozen=True)
class ParseOptions:
    """
    How a single source is parsed.

    Attributes:
        allow_missing: When True, a source that does not exist produces no
            layer (None) instead of raising SourceUnavailableError.
        syntax: Force a syntax. When None it is inferred from the file
            extension or Content-Type, falling back to YAML.
        origin_description: Overrides the origin recorded on the tree.
    """

    allow_missing: bool = True
    syntax: Syntax | None = None
    origin_description: str | None = None

    @classmethod
    def defaults(cls) -> ParseOptions:
        return cls()

    def with_allow_missing(self, allow_missing: bool) -> ParseOptions:
        return _dataclasses.replace(self, allow_missing=allow_missing)

    def with_syntax(self, syntax: Syntax | None) -> ParseOptions:
        return _dataclasses.replace(self, syntax=syntax)

    def with_origin_description(self, description: str | None) -> ParseOptions:
        return _dataclasses.replace(self, origin_description=description)
