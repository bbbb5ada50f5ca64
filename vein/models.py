"""Data model for metadata extracted from gem archives."""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class DependencyKind(Enum):
    """Declared role of a gem dependency."""

    RUNTIME = "runtime"
    DEVELOPMENT = "development"
    OPTIONAL = "optional"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


def parse_dependency_kind(value: str) -> DependencyKind:
    """Read a gemspec dependency type such as ``:runtime``; unrecognised means UNKNOWN."""
    key = value.lstrip(":").translate(_ASCII_LOWER)
    try:
        return DependencyKind(key)
    except ValueError:
        return DependencyKind.UNKNOWN


@dataclass(frozen=True)
class GemDependency:
    """One dependency declared in a gemspec."""

    name: str
    requirement: str
    kind: DependencyKind = DependencyKind.RUNTIME


@dataclass
class GemMetadata:
    """Structured metadata of one gem version, as read from its archive."""

    name: str
    version: str
    platform: str | None = None
    summary: str | None = None
    description: str | None = None
    licenses: list[str] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)
    emails: list[str] = field(default_factory=list)
    homepage: str | None = None
    documentation_url: str | None = None
    changelog_url: str | None = None
    source_code_url: str | None = None
    bug_tracker_url: str | None = None
    wiki_url: str | None = None
    funding_url: str | None = None
    metadata: Any = None
    dependencies: list[GemDependency] = field(default_factory=list)
    executables: list[str] = field(default_factory=list)
    extensions: list[str] = field(default_factory=list)
    native_languages: list[str] = field(default_factory=list)
    has_native_extensions: bool = False
    has_embedded_binaries: bool = False
    required_ruby_version: str | None = None
    required_rubygems_version: str | None = None
    rubygems_version: str | None = None
    specification_version: int | None = None
    built_at: str | None = None
    size_bytes: int = 0
    sha256: str = ""
    sbom: dict[str, Any] | None = None

    @property
    def platform_label(self) -> str:
        """The platform, with ``ruby`` standing for none."""
        return self.platform if self.platform is not None else "ruby"