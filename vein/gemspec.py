"""Reading of gem archives: the gemspec YAML in ``metadata.gz`` and the data archive."""

from __future__ import annotations

import asyncio
import gzip
import logging
import re
import tarfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .analyzer import analyze_data_tar, detect_language_from_path
from .models import GemDependency, GemMetadata, parse_dependency_kind
from .sbom import generate_cyclonedx_sbom

logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_BOOL_TAG = "tag:yaml.org,2002:bool"
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class _GemspecLoader(yaml.SafeLoader):
    """Safe loader that ignores Ruby object tags and keeps dates as text."""


# Timestamps stay strings and only true/false are booleans, so values such as
# ``date: 2024-01-02 00:00:00 Z`` or ``flag: yes`` are read as text.
_GemspecLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp) for tag, regexp in resolvers if tag not in (_TIMESTAMP_TAG, _BOOL_TAG)
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_GemspecLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _construct_untagged(loader: yaml.SafeLoader, _suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node, deep=True)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_scalar(node)


_GemspecLoader.add_multi_constructor("!", _construct_untagged)


def load_gemspec_yaml(text: str) -> Any:
    """Parse gemspec YAML, reading tagged Ruby objects as plain values.

    Raises ``ValueError`` when the text is not valid YAML.
    """
    try:
        return yaml.load(text, Loader=_GemspecLoader)  # noqa: S506 - safe loader subclass
    except yaml.YAMLError as err:
        raise ValueError(f"parsing gem metadata YAML: {err}") from err


def extract_string(value: Any) -> str | None:
    """Read a string, the first element of a list, or a ``version``/``name`` field."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return extract_string(value[0]) if value else None
    if isinstance(value, dict):
        if "version" in value:
            return extract_string(value["version"])
        if "name" in value:
            return extract_string(value["name"])
    return None


def extract_string_list(value: Any) -> list[str]:
    """Read a list of strings; a single value becomes a one-element list."""
    if value is None:
        return []
    if isinstance(value, list):
        return [text for text in map(extract_string, value) if text is not None]
    text = extract_string(value)
    return [] if text is None else [text]


def extract_integer(value: Any) -> int | None:
    """Read a 64-bit integer; anything else (including booleans) gives ``None``."""
    if isinstance(value, int) and not isinstance(value, bool) and _I64_MIN <= value <= _I64_MAX:
        return value
    return None


def parse_requirement(value: Any) -> str | None:
    """Render a ``Gem::Requirement`` mapping as ``">= 1.0, < 2"``."""
    if not isinstance(value, dict):
        return None
    requirements = value.get("requirements")
    if not isinstance(requirements, list):
        return None

    parts = []
    for requirement in requirements:
        if not isinstance(requirement, list) or not requirement:
            continue
        operator = extract_string(requirement[0]) or ""
        version = (extract_string(requirement[1]) if len(requirement) > 1 else None) or ""
        if operator and version:
            parts.append(f"{operator} {version}")
        elif version:
            parts.append(version)
    return ", ".join(parts) if parts else None


def _parse_dependency(value: Any) -> GemDependency | None:
    if not isinstance(value, dict):
        return None
    name = extract_string(value.get("name"))
    if name is None:
        return None
    kind = parse_dependency_kind(extract_string(value.get("type")) or "runtime")
    if "requirement" in value:
        requirement_value = value["requirement"]
    else:
        requirement_value = value.get("version_requirements")
    requirement = parse_requirement(requirement_value) or ">= 0"
    return GemDependency(name=name, requirement=requirement, kind=kind)


def parse_dependencies(value: Any) -> list[GemDependency]:
    """Read the ``dependencies`` list of a gemspec, skipping malformed entries."""
    if not isinstance(value, list):
        return []
    return [dep for dep in map(_parse_dependency, value) if dep is not None]


def lookup_metadata_url(metadata: Any, key: str) -> str | None:
    """Return ``metadata[key]`` when ``metadata`` is a mapping and the value is text."""
    if not isinstance(metadata, dict):
        return None
    value = metadata.get(key)
    return value if isinstance(value, str) else None


def _to_json(value: Any) -> Any:
    """Convert a parsed YAML value to JSON-compatible data."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    if isinstance(value, dict):
        converted = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValueError(f"invalid type: key {key!r}, expected a string")
            converted[key] = _to_json(item)
        return converted
    raise ValueError(f"value of type {type(value).__name__} cannot be represented as JSON")


@dataclass
class _ArchiveContents:
    metadata_yaml: str | None = None
    has_native_extensions: bool = False
    has_embedded_binaries: bool = False
    languages: set[str] = field(default_factory=set)


def _read_archive(path: Path) -> _ArchiveContents:
    contents = _ArchiveContents()
    try:
        archive = tarfile.open(path, mode="r:")
    except tarfile.TarError as err:
        raise ValueError(f"reading gem archive entries: {err}") from err

    with archive:
        try:
            for member in archive:
                if member.name not in ("metadata.gz", "data.tar.gz"):
                    continue
                handle = archive.extractfile(member)
                if handle is None:
                    continue
                with handle:
                    if member.name == "metadata.gz":
                        try:
                            with gzip.GzipFile(fileobj=handle) as decoder:
                                contents.metadata_yaml = decoder.read().decode("utf-8")
                        except (OSError, EOFError, zlib.error, UnicodeDecodeError) as err:
                            raise ValueError(f"decompressing gem metadata: {err}") from err
                    else:
                        with gzip.GzipFile(fileobj=handle) as decoder:
                            analysis = analyze_data_tar(decoder)
                        contents.has_native_extensions |= analysis.has_native_extensions
                        contents.has_embedded_binaries |= analysis.has_embedded_binaries
                        contents.languages.update(analysis.languages)
        except tarfile.TarError as err:
            raise ValueError(f"accessing gem archive entry: {err}") from err
    return contents


def parse_gem_metadata(
    path: str | Path,
    name: str,
    version: str,
    platform: str | None,
    size_bytes: int,
    sha256: str,
    existing_sbom: dict[str, Any] | None,
) -> GemMetadata | None:
    """Extract structured metadata from a gem archive on disk.

    Returns ``None`` when the gem carries no ``metadata.gz`` or its YAML is
    not a mapping. Raises ``ValueError`` for unreadable archives or YAML and
    ``OSError`` when the file cannot be opened.
    """
    contents = _read_archive(Path(path))
    if contents.metadata_yaml is None:
        return None

    spec = load_gemspec_yaml(contents.metadata_yaml)
    if not isinstance(spec, dict):
        return None

    spec_platform = extract_string(spec.get("platform"))

    try:
        metadata_json = _to_json(spec.get("metadata"))
    except ValueError as err:
        logger.warning("failed to decode gem metadata map: %s", err)
        metadata_json = None

    extensions = extract_string_list(spec.get("extensions"))
    languages = set(contents.languages)
    for extension_path in extensions:
        language = detect_language_from_path(extension_path)
        if language is not None:
            languages.add(language)

    has_native_extensions = (
        contents.has_native_extensions
        or bool(extensions)
        or (spec_platform is not None and spec_platform != "ruby")
    )

    metadata = GemMetadata(
        name=name,
        version=version,
        platform=spec_platform if spec_platform is not None else platform,
        summary=extract_string(spec.get("summary")),
        description=extract_string(spec.get("description")),
        licenses=extract_string_list(spec.get("licenses")),
        authors=extract_string_list(spec.get("authors")),
        emails=extract_string_list(spec.get("email")),
        homepage=extract_string(spec.get("homepage")),
        documentation_url=lookup_metadata_url(metadata_json, "documentation_uri"),
        changelog_url=lookup_metadata_url(metadata_json, "changelog_uri"),
        source_code_url=lookup_metadata_url(metadata_json, "source_code_uri"),
        bug_tracker_url=lookup_metadata_url(metadata_json, "bug_tracker_uri"),
        wiki_url=lookup_metadata_url(metadata_json, "wiki_uri"),
        funding_url=lookup_metadata_url(metadata_json, "funding_uri"),
        metadata=metadata_json,
        dependencies=parse_dependencies(spec.get("dependencies")),
        executables=extract_string_list(spec.get("executables")),
        extensions=extensions,
        native_languages=sorted(languages),
        has_native_extensions=has_native_extensions,
        has_embedded_binaries=contents.has_embedded_binaries,
        required_ruby_version=parse_requirement(spec.get("required_ruby_version")),
        required_rubygems_version=parse_requirement(spec.get("required_rubygems_version")),
        rubygems_version=extract_string(spec.get("rubygems_version")),
        specification_version=extract_integer(spec.get("specification_version")),
        built_at=extract_string(spec.get("date")),
        size_bytes=size_bytes,
        sha256=sha256,
    )

    try:
        metadata.sbom = generate_cyclonedx_sbom(metadata, existing_sbom)
    except (ValueError, TypeError) as err:
        logger.warning("failed to build CycloneDX SBOM: %s", err)

    return metadata


async def extract_gem_metadata(
    path: str | Path,
    name: str,
    version: str,
    platform: str | None,
    size_bytes: int,
    sha256: str,
    existing_sbom: dict[str, Any] | None,
) -> GemMetadata | None:
    """Run :func:`parse_gem_metadata` in a worker thread."""
    return await asyncio.to_thread(
        parse_gem_metadata, path, name, version, platform, size_bytes, sha256, existing_sbom
    )