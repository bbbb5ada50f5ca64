"""CycloneDX 1.5 software bill of materials for a gem."""

from __future__ import annotations

import copy
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from .models import GemMetadata

logger = logging.getLogger(__name__)

_SPEC_VERSION = "1.5"
_TOOL_VENDOR = "Ore Ecosystem"
_TOOL_NAME = "Vein"
_TOOL_VERSION = "0.3.0"

_HASH_PATTERN = re.compile(
    r"^(?:[a-fA-F0-9]{32}|[a-fA-F0-9]{40}|[a-fA-F0-9]{64}|[a-fA-F0-9]{96}|[a-fA-F0-9]{128})$"
)

_SPDX_IDS = {
    spdx.lower(): spdx
    for spdx in (
        "0BSD",
        "AGPL-3.0",
        "AGPL-3.0-only",
        "AGPL-3.0-or-later",
        "Apache-2.0",
        "Artistic-2.0",
        "BSD-2-Clause",
        "BSD-3-Clause",
        "BSL-1.0",
        "CC0-1.0",
        "CC-BY-4.0",
        "EPL-2.0",
        "GPL-2.0",
        "GPL-2.0-only",
        "GPL-2.0-or-later",
        "GPL-3.0",
        "GPL-3.0-only",
        "GPL-3.0-or-later",
        "ISC",
        "LGPL-2.1",
        "LGPL-2.1-only",
        "LGPL-2.1-or-later",
        "LGPL-3.0",
        "LGPL-3.0-only",
        "LGPL-3.0-or-later",
        "MIT",
        "MPL-2.0",
        "Ruby",
        "Unlicense",
        "WTFPL",
        "Zlib",
    )
}


def _normalized(text: str) -> str:
    """Replace line breaks and tabs with spaces, as normalised strings require."""
    return text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ").replace("\t", " ")


def _license_choice(license_text: str) -> dict[str, Any]:
    spdx = _SPDX_IDS.get(license_text.lower())
    if spdx is not None:
        return {"license": {"id": spdx}}
    return {"license": {"name": _normalized(license_text)}}


def _purl(name: str, version: str) -> str | None:
    if not name:
        return None
    return f"pkg:gem/{quote(name, safe='')}@{quote(version, safe='')}"


def _property(name: str, value: str) -> dict[str, str]:
    return {"name": name, "value": _normalized(value)}


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _properties(metadata: GemMetadata) -> list[dict[str, str]]:
    props = []
    if metadata.platform is not None:
        props.append(_property("vein:platform", metadata.platform))
    props.append(_property("vein:has-native-extensions", _flag(metadata.has_native_extensions)))
    props.append(_property("vein:has-embedded-binaries", _flag(metadata.has_embedded_binaries)))
    props.append(_property("vein:size-bytes", str(metadata.size_bytes)))

    optional = (
        ("vein:built-at", metadata.built_at),
        ("vein:required-ruby-version", metadata.required_ruby_version),
        ("vein:required-rubygems-version", metadata.required_rubygems_version),
        ("vein:rubygems-version", metadata.rubygems_version),
        (
            "vein:specification-version",
            None if metadata.specification_version is None else str(metadata.specification_version),
        ),
        ("vein:executables", ", ".join(metadata.executables) or None),
        ("vein:extensions", ", ".join(metadata.extensions) or None),
        ("vein:emails", ", ".join(metadata.emails) or None),
        ("vein:homepage", metadata.homepage),
        ("vein:documentation-url", metadata.documentation_url),
        ("vein:changelog-url", metadata.changelog_url),
        ("vein:source-url", metadata.source_code_url),
        ("vein:bug-tracker-url", metadata.bug_tracker_url),
        ("vein:wiki-url", metadata.wiki_url),
        ("vein:funding-url", metadata.funding_url),
    )
    props.extend(_property(name, value) for name, value in optional if value is not None)

    if metadata.dependencies:
        summary = "; ".join(
            f"{dep.name} {dep.requirement} [{dep.kind.value}]" for dep in metadata.dependencies
        )
        props.append(_property("vein:dependencies", summary))
    return props


def compute_cyclonedx_sbom(metadata: GemMetadata) -> dict[str, Any] | None:
    """Build a CycloneDX 1.5 JSON document describing the gem.

    Returns ``None`` when the document would not validate, i.e. when the
    SHA-256 checksum is not a hexadecimal digest.
    """
    if not _HASH_PATTERN.match(metadata.sha256):
        logger.warning(
            "generated CycloneDX SBOM failed validation: invalid hash %r", metadata.sha256
        )
        return None

    component: dict[str, Any] = {"type": "library"}

    authors = [author.strip() for author in metadata.authors if author.strip()]
    if authors:
        component["author"] = _normalized(", ".join(authors))
    if metadata.platform is not None:
        component["group"] = _normalized(metadata.platform)
    component["name"] = _normalized(metadata.name)
    component["version"] = _normalized(metadata.version)

    description = metadata.description if metadata.description is not None else metadata.summary
    if description is not None:
        component["description"] = _normalized(description)

    component["hashes"] = [{"alg": "SHA-256", "content": metadata.sha256}]

    licenses = [
        _license_choice(license_text.strip())
        for license_text in metadata.licenses
        if license_text.strip()
    ]
    if licenses:
        component["licenses"] = licenses

    purl = _purl(metadata.name, metadata.version)
    if purl is not None:
        component["purl"] = purl

    component["properties"] = _properties(metadata)

    timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
    bom_metadata: dict[str, Any] = {
        "timestamp": timestamp,
        "tools": [{"vendor": _TOOL_VENDOR, "name": _TOOL_NAME, "version": _TOOL_VERSION}],
        "component": component,
    }
    if licenses:
        bom_metadata["licenses"] = copy.deepcopy(licenses)

    return {
        "bomFormat": "CycloneDX",
        "specVersion": _SPEC_VERSION,
        "serialNumber": f"urn:uuid:{uuid.uuid4()}",
        "version": 1,
        "metadata": bom_metadata,
    }


def generate_cyclonedx_sbom(
    metadata: GemMetadata, existing_sbom: dict[str, Any] | None
) -> dict[str, Any] | None:
    """Reuse a previously stored SBOM when there is one, otherwise compute it."""
    platform = metadata.platform_label
    if existing_sbom is not None:
        logger.info(
            "reused cached CycloneDX SBOM for %s %s (%s)", metadata.name, metadata.version, platform
        )
        return existing_sbom

    result = compute_cyclonedx_sbom(metadata)
    if result is not None:
        logger.info(
            "generated CycloneDX SBOM for %s %s (%s)", metadata.name, metadata.version, platform
        )
    else:
        logger.info(
            "gem %s %s (%s) provided no SBOM-compatible metadata payload",
            metadata.name,
            metadata.version,
            platform,
        )
    return result