"""Filtering of quarantined versions out of compact index ``/info/{gem}`` bodies."""

from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

_RUBY_PLATFORM = "ruby"


def format_version_key(version: str, platform: str | None) -> str:
    """Key a version as ``version`` or ``version:platform``; ``ruby`` counts as none."""
    if platform is not None and platform != _RUBY_PLATFORM:
        return f"{version}:{platform}"
    return version


def parse_compact_line(line: str) -> tuple[str, str] | None:
    """Split an info line into its version key and the rest from the first ``|``.

    ``"1.0.0 x86_64-linux|abc|dep"`` gives ``("1.0.0:x86_64-linux", "|abc|dep")``.
    Returns ``None`` when the line has no ``|`` or no version before it.
    """
    pipe = line.find("|")
    if pipe < 0:
        return None
    fields = line[:pipe].split()
    if not fields:
        return None
    version = fields[0]
    platform = fields[1] if len(fields) > 1 else None
    return format_version_key(version, platform), line[pipe:]


def _lines(text: str) -> list[str]:
    """Split on ``\\n`` with a trailing ``\\r`` removed, ignoring a final newline."""
    if not text:
        return []
    pieces = text.split("\n")
    if text.endswith("\n"):
        pieces.pop()
    return [piece[:-1] if piece.endswith("\r") else piece for piece in pieces]


def filter_compact_info(body: bytes, quarantined: Iterable[str]) -> bytes:
    """Drop the lines of a compact ``/info`` body whose version key is quarantined.

    Separator (``---``) and blank lines are kept. Bodies that are not UTF-8,
    or an empty quarantine set, pass through untouched. Filtered output is
    joined with ``\\n`` and carries no trailing newline.
    """
    keys = set(quarantined)
    if not keys:
        return bytes(body)
    try:
        text = bytes(body).decode("utf-8")
    except UnicodeDecodeError:
        return bytes(body)

    kept = []
    for line in _lines(text):
        if line == "---" or not line:
            kept.append(line)
            continue
        parsed = parse_compact_line(line)
        if parsed is not None and parsed[0] in keys:
            logger.debug("Filtering quarantined version %s from compact index", parsed[0])
            continue
        kept.append(line)
    return "\n".join(kept).encode("utf-8")