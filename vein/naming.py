"""Helpers for gem file names: splitting stems and sanitising names for storage."""

from __future__ import annotations

_SAFE_PUNCTUATION = frozenset("-_.")


def _starts_with_ascii_digit(part: str) -> bool:
    head = part[:1]
    return head.isascii() and head.isdigit()


def split_name_version_platform(stem: str) -> tuple[str, str, str | None] | None:
    """Split a gem file stem into ``(name, version, platform)``.

    The version is the first dash-separated segment (after the first) that
    starts with an ASCII digit; everything before it is the name and
    everything after it the platform. Returns ``None`` when no such split
    exists.

    >>> split_name_version_platform("nokogiri-1.15.5-x86_64-darwin")
    ('nokogiri', '1.15.5', 'x86_64-darwin')
    """
    parts = stem.split("-")
    for idx, part in enumerate(parts[1:], start=1):
        if not _starts_with_ascii_digit(part):
            continue
        name = "-".join(parts[:idx])
        version = part
        rest = parts[idx + 1 :]
        platform = "-".join(rest) if rest else None
        if not name or not version:
            continue
        return name, version, platform
    return None


def sanitize_filename(value: str) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with an underscore.

    An empty input yields ``"artifact"``.
    """
    sanitized = "".join(
        char if (char.isascii() and char.isalnum()) or char in _SAFE_PUNCTUATION else "_"
        for char in value
    )
    return sanitized or "artifact"