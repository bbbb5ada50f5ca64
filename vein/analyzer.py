"""Inspection of a gem's data archive for native code and embedded binaries."""

from __future__ import annotations

import string
import tarfile
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import BinaryIO

_EMBEDDED_BINARY_DIR_PREFIXES = ("vendor/", "libexec/", "resources/")
_NATIVE_LIBRARY_EXTENSIONS = frozenset({"so", "dll", "bundle", "dylib"})
_BINARY_EXTENSIONS = frozenset({"exe", "dll", "so", "dylib", "bundle"})
_SCRIPT_EXTENSIONS = frozenset({"rb", "erb", "rake", "sh", "bat", "ps1"})

_LANGUAGE_BY_EXTENSION = {
    "rs": "Rust",
    "c": "C",
    "h": "C",
    "cc": "C++",
    "cpp": "C++",
    "cxx": "C++",
    "hpp": "C++",
    "hh": "C++",
    "hxx": "C++",
    "go": "Go",
    "java": "Java",
    "swift": "Swift",
    "m": "Objective-C",
    "mm": "Objective-C++",
    "cs": "C#",
    "kt": "Kotlin",
    "kts": "Kotlin",
    "zig": "Zig",
    "wasm": "WebAssembly",
    "so": "Native Binary",
    "dll": "Native Binary",
    "dylib": "Native Binary",
    "bundle": "Native Binary",
}

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


def _extension(path: str) -> str | None:
    """Text after the last dot of the file name; ``None`` for dotfiles and no dot."""
    name = PurePosixPath(path).name
    if name in ("", ".."):
        return None
    dot = name.rfind(".")
    if dot <= 0:
        return None
    return name[dot + 1 :]


@dataclass(frozen=True)
class DataAnalysis:
    """What was found in a gem's ``data.tar``."""

    has_native_extensions: bool = False
    has_embedded_binaries: bool = False
    languages: frozenset[str] = field(default_factory=frozenset)


def detect_language_from_path(path: str) -> str | None:
    """Guess the implementation language of a file from its name."""
    lower = _ascii_lower(path)
    if lower.endswith("cargo.toml") or lower.endswith("build.rs"):
        return "Rust"
    if lower.endswith("extconf.rb"):
        return "C"
    ext = _extension(path)
    if ext is None:
        return None
    return _LANGUAGE_BY_EXTENSION.get(_ascii_lower(ext))


def analyze_data_tar(fileobj: BinaryIO) -> DataAnalysis:
    """Scan the regular files of a tar stream for native extensions and binaries.

    Scanning stops as soon as both native extensions and embedded binaries
    have been seen. Raises ``ValueError`` when the stream is not a readable
    tar archive.
    """
    native = False
    embedded = False
    languages: set[str] = set()

    try:
        with tarfile.open(fileobj=fileobj, mode="r|*") as archive:
            for member in archive:
                if not member.isfile():
                    continue
                path = member.name
                path_lower = _ascii_lower(path)

                language = detect_language_from_path(path)
                if language is not None:
                    languages.add(language)

                if path_lower.startswith("ext/"):
                    native = True
                if path_lower.startswith(_EMBEDDED_BINARY_DIR_PREFIXES):
                    embedded = True

                ext = _extension(path)
                ext_lower = _ascii_lower(ext) if ext is not None else None
                if ext_lower in _NATIVE_LIBRARY_EXTENSIONS:
                    native = True
                    embedded = True
                if ext_lower in _BINARY_EXTENSIONS:
                    embedded = True

                if not embedded and path_lower.startswith("bin/"):
                    if ext_lower is None or ext_lower not in _SCRIPT_EXTENSIONS:
                        embedded = True

                if native and embedded:
                    break
    except (tarfile.TarError, EOFError, OSError) as err:
        raise ValueError(f"reading gem data archive: {err}") from err

    return DataAnalysis(native, embedded, frozenset(languages))