"""Command line entry point: configuration scaffolding and health checks."""

from __future__ import annotations

import argparse
import sys
import urllib.error
import urllib.request
from collections.abc import Sequence
from http import HTTPStatus
from pathlib import Path

_UNITS = ("B", "KB", "MB", "GB", "TB")
DEFAULT_CONFIG_PATH = "vein.toml"
DEFAULT_HEALTH_URL = "http://127.0.0.1:8346/up"
DEFAULT_HEALTH_TIMEOUT = 5

_DEFAULT_CONFIG_TEMPLATE = """# Vein Configuration
# Generated by `vein init`

[server]
host = "0.0.0.0"
port = 8346

[storage]
path = "{storage_path}"

[database]
path = "{db_path}"

[logging]
level = "info"

# Uncomment to enable upstream proxy (required for fetching new gems)
# [upstream]
# url = "https://rubygems.org"
# For chain mode (Android -> Desktop vein):
# url = "http://192.168.x.x:8346"
"""


class HealthCheckError(RuntimeError):
    """The health endpoint could not be reached or reported a failure."""


def format_bytes(value: int) -> str:
    """Render a byte count with a binary unit, e.g. ``"1.50 KB"``."""
    if value == 0:
        return "0 B"
    scaled = float(value)
    unit = 0
    while scaled >= 1024.0 and unit < len(_UNITS) - 1:
        scaled /= 1024.0
        unit += 1
    if unit == 0:
        return f"{value} {_UNITS[0]}"
    return f"{scaled:.2f} {_UNITS[unit]}"


def generate_default_config() -> str:
    """Text of a starter ``vein.toml``."""
    return _DEFAULT_CONFIG_TEMPLATE.format(storage_path="./gems", db_path="./vein.db")


def run_init(output: str | Path, force: bool = False) -> Path:
    """Write the default configuration to ``output``.

    Raises ``FileExistsError`` when the file exists and ``force`` is false.
    """
    path = Path(output)
    if path.exists() and not force:
        raise FileExistsError(
            f"Config file {path} already exists. Use --force to overwrite."
        )
    path.write_text(generate_default_config(), encoding="utf-8")
    print(f"Created config file: {path}")
    return path


def _status_text(code: int) -> str:
    try:
        return f"{code} {HTTPStatus(code).phrase}"
    except ValueError:
        return str(code)


def run_health(url: str = DEFAULT_HEALTH_URL, timeout: float = DEFAULT_HEALTH_TIMEOUT) -> int:
    """GET the health endpoint and return its status code when it is a success.

    Raises ``HealthCheckError`` for non-success statuses and network failures.
    """
    request = urllib.request.Request(url, method="GET")
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            code = response.status
            response.read()
    except urllib.error.HTTPError as err:
        code = err.code
        err.close()
    except (urllib.error.URLError, OSError, ValueError) as err:
        raise HealthCheckError(f"sending health check request: {err}") from err

    if 200 <= code < 300:
        print(f"Vein healthy: {_status_text(code)}")
        return code
    raise HealthCheckError(f"health endpoint returned status {_status_text(code)}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vein", description="Vein RubyGems mirror server")
    commands = parser.add_subparsers(dest="command", required=True)

    health = commands.add_parser("health", help="Perform a health check against a Vein instance")
    health.add_argument("--url", default=DEFAULT_HEALTH_URL, help="URL of the health endpoint")
    health.add_argument(
        "--timeout", type=int, default=DEFAULT_HEALTH_TIMEOUT, help="Timeout in seconds"
    )

    init = commands.add_parser("init", help="Initialize a new vein configuration file")
    init.add_argument(
        "--output", "-o", type=Path, default=Path(DEFAULT_CONFIG_PATH), help="Output path"
    )
    init.add_argument("--force", action="store_true", help="Overwrite existing config file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the process exit status."""
    args = _build_parser().parse_args(argv)
    try:
        if args.command == "init":
            run_init(args.output, args.force)
        else:
            run_health(args.url, args.timeout)
    except (HealthCheckError, OSError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())