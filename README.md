# vein

Building blocks for a caching RubyGems mirror:

- `vein.naming`: splitting gem file names into name, version and platform,
  and sanitising names for use as file names.
- `vein.compact`: hiding quarantined versions from compact index `/info/{gem}` bodies.
- `vein.retry`: retrying database connections with exponential, Fibonacci-like
  or constant backoff.
- `vein.analyzer`: scanning a gem's data archive for native extensions,
  embedded binaries and implementation languages.
- `vein.gemspec`: reading a `.gem` archive into a `GemMetadata` record
  (`vein.models`), including its dependencies and requirements.
- `vein.sbom`: producing a CycloneDX 1.5 SBOM for a gem.
- `vein.cli`: the `vein` command (`init` and `health`).

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command line

Create a starter configuration file (fails if the file exists, unless
`--force` is given):

```
vein init --output vein.toml
vein init --output vein.toml --force
```

Check that a running mirror's health endpoint answers with a success status:

```
vein health --url http://127.0.0.1:8346/up --timeout 5
```

Both commands exit with status 1 and print an error on failure.

## Library use

Split a gem file stem:

```python
from vein.naming import split_name_version_platform, sanitize_filename

split_name_version_platform("nokogiri-1.15.5-x86_64-darwin")
# ("nokogiri", "1.15.5", "x86_64-darwin")
split_name_version_platform("just-a-name")   # None
sanitize_filename("my gem/1.0")              # "my_gem_1.0"
```

Hide quarantined versions from a compact index `/info/{gem}` body. Keys are
`version`, or `version:platform` for platforms other than `ruby`:

```python
from vein.compact import filter_compact_info, format_version_key

key = format_version_key("1.1.0", "x86_64-linux")   # "1.1.0:x86_64-linux"
filtered = filter_compact_info(body, quarantined={"1.1.0", key})
```

Extract metadata and an SBOM from a `.gem` archive on disk:

```python
from vein.gemspec import parse_gem_metadata

meta = parse_gem_metadata("rack-3.0.0.gem", "rack", "3.0.0", None, size_bytes, sha256, None)
if meta is not None:
    print(meta.licenses, meta.dependencies, meta.native_languages, meta.sbom)
```

`extract_gem_metadata` takes the same arguments and runs the parse in a worker
thread for use from `async` code. Passing a previously stored SBOM as the last
argument reuses it instead of generating a new one. The SBOM is `None` when the
SHA-256 checksum is not a hexadecimal digest.

Retry a flaky connection with configurable backoff:

```python
from vein.retry import BackoffStrategy, RetryConfig, connect_with_retry

config = RetryConfig(enabled=True, max_attempts=3, initial_backoff_ms=100,
                     max_backoff_secs=2, backoff_strategy=BackoffStrategy.EXPONENTIAL)
conn = await connect_with_retry(open_connection, config, "sqlite")
```

Errors whose message mentions authentication, permissions, invalid or
malformed input, syntax errors or missing tables are raised at once; others
are retried until `max_attempts` is reached.

## What this package does not do

It contains no HTTP proxy server, no storage or index of cached gems, and no
quarantine database: there is no `serve`, `stats`, `catalog` or `quarantine`
command. The modules above are the parsing, filtering and metadata pieces such
a mirror is built from; the caller supplies the HTTP handling, storage and the
set of quarantined versions.