[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vein"
version = "0.3.0"
description = "Building blocks for a caching RubyGems mirror: gem naming, compact index quarantine filtering, gem metadata and SBOMs"
requires-python = ">=3.10"
keywords = ["rubygems", "proxy", "cache", "mirror", "ruby", "sbom", "cyclonedx"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
vein = "vein.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["vein"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
