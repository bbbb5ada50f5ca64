import pytest

from vein.models import DependencyKind, GemDependency, GemMetadata, parse_dependency_kind


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("runtime", DependencyKind.RUNTIME),
        (":runtime", DependencyKind.RUNTIME),
        ("::Development", DependencyKind.DEVELOPMENT),
        ("OPTIONAL", DependencyKind.OPTIONAL),
        ("unknown", DependencyKind.UNKNOWN),
        ("weird", DependencyKind.UNKNOWN),
        ("", DependencyKind.UNKNOWN),
    ],
)
def test_parse_dependency_kind(raw, expected):
    assert parse_dependency_kind(raw) is expected


def test_dependency_kind_str_round_trip():
    for kind in DependencyKind:
        assert parse_dependency_kind(str(kind)) is kind


def test_gem_dependency_equality():
    first = GemDependency("rake", ">= 0", DependencyKind.DEVELOPMENT)
    second = GemDependency("rake", ">= 0", DependencyKind.DEVELOPMENT)
    assert first == second
    assert first != GemDependency("rake", ">= 0")


def test_gem_dependency_default_kind_is_runtime():
    assert GemDependency("rack", ">= 0").kind is DependencyKind.RUNTIME


def test_metadata_lists_are_not_shared():
    first = GemMetadata("a", "1.0")
    second = GemMetadata("b", "2.0")
    first.authors.append("Alice")
    assert second.authors == []


def test_metadata_defaults():
    meta = GemMetadata("rack", "3.0.0")
    assert meta.metadata is None
    assert meta.sbom is None
    assert meta.has_native_extensions is False
    assert meta.platform_label == "ruby"


def test_platform_label_uses_platform():
    meta = GemMetadata("nokogiri", "1.15.5", platform="x86_64-darwin")
    assert meta.platform_label == "x86_64-darwin"