import pytest

from vein.naming import sanitize_filename, split_name_version_platform


def test_parses_simple_gem_name():
    assert split_name_version_platform("rack-3.0.0") == ("rack", "3.0.0", None)


def test_parses_hyphenated_name():
    assert split_name_version_platform("my-gem-1.0.0") == ("my-gem", "1.0.0", None)


def test_parses_platform_suffix():
    assert split_name_version_platform("nokogiri-1.15.5-x86_64-darwin") == (
        "nokogiri",
        "1.15.5",
        "x86_64-darwin",
    )


def test_parses_prerelease_version():
    assert split_name_version_platform("rails-7.1.0.rc1") == ("rails", "7.1.0.rc1", None)


def test_parses_prerelease_with_platform():
    assert split_name_version_platform("pg-1.2.3.rc1-x86_64-linux") == (
        "pg",
        "1.2.3.rc1",
        "x86_64-linux",
    )


def test_rejects_no_version():
    assert split_name_version_platform("just-a-name") is None


def test_rejects_version_only():
    assert split_name_version_platform("1.0.0") is None


def test_handles_single_digit_version():
    assert split_name_version_platform("gem-0") == ("gem", "0", None)


def test_complex_platform():
    assert split_name_version_platform("nokogiri-1.15.5-x86_64-linux-musl") == (
        "nokogiri",
        "1.15.5",
        "x86_64-linux-musl",
    )


def test_many_hyphens_in_name():
    assert split_name_version_platform("my-super-long-gem-name-1.2.3") == (
        "my-super-long-gem-name",
        "1.2.3",
        None,
    )


def test_beta_version():
    assert split_name_version_platform("rails-8.0.0.beta1") == ("rails", "8.0.0.beta1", None)


def test_java_platform():
    assert split_name_version_platform("jruby-9.4.0.0-java") == ("jruby", "9.4.0.0", "java")


def test_empty_string():
    assert split_name_version_platform("") is None


def test_version_with_letters():
    name, version, _ = split_name_version_platform("gem-1.0a")
    assert name == "gem"
    assert version == "1.0a"


def test_numeric_name_rejected():
    assert split_name_version_platform("-1.0.0") is None


def test_non_ascii_digit_is_not_a_version():
    assert split_name_version_platform("gem-\u0661.0") is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("rack", "rack"),
        ("x86_64-linux", "x86_64-linux"),
        ("1.0.0", "1.0.0"),
        ("a/b c", "a_b_c"),
        ("gem:name", "gem_name"),
        ("caf\u00e9", "caf_"),
        ("", "artifact"),
    ],
)
def test_sanitize_filename(raw, expected):
    assert sanitize_filename(raw) == expected