import pytest

from vein.compact import filter_compact_info, format_version_key, parse_compact_line


def test_parse_compact_line_simple():
    key, rest = parse_compact_line("1.0.0 |abc123|dep1")
    assert key == "1.0.0"
    assert rest == "|abc123|dep1"


def test_parse_compact_line_with_platform():
    key, rest = parse_compact_line("1.0.0 x86_64-linux|abc123|dep1")
    assert key == "1.0.0:x86_64-linux"
    assert rest == "|abc123|dep1"


def test_parse_compact_line_ruby_platform():
    key, _ = parse_compact_line("1.0.0 ruby|abc123|")
    assert key == "1.0.0"


@pytest.mark.parametrize("line", ["---", "no pipe here", " |abc|", ""])
def test_parse_compact_line_rejects(line):
    assert parse_compact_line(line) is None


def test_format_version_key():
    assert format_version_key("1.0.0", None) == "1.0.0"
    assert format_version_key("1.0.0", "ruby") == "1.0.0"
    assert format_version_key("1.0.0", "x86_64-linux") == "1.0.0:x86_64-linux"


BODY = b"---\n1.0.0 |abc|\n1.1.0 |def|dep1\n1.1.0 x86_64-linux|ghi|\n"


def test_filter_removes_quarantined_versions():
    out = filter_compact_info(BODY, {"1.1.0"})
    assert out == b"---\n1.0.0 |abc|\n1.1.0 x86_64-linux|ghi|"


def test_filter_removes_platform_specific_version():
    out = filter_compact_info(BODY, ["1.1.0:x86_64-linux"])
    assert out == b"---\n1.0.0 |abc|\n1.1.0 |def|dep1"


def test_filter_empty_set_passes_through():
    assert filter_compact_info(BODY, set()) == BODY


def test_filter_non_utf8_passes_through():
    body = b"---\n\xff\xfe |abc|\n"
    assert filter_compact_info(body, {"1.0.0"}) == body


def test_filter_keeps_separator_blank_and_unparsable_lines():
    body = b"---\n\ngarbage\n2.0.0 |x|\r\n"
    out = filter_compact_info(body, {"2.0.0"})
    assert out == b"---\n\ngarbage"


def test_filter_without_matches_keeps_all_lines():
    out = filter_compact_info(BODY, {"9.9.9"})
    assert out.splitlines() == BODY.splitlines()