import pytest

from blocker_converter.errors import ErrorCode, RuleConversionError
from blocker_converter.models import UrlRule
from blocker_converter.url_pattern import translate_url_pattern, url_filter_source


def test_trailing_delimiter_pair_is_removed() -> None:
    source = r"^[htpsw]+:\/\/([a-z0-9-]+\.)?example\.com([^ a-zA-Z0-9.%]|$)"
    assert translate_url_pattern(source) == r"^[htpsw]+:\/\/([a-z0-9-]+\.)?example\.com([^ a-zA-Z0-9.%])"


@pytest.mark.parametrize("source", ["ad{1,3}banner", "ad{2}", "x{3,}y", r"a\\{2}"])
def test_bounded_repetition_is_rejected(source: str) -> None:
    with pytest.raises(RuleConversionError) as exc:
        translate_url_pattern(source)
    assert exc.value.code is ErrorCode.UNSUPPORTED_REGEX_CONSTRUCT


@pytest.mark.parametrize("source", ["(ads|banners)", r"foo\\|bar"])
def test_alternation_is_rejected(source: str) -> None:
    with pytest.raises(RuleConversionError) as exc:
        translate_url_pattern(source)
    assert exc.value.code is ErrorCode.UNSUPPORTED_REGEX_CONSTRUCT


def test_escaped_constructs_are_accepted() -> None:
    assert translate_url_pattern(r"ad\{2\}\|x") == r"ad\{2\}\|x"
    assert translate_url_pattern(r"a\\\{2\}") == r"a\\\{2\}"


def test_source_preference() -> None:
    rule = UrlRule(rule_text="||a.com", pattern_source="derived", url_regex="compiled")
    assert url_filter_source(rule) == "compiled"
    rule = UrlRule(rule_text="||a.com", pattern_source="derived")
    assert url_filter_source(rule) == "derived"
    rule = UrlRule(rule_text="literal")
    assert url_filter_source(rule) == "literal"
