from blocker_converter.compaction import (
    SelectorGroups,
    apply_css_exceptions,
    apply_domain_wildcards,
    compact_css_rules,
)
from blocker_converter.converter import convert_rule
from blocker_converter.errors import ErrorCode
from blocker_converter.models import ConvertedRule, Diagnostic
from blocker_converter.parser import parse_rule


def converted(*texts: str) -> list[ConvertedRule]:
    rules = []
    for text in texts:
        rule = parse_rule(text)
        assert rule is not None
        rules.append(convert_rule(rule))
    return rules


def test_selector_groups_keep_first_seen_order() -> None:
    groups = SelectorGroups.build(converted("##.b", "a.com##.a", "##.a"))
    assert list(groups.groups) == [".b", ".a"]
    assert len(groups.get(".a")) == 2
    assert groups.get(".missing") == []


def test_exception_restricts_wide_rule() -> None:
    errors: list[Diagnostic] = []
    result = apply_css_exceptions(converted("##.ad"), converted("example.com#@#.ad"), errors)
    assert len(result) == 1
    assert result[0].trigger.unless_domain == ["example.com"]
    assert errors == []


def test_exception_on_same_domain_drops_rule() -> None:
    errors: list[Diagnostic] = []
    result = apply_css_exceptions(
        converted("example.com##.ad"), converted("example.com#@#.ad"), errors
    )
    assert result == []
    assert [item.code for item in errors] == [ErrorCode.POST_MERGE_DOMAIN_CONFLICT]
    assert errors[0].rule_text == "example.com##.ad"


def test_exception_matches_permitted_domain_by_substring() -> None:
    errors: list[Diagnostic] = []
    result = apply_css_exceptions(
        converted("ample.com##.ad"), converted("example.com#@#.ad"), errors
    )
    assert result == []
    assert len(errors) == 1


def test_exception_for_unrelated_domain_is_ignored() -> None:
    errors: list[Diagnostic] = []
    result = apply_css_exceptions(
        converted("example.com##.ad"), converted("other.org#@#.ad"), errors
    )
    assert len(result) == 1
    assert result[0].trigger.unless_domain is None
    assert result[0].trigger.if_domain == ["example.com"]


def test_exception_with_other_selector_is_ignored() -> None:
    errors: list[Diagnostic] = []
    result = apply_css_exceptions(converted("##.ad"), converted("example.com#@#.banner"), errors)
    assert result[0].trigger.unless_domain is None


def test_exception_domains_are_not_duplicated() -> None:
    errors: list[Diagnostic] = []
    result = apply_css_exceptions(
        converted("##.ad"),
        converted("example.com#@#.ad", "example.com,other.org#@#.ad"),
        errors,
    )
    assert result[0].trigger.unless_domain == ["example.com", "other.org"]


def test_compaction_splits_at_selector_cap() -> None:
    rules = converted(*(f"##.ad-{index}" for index in range(260)))
    compacted = compact_css_rules(rules)
    assert compacted.domain_sensitive == []
    assert [len(rule.action.selector.split(", ")) for rule in compacted.wide] == [250, 10]
    assert compacted.wide[0].action.selector.startswith(".ad-0, .ad-1, ")
    assert compacted.wide[1].action.selector.endswith(".ad-259")
    assert all(rule.trigger.url_filter == ".*" for rule in compacted.wide)


def test_compaction_exact_multiple_has_no_empty_rule() -> None:
    rules = converted(*(f"##.ad-{index}" for index in range(4)))
    compacted = compact_css_rules(rules, max_selectors=2)
    assert [rule.action.selector for rule in compacted.wide] == [".ad-0, .ad-1", ".ad-2, .ad-3"]


def test_compaction_keeps_domain_sensitive_rules() -> None:
    rules = converted("##.a", "example.com##.b", "~example.com##.c", "##.d")
    compacted = compact_css_rules(rules)
    assert [rule.action.selector for rule in compacted.wide] == [".a, .d"]
    assert [rule.action.selector for rule in compacted.domain_sensitive] == [".b", ".c"]


def test_compaction_is_stable_when_repeated() -> None:
    first = compact_css_rules(converted("##.a", "##.b", "##.c"), max_selectors=2)
    selectors = [part for rule in first.wide for part in rule.action.selector.split(", ")]
    second = compact_css_rules(converted(*(f"##{selector}" for selector in selectors)), max_selectors=2)
    assert [rule.to_dict() for rule in second.wide] == [rule.to_dict() for rule in first.wide]


def test_empty_input_compacts_to_nothing() -> None:
    compacted = compact_css_rules([])
    assert compacted.wide == []
    assert compacted.domain_sensitive == []


def test_domain_wildcards() -> None:
    rules = converted("example.com##.a", "~other.org##.b", "##.c")
    apply_domain_wildcards(rules)
    assert rules[0].trigger.if_domain == ["*example.com"]
    assert rules[1].trigger.unless_domain == ["*other.org"]
    assert rules[2].trigger.if_domain is None
