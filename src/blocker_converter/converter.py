"""Per-rule conversion into Safari content blocker rules."""

from __future__ import annotations

from typing import Callable, Dict

from .content_types import map_resource_types
from .domains import add_domain_options
from .errors import ErrorCode, RuleConversionError
from .models import (
    URL_FILTER_ANY_URL,
    Action,
    ActionType,
    ConvertedRule,
    CosmeticRule,
    FilterRule,
    RuleKind,
    ScriptRule,
    Trigger,
    UrlRule,
)
from .url_pattern import translate_url_pattern, url_filter_source
from .whitelist import apply_whitelist_exceptions


def _set_whitelist(rule: CosmeticRule | UrlRule, result: ConvertedRule) -> None:
    if rule.is_whitelist:
        result.action.type = ActionType.IGNORE_PREVIOUS_RULES


def _add_third_party(trigger: Trigger, rule: CosmeticRule | UrlRule) -> None:
    if rule.is_third_party:
        trigger.load_type = ["third-party"]


def _add_match_case(trigger: Trigger, rule: CosmeticRule | UrlRule) -> None:
    if rule.match_case:
        trigger.case_sensitive = True


def convert_cosmetic_rule(rule: CosmeticRule) -> ConvertedRule:
    if rule.is_injected:
        raise RuleConversionError(
            ErrorCode.UNSUPPORTED_INJECTION,
            f"Css-injection rule {rule.rule_text} cannot be converted",
        )

    result = ConvertedRule(
        trigger=Trigger(url_filter=URL_FILTER_ANY_URL),
        action=Action(type=ActionType.CSS_DISPLAY_NONE, selector=rule.selector),
    )
    _set_whitelist(rule, result)
    _add_third_party(result.trigger, rule)
    _add_match_case(result.trigger, rule)
    add_domain_options(result.trigger, rule)
    return result


def convert_script_rule(rule: ScriptRule) -> ConvertedRule:
    raise RuleConversionError(
        ErrorCode.UNSUPPORTED_INJECTION,
        f"Script-injection rule {rule.rule_text} cannot be converted",
    )


def convert_url_rule(rule: UrlRule) -> ConvertedRule:
    url_filter = translate_url_pattern(url_filter_source(rule))
    result = ConvertedRule(
        trigger=Trigger(url_filter=url_filter),
        action=Action(type=ActionType.BLOCK),
    )
    _set_whitelist(rule, result)
    result.trigger.resource_type = map_resource_types(rule.content_type_mask)
    _add_third_party(result.trigger, rule)
    _add_match_case(result.trigger, rule)
    add_domain_options(result.trigger, rule)
    apply_whitelist_exceptions(rule, result)
    return result


_CONVERTERS: Dict[RuleKind, Callable[..., ConvertedRule]] = {
    RuleKind.COSMETIC: convert_cosmetic_rule,
    RuleKind.SCRIPT: convert_script_rule,
    RuleKind.URL: convert_url_rule,
}


def get_converter(kind: RuleKind) -> Callable[..., ConvertedRule]:
    converter = _CONVERTERS.get(kind)
    if not converter:
        raise KeyError(f"No converter registered for {kind}")
    return converter


def convert_rule(rule: FilterRule) -> ConvertedRule:
    """Route a parsed rule to its converter by its ``kind`` tag."""

    kind = getattr(rule, "kind", None)
    try:
        if not isinstance(kind, RuleKind):
            raise KeyError(f"Unknown rule kind: {kind!r}")
        converter = get_converter(kind)
    except KeyError as exc:
        raise RuleConversionError(
            ErrorCode.UNSUPPORTED_RULE_KIND,
            f"Rule is not supported: {rule!r}",
        ) from exc
    result = converter(rule)
    result.source_text = rule.rule_text
    return result


__all__ = [
    "convert_cosmetic_rule",
    "convert_rule",
    "convert_script_rule",
    "convert_url_rule",
    "get_converter",
]
