"""Batch passes over the classified cosmetic rules."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from .config import MAX_SELECTORS_PER_WIDE_RULE
from .domains import add_wildcard
from .errors import ErrorCode
from .models import (
    URL_FILTER_ANY_URL,
    Action,
    ActionType,
    ConvertedRule,
    Diagnostic,
    Trigger,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SelectorGroups:
    """Rules grouped by their exact selector, in first-seen order."""

    groups: dict[str, list[ConvertedRule]] = field(default_factory=lambda: defaultdict(list))

    @classmethod
    def build(cls, rules: list[ConvertedRule]) -> "SelectorGroups":
        grouped = cls()
        for rule in rules:
            grouped.groups[rule.action.selector or ""].append(rule)
        return grouped

    def get(self, selector: str) -> list[ConvertedRule]:
        return self.groups.get(selector, [])


@dataclass(slots=True)
class CompactedCss:
    wide: list[ConvertedRule]
    domain_sensitive: list[ConvertedRule]


def _push_exception_domain(domain: str, rule: ConvertedRule) -> None:
    permitted_domains = rule.trigger.if_domain
    if permitted_domains:
        # Textual containment, not a suffix match: an exception on
        # "example.com" also reaches a rule restricted to "ample.com".
        if not any(permitted in domain for permitted in permitted_domains):
            return

    if rule.trigger.unless_domain is None:
        rule.trigger.unless_domain = []
    if domain not in rule.trigger.unless_domain:
        rule.trigger.unless_domain.append(domain)


def apply_css_exceptions(
    css_blocking: list[ConvertedRule],
    css_exceptions: list[ConvertedRule],
    errors: list[Diagnostic],
) -> list[ConvertedRule]:
    """Fold ``#@#`` exceptions into the blocking rules sharing their selector.

    Rules that end up with both ``if-domain`` and ``unless-domain`` cannot be
    expressed and are dropped with a diagnostic.
    """

    logger.info("Applying %d css exceptions", len(css_exceptions))

    rules_map = SelectorGroups.build(css_blocking)
    exceptions_map = SelectorGroups.build(css_exceptions)

    applied = 0
    for selector, selector_exceptions in exceptions_map.groups.items():
        selector_rules = rules_map.get(selector)
        if not selector_rules:
            continue
        for exception in selector_exceptions:
            for rule in selector_rules:
                for domain in exception.trigger.if_domain or []:
                    _push_exception_domain(domain, rule)
            applied += 1

    result: list[ConvertedRule] = []
    conflicts = 0
    for rule in css_blocking:
        if rule.trigger.if_domain and rule.trigger.unless_domain:
            logger.debug("Safari does not support permitted and restricted domains in one rule: %s", rule.to_dict())
            errors.append(
                Diagnostic(
                    rule_text=rule.source_text,
                    code=ErrorCode.POST_MERGE_DOMAIN_CONFLICT,
                    message="Safari does not support permitted and restricted domains in one rule",
                )
            )
            conflicts += 1
        else:
            result.append(rule)

    logger.info("Css exceptions applied: %d", applied)
    logger.info("Css exceptions errors: %d", conflicts)
    return result


def _wide_rule(selectors: list[str]) -> ConvertedRule:
    return ConvertedRule(
        trigger=Trigger(url_filter=URL_FILTER_ANY_URL),
        action=Action(type=ActionType.CSS_DISPLAY_NONE, selector=", ".join(selectors)),
    )


def compact_css_rules(
    css_blocking: list[ConvertedRule],
    max_selectors: int = MAX_SELECTORS_PER_WIDE_RULE,
) -> CompactedCss:
    """Join the selectors of domain-unrestricted rules into wide rules."""

    logger.info("Trying to compact %d elemhide rules", len(css_blocking))

    wide: list[ConvertedRule] = []
    domain_sensitive: list[ConvertedRule] = []
    selectors: list[str] = []
    for rule in css_blocking:
        if rule.trigger.is_domain_sensitive:
            domain_sensitive.append(rule)
            continue
        selectors.append(rule.action.selector or "")
        if len(selectors) >= max_selectors:
            wide.append(_wide_rule(selectors))
            selectors = []
    if selectors:
        wide.append(_wide_rule(selectors))

    logger.info("Compacted result: wide=%d domainSensitive=%d", len(wide), len(domain_sensitive))
    return CompactedCss(wide=wide, domain_sensitive=domain_sensitive)


def apply_domain_wildcards(rules: list[ConvertedRule]) -> None:
    for rule in rules:
        rule.trigger.if_domain = add_wildcard(rule.trigger.if_domain)
        rule.trigger.unless_domain = add_wildcard(rule.trigger.unless_domain)


__all__ = [
    "CompactedCss",
    "SelectorGroups",
    "apply_css_exceptions",
    "apply_domain_wildcards",
    "compact_css_rules",
]
