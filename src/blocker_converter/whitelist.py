"""Special handling for ``$document`` and ``$urlblock`` exception rules.

Safari can only whitelist these as "everything on this domain", so the domain
is recovered from the rule text with a fixed prefix/separator heuristic. This
is not a URL parser: anything it cannot reduce to a bare domain is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .content_types import ContentType
from .domains import is_host_name, to_punycode, write_domain_options
from .errors import ErrorCode, RuleConversionError
from .models import URL_FILTER_ANY_URL, ConvertedRule, UrlRule

logger = logging.getLogger(__name__)

DOMAIN_PREFIXES = ("http://www.", "https://www.", "http://", "https://", "||", "//")
DOMAIN_SEPARATORS = ("/", "^")
DOMAIN_OPTION = "domain="

DOCUMENT_EXCEPTION_MASK = ContentType.DOCUMENT | ContentType.ALL
URLBLOCK_EXCEPTION_MASK = ContentType.URLBLOCK | ContentType.ALL


@dataclass(frozen=True, slots=True)
class RuleDomain:
    domain: str
    path: str | None


def parse_rule_domain(rule_text: str) -> RuleDomain:
    text = rule_text[2:] if rule_text.startswith("@@") else rule_text

    start = 0
    for prefix in DOMAIN_PREFIXES:
        if text.startswith(prefix):
            start = len(prefix)
            break

    end = len(text)
    options_index = text.find("$")
    domain_index = text.find(DOMAIN_OPTION)
    if domain_index > -1 and options_index > -1:
        start = domain_index + len(DOMAIN_OPTION)
        comma = text.find(",", start)
        if comma > -1:
            end = comma
    elif options_index > -1:
        end = options_index

    symbol_index = -1
    for separator in DOMAIN_SEPARATORS:
        index = text.find(separator, start, end)
        if index >= 0:
            symbol_index = index
            break

    if symbol_index == -1:
        return RuleDomain(domain=to_punycode(text[start:end]), path=None)
    return RuleDomain(domain=to_punycode(text[start:symbol_index]), path=text[symbol_index:end])


def is_document_rule(rule: UrlRule) -> bool:
    return rule.content_type_mask == DOCUMENT_EXCEPTION_MASK


def is_url_block_rule(rule: UrlRule) -> bool:
    return rule.content_type_mask == URLBLOCK_EXCEPTION_MASK


def apply_whitelist_exceptions(rule: UrlRule, result: ConvertedRule) -> None:
    if not rule.is_whitelist:
        return

    if not (is_document_rule(rule) or is_url_block_rule(rule)):
        if rule.content_type_mask & ContentType.ELEMHIDE:
            result.trigger.resource_type = ["document"]
        return

    if is_document_rule(rule):
        result.trigger.resource_type = None

    parsed = parse_rule_domain(rule.rule_text)
    if parsed.path is not None and parsed.path not in ("^", "/"):
        logger.debug("Whitelist special warning for rule: %s", rule.rule_text)
        raise RuleConversionError(
            ErrorCode.WHITELIST_PATH_UNSUPPORTED,
            "Whitelist rules with a path cannot be applied to the whole document",
        )
    if not is_host_name(parsed.domain):
        logger.debug("Error parse domain from rule: %s", rule.rule_text)
        raise RuleConversionError(
            ErrorCode.WHITELIST_DOMAIN_UNPARSEABLE,
            "Error parsing domain from rule",
        )
    if result.trigger.unless_domain:
        raise RuleConversionError(
            ErrorCode.CONFLICTING_DOMAIN_RESTRICTION,
            "Safari does not support both permitted and restricted domains",
        )

    write_domain_options([parsed.domain], [], result.trigger)
    result.trigger.url_filter = URL_FILTER_ANY_URL
    result.trigger.resource_type = None


__all__ = [
    "RuleDomain",
    "apply_whitelist_exceptions",
    "is_document_rule",
    "is_url_block_rule",
    "parse_rule_domain",
]
