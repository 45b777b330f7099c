from __future__ import annotations

import re
from collections.abc import Iterable

from .errors import ErrorCode, RuleConversionError
from .models import CosmeticRule, Trigger, UrlRule
from .utils import dedupe_keep_order

HOST_RE = re.compile(r"^[a-z0-9_](?:[a-z0-9_.-]*[a-z0-9_])?$")


def to_punycode(domain: str) -> str:
    """Lower-case and IDNA-encode a domain.

    Labels the stdlib codec rejects (empty labels, over-long labels, stray
    symbols) are kept as the lower-cased input.
    """

    value = domain.strip().lower()
    if not value or value.isascii():
        return value
    try:
        return value.encode("idna").decode("ascii")
    except UnicodeError:
        return value


def is_host_name(value: str) -> bool:
    return bool(value) and bool(HOST_RE.match(value))


def _normalize(domains: Iterable[str]) -> list[str]:
    return dedupe_keep_order(to_punycode(domain) for domain in domains if domain)


def resolve_domains(rule: CosmeticRule | UrlRule) -> tuple[list[str], list[str]]:
    included = _normalize(rule.included_domains)
    excluded = _normalize(rule.excluded_domains)
    if included and excluded:
        raise RuleConversionError(
            ErrorCode.CONFLICTING_DOMAIN_RESTRICTION,
            "Safari does not support both permitted and restricted domains",
        )
    return included, excluded


def write_domain_options(included: list[str], excluded: list[str], trigger: Trigger) -> None:
    if included and excluded:
        raise RuleConversionError(
            ErrorCode.CONFLICTING_DOMAIN_RESTRICTION,
            "Safari does not support both permitted and restricted domains",
        )
    if included:
        trigger.if_domain = list(included)
    if excluded:
        trigger.unless_domain = list(excluded)


def add_domain_options(trigger: Trigger, rule: CosmeticRule | UrlRule) -> None:
    included, excluded = resolve_domains(rule)
    write_domain_options(included, excluded, trigger)


def add_wildcard(domains: list[str] | None) -> list[str] | None:
    if not domains:
        return domains
    return [f"*{domain}" for domain in domains]


__all__ = [
    "add_domain_options",
    "add_wildcard",
    "is_host_name",
    "resolve_domains",
    "to_punycode",
    "write_domain_options",
]
