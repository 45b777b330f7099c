"""Domain models for the content blocker converter."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .content_types import ContentType
from .errors import ErrorCode

URL_FILTER_ANY_URL = ".*"


class RuleKind(str, Enum):
    COSMETIC = "cosmetic"
    SCRIPT = "script"
    URL = "url"


@dataclass(frozen=True, slots=True)
class CosmeticRule:
    """Element hiding rule (``##``) or its exception (``#@#``)."""

    rule_text: str
    selector: str
    included_domains: tuple[str, ...] = ()
    excluded_domains: tuple[str, ...] = ()
    is_whitelist: bool = False
    is_injected: bool = False
    is_third_party: bool = False
    match_case: bool = False
    kind: RuleKind = field(default=RuleKind.COSMETIC, init=False)


@dataclass(frozen=True, slots=True)
class ScriptRule:
    rule_text: str
    kind: RuleKind = field(default=RuleKind.SCRIPT, init=False)


@dataclass(frozen=True, slots=True)
class UrlRule:
    """Network rule.

    ``pattern_source`` is the regex derived from the rule's URL mask; ``url_regex``
    holds a precompiled regex source when the parser already has one.
    """

    rule_text: str
    pattern_source: str = ""
    content_type_mask: ContentType = ContentType.ALL
    is_whitelist: bool = False
    is_third_party: bool = False
    match_case: bool = False
    included_domains: tuple[str, ...] = ()
    excluded_domains: tuple[str, ...] = ()
    url_regex: str | None = None
    kind: RuleKind = field(default=RuleKind.URL, init=False)


FilterRule = Union[CosmeticRule, ScriptRule, UrlRule]


class ActionType(str, Enum):
    BLOCK = "block"
    IGNORE_PREVIOUS_RULES = "ignore-previous-rules"
    CSS_DISPLAY_NONE = "css-display-none"


@dataclass(slots=True)
class Trigger:
    url_filter: str = URL_FILTER_ANY_URL
    if_domain: list[str] | None = None
    unless_domain: list[str] | None = None
    resource_type: list[str] | None = None
    load_type: list[str] | None = None
    case_sensitive: bool | None = None

    @property
    def is_domain_sensitive(self) -> bool:
        return bool(self.if_domain) or bool(self.unless_domain)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"url-filter": self.url_filter}
        if self.resource_type:
            payload["resource-type"] = list(self.resource_type)
        if self.load_type:
            payload["load-type"] = list(self.load_type)
        if self.case_sensitive:
            payload["url-filter-is-case-sensitive"] = True
        if self.if_domain:
            payload["if-domain"] = list(self.if_domain)
        if self.unless_domain:
            payload["unless-domain"] = list(self.unless_domain)
        return payload


@dataclass(slots=True)
class Action:
    type: ActionType
    selector: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type.value}
        if self.selector is not None:
            payload["selector"] = self.selector
        return payload


@dataclass(slots=True)
class ConvertedRule:
    trigger: Trigger
    action: Action
    # Text of the filter rule this was built from; never serialized.
    source_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"trigger": self.trigger.to_dict(), "action": self.action.to_dict()}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A rule that did not make it into the output, and why."""

    rule_text: str
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        if not self.rule_text:
            return self.message
        return f"{self.rule_text}: {self.message}"


@dataclass(slots=True)
class ConversionBucket:
    """Classified rules for a single conversion call."""

    css_blocking_wide: list[ConvertedRule] = field(default_factory=list)
    css_blocking_domain_sensitive: list[ConvertedRule] = field(default_factory=list)
    css_elemhide: list[ConvertedRule] = field(default_factory=list)
    url_blocking: list[ConvertedRule] = field(default_factory=list)
    other: list[ConvertedRule] = field(default_factory=list)
    # Staging for the exception merge and compaction passes.
    css_blocking: list[ConvertedRule] = field(default_factory=list)
    css_exceptions: list[ConvertedRule] = field(default_factory=list)
    errors: list[Diagnostic] = field(default_factory=list)

    def ordered(self) -> list[ConvertedRule]:
        return [
            *self.css_blocking_wide,
            *self.css_blocking_domain_sensitive,
            *self.css_elemhide,
            *self.url_blocking,
            *self.other,
        ]


@dataclass(frozen=True, slots=True)
class ConversionResult:
    converted_count: int
    error_count: int
    over_limit: bool
    converted_json: str
    errors: tuple[Diagnostic, ...] = ()

    @property
    def rules(self) -> list[dict[str, Any]]:
        return json.loads(self.converted_json)

    def to_dict(self) -> dict[str, Any]:
        return {
            "convertedCount": self.converted_count,
            "errorsCount": self.error_count,
            "overLimit": self.over_limit,
            "converted": self.converted_json,
        }


__all__ = [
    "Action",
    "ActionType",
    "ConversionBucket",
    "ConversionResult",
    "ConvertedRule",
    "CosmeticRule",
    "Diagnostic",
    "FilterRule",
    "RuleKind",
    "ScriptRule",
    "Trigger",
    "URL_FILTER_ANY_URL",
    "UrlRule",
]
