from __future__ import annotations

import re

from .errors import ErrorCode, RuleConversionError
from .models import UrlRule

# Safari's regex engine supports neither bounded repetition nor alternation.
# A construct is escaped only after an odd run of backslashes.
BOUNDED_REPETITION_RE = re.compile(r"(?<!\\)(?:\\\\)*\{\d*,?\d*\}")
ALTERNATION_RE = re.compile(r"(?<!\\)(?:\\\\)*\|")


def url_filter_source(rule: UrlRule) -> str:
    if rule.url_regex:
        return rule.url_regex
    if rule.pattern_source:
        return rule.pattern_source
    return rule.rule_text


def translate_url_pattern(source: str) -> str:
    """Rewrite a rule's URL regex into the ``url-filter`` dialect.

    Delimiter rules end with ``|$``; the pair is cut since the target has no
    separate end-of-address token.
    """

    url_filter = source.replace("|$", "")
    if BOUNDED_REPETITION_RE.search(url_filter):
        raise RuleConversionError(
            ErrorCode.UNSUPPORTED_REGEX_CONSTRUCT,
            "Safari doesn't support '{digit}' in regular expressions",
        )
    if ALTERNATION_RE.search(url_filter):
        raise RuleConversionError(
            ErrorCode.UNSUPPORTED_REGEX_CONSTRUCT,
            "Safari doesn't support '|' in regular expressions",
        )
    return url_filter


__all__ = ["translate_url_pattern", "url_filter_source"]
