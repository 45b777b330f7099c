"""Filter rule text parsing.

Only the subset of the filter syntax the converter needs is recognised here:
element hiding rules, script and CSS injection markers, and network rules
with their ``$`` options. The URL mask of a network rule is turned into a
regex already written in the content blocker's dialect.
"""

from __future__ import annotations

from .content_types import EXCEPTION_OPTION_MAP, OPTION_MAP, ContentType
from .errors import RuleParseError
from .models import URL_FILTER_ANY_URL, CosmeticRule, FilterRule, ScriptRule, UrlRule

MASK_WHITE_LIST = "@@"
OPTIONS_DELIMITER = "$"
DOMAIN_OPTION = "domain="

REGEX_START_URL = r"^[htpsw]+:\/\/([a-z0-9-]+\.)?"
REGEX_SEPARATOR = r"([^ a-zA-Z0-9.%]|$)"
REGEX_SPECIAL_CHARS = frozenset(".+?${}()[]\\|/")

# (marker, is_whitelist, is_script, is_injected), longest markers first.
COSMETIC_MARKERS: tuple[tuple[str, bool, bool, bool], ...] = (
    ("#@%#", True, True, False),
    ("#%#", False, True, False),
    ("#@$#", True, False, True),
    ("#$#", False, False, True),
    ("#@?#", True, False, True),
    ("#?#", False, False, True),
    ("#@#", True, False, False),
    ("##", False, False, False),
)

IGNORED_OPTIONS = frozenset({"important", "collapse", "donottrack"})


def is_comment(line: str | None) -> bool:
    if not line or not line.strip():
        return True
    if line.startswith("!") or line.startswith(" "):
        return True
    if line.startswith("[Adblock"):
        return True
    return line.find(" - ") > 0


def _find_marker(text: str) -> tuple[int, tuple[str, bool, bool, bool]] | None:
    found: tuple[int, tuple[str, bool, bool, bool]] | None = None
    for marker in COSMETIC_MARKERS:
        index = text.find(marker[0])
        if index < 0:
            continue
        if found is None or index < found[0]:
            found = (index, marker)
    return found


def _split_domains(values: list[str]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    included: list[str] = []
    excluded: list[str] = []
    for value in values:
        domain = value.strip()
        if not domain:
            continue
        if domain.startswith("~"):
            if domain[1:]:
                excluded.append(domain[1:])
        else:
            included.append(domain)
    return tuple(included), tuple(excluded)


def _parse_cosmetic(text: str, index: int, marker: tuple[str, bool, bool, bool]) -> FilterRule:
    token, is_whitelist, is_script, is_injected = marker
    if is_script:
        return ScriptRule(rule_text=text)
    selector = text[index + len(token):].strip()
    if not selector:
        raise RuleParseError(f"Empty selector in rule: {text}")
    included, excluded = _split_domains(text[:index].split(","))
    return CosmeticRule(
        rule_text=text,
        selector=selector,
        included_domains=included,
        excluded_domains=excluded,
        is_whitelist=is_whitelist,
        is_injected=is_injected,
    )


def split_options(body: str) -> tuple[str, str]:
    if len(body) > 2 and body.startswith("/") and body.endswith("/"):
        return body, ""
    index = body.rfind(OPTIONS_DELIMITER)
    if index < 0:
        return body, ""
    return body[:index], body[index + 1:]


def pattern_to_regex(pattern: str) -> str:
    """Build a ``url-filter`` regex out of a rule's URL mask."""

    if pattern in ("", "*", "|", "||"):
        return URL_FILTER_ANY_URL
    if len(pattern) > 2 and pattern.startswith("/") and pattern.endswith("/"):
        return pattern[1:-1]

    start = ""
    if pattern.startswith("||"):
        start = REGEX_START_URL
        pattern = pattern[2:]
    elif pattern.startswith("|"):
        start = "^"
        pattern = pattern[1:]
    end = ""
    if pattern.endswith("|"):
        end = "$"
        pattern = pattern[:-1]

    parts: list[str] = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "^":
            parts.append(REGEX_SEPARATOR)
        elif char in REGEX_SPECIAL_CHARS:
            parts.append("\\" + char)
        else:
            parts.append(char)
    return start + "".join(parts) + end


def _parse_url_rule(text: str) -> UrlRule:
    is_whitelist = text.startswith(MASK_WHITE_LIST)
    body = text[len(MASK_WHITE_LIST):] if is_whitelist else text
    pattern, options_text = split_options(body)

    permitted = ContentType(0)
    restricted = ContentType(0)
    exception_flags = ContentType(0)
    is_third_party = False
    match_case = False
    included: tuple[str, ...] = ()
    excluded: tuple[str, ...] = ()

    for raw_option in options_text.split(","):
        option = raw_option.strip()
        if not option:
            continue
        negated = option.startswith("~")
        name = option.lstrip("~").lower()
        if name.startswith(DOMAIN_OPTION):
            included, excluded = _split_domains(option[len(DOMAIN_OPTION):].split("|"))
        elif name == "third-party":
            is_third_party = not negated
        elif name == "match-case":
            match_case = not negated
        elif name in OPTION_MAP:
            if negated:
                restricted |= OPTION_MAP[name]
            else:
                permitted |= OPTION_MAP[name]
        elif name in EXCEPTION_OPTION_MAP:
            if negated:
                raise RuleParseError(f"Unsupported negated option: {option}")
            exception_flags |= EXCEPTION_OPTION_MAP[name]
        elif name in IGNORED_OPTIONS:
            continue
        else:
            raise RuleParseError(f"Unknown option: {option}")

    mask = permitted or ContentType.ALL
    if restricted:
        mask &= ~restricted
    mask |= exception_flags

    return UrlRule(
        rule_text=text,
        pattern_source=pattern_to_regex(pattern),
        content_type_mask=mask,
        is_whitelist=is_whitelist,
        is_third_party=is_third_party,
        match_case=match_case,
        included_domains=included,
        excluded_domains=excluded,
    )


def parse_rule(line: str | None) -> FilterRule | None:
    """Parse one line of a filter list. Comments and blank lines give ``None``."""

    if line is None or is_comment(line):
        return None
    text = line.rstrip()
    found = _find_marker(text)
    if found is not None:
        return _parse_cosmetic(text, *found)
    return _parse_url_rule(text)


__all__ = ["is_comment", "parse_rule", "pattern_to_regex", "split_options"]
