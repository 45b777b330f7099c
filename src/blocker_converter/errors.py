from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    INVALID_RULE = "INVALID_RULE"
    UNSUPPORTED_RULE_KIND = "UNSUPPORTED_RULE_KIND"
    CONFLICTING_DOMAIN_RESTRICTION = "CONFLICTING_DOMAIN_RESTRICTION"
    UNSUPPORTED_CONTENT_TYPE = "UNSUPPORTED_CONTENT_TYPE"
    UNSUPPORTED_REGEX_CONSTRUCT = "UNSUPPORTED_REGEX_CONSTRUCT"
    UNSUPPORTED_INJECTION = "UNSUPPORTED_INJECTION"
    WHITELIST_PATH_UNSUPPORTED = "WHITELIST_PATH_UNSUPPORTED"
    WHITELIST_DOMAIN_UNPARSEABLE = "WHITELIST_DOMAIN_UNPARSEABLE"
    POST_MERGE_DOMAIN_CONFLICT = "POST_MERGE_DOMAIN_CONFLICT"
    OVER_LIMIT = "OVER_LIMIT"


class ConversionError(RuntimeError):
    """Aborts a whole conversion call."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class RuleConversionError(ValueError):
    """Raised for a single rule that cannot be translated; the batch goes on."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code


class RuleParseError(RuleConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.INVALID_RULE, message)


__all__ = ["ConversionError", "ErrorCode", "RuleConversionError", "RuleParseError"]
