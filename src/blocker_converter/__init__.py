"""Filter rules to Safari content blocker JSON converter."""

from .config import CONVERTER_VERSION, AppConfig, load_config
from .core import ConversionService, FileConversionResult, convert_array
from .errors import ConversionError, ErrorCode, RuleConversionError
from .models import ConversionResult, CosmeticRule, Diagnostic, ScriptRule, UrlRule
from .parser import parse_rule

__version__ = CONVERTER_VERSION

__all__ = [
    "AppConfig",
    "ConversionError",
    "ConversionResult",
    "ConversionService",
    "CosmeticRule",
    "Diagnostic",
    "ErrorCode",
    "FileConversionResult",
    "RuleConversionError",
    "ScriptRule",
    "UrlRule",
    "convert_array",
    "load_config",
    "parse_rule",
]
