from __future__ import annotations

from enum import IntFlag

from .errors import ErrorCode, RuleConversionError


class ContentType(IntFlag):
    OTHER = 1 << 0
    SCRIPT = 1 << 1
    IMAGE = 1 << 2
    STYLESHEET = 1 << 3
    OBJECT = 1 << 4
    SUBDOCUMENT = 1 << 5
    XMLHTTPREQUEST = 1 << 6
    OBJECT_SUBREQUEST = 1 << 7
    MEDIA = 1 << 8
    FONT = 1 << 9
    WEBSOCKET = 1 << 10
    # Exception-only modifiers.
    ELEMHIDE = 1 << 20
    URLBLOCK = 1 << 21
    JSINJECT = 1 << 22
    POPUP = 1 << 23

    DOCUMENT = ELEMHIDE | URLBLOCK | JSINJECT
    ALL = (
        OTHER
        | SCRIPT
        | IMAGE
        | STYLESHEET
        | OBJECT
        | SUBDOCUMENT
        | XMLHTTPREQUEST
        | OBJECT_SUBREQUEST
        | MEDIA
        | FONT
        | WEBSOCKET
    )


# Option names as written after `$` in rule text.
OPTION_MAP: dict[str, ContentType] = {
    "other": ContentType.OTHER,
    "script": ContentType.SCRIPT,
    "image": ContentType.IMAGE,
    "stylesheet": ContentType.STYLESHEET,
    "object": ContentType.OBJECT,
    "subdocument": ContentType.SUBDOCUMENT,
    "xmlhttprequest": ContentType.XMLHTTPREQUEST,
    "object-subrequest": ContentType.OBJECT_SUBREQUEST,
    "media": ContentType.MEDIA,
    "font": ContentType.FONT,
    "websocket": ContentType.WEBSOCKET,
    "popup": ContentType.POPUP,
}

EXCEPTION_OPTION_MAP: dict[str, ContentType] = {
    "elemhide": ContentType.ELEMHIDE,
    "urlblock": ContentType.URLBLOCK,
    "jsinject": ContentType.JSINJECT,
    "document": ContentType.DOCUMENT,
}

# Testing order decides token order in the output.
RESOURCE_TYPE_ORDER: tuple[tuple[ContentType, str], ...] = (
    (ContentType.IMAGE, "image"),
    (ContentType.STYLESHEET, "style-sheet"),
    (ContentType.SCRIPT, "script"),
    (ContentType.MEDIA, "media"),
    (ContentType.POPUP, "popup"),
    (ContentType.XMLHTTPREQUEST | ContentType.OTHER, "raw"),
    (ContentType.FONT, "font"),
)

_UNSUPPORTED_MASKS: dict[ContentType, str] = {
    ContentType.OBJECT: "Object content type is not yet supported",
    ContentType.OBJECT_SUBREQUEST: "Object_subrequest content type is not yet supported",
    ContentType.JSINJECT | ContentType.ALL: "$jsinject rules are ignored.",
}


def map_resource_types(mask: ContentType | int) -> list[str] | None:
    """Translate a content-type mask into the target's ``resource-type`` tokens.

    Returns ``None`` when the field should be omitted: either the mask matches
    everything (the target default) or none of the known bits are set.
    """

    mask = ContentType(mask)
    if mask == ContentType.ALL:
        return None

    reason = _UNSUPPORTED_MASKS.get(mask)
    if reason:
        raise RuleConversionError(ErrorCode.UNSUPPORTED_CONTENT_TYPE, reason)

    types = [token for flag, token in RESOURCE_TYPE_ORDER if mask & flag]
    # The target has no separate frame type.
    if mask in (ContentType.SUBDOCUMENT, ContentType.DOCUMENT):
        types.append("document")
    return types or None


__all__ = [
    "ContentType",
    "EXCEPTION_OPTION_MAP",
    "OPTION_MAP",
    "RESOURCE_TYPE_ORDER",
    "map_resource_types",
]
