"""Media-type matching for body-sourced validation.

The field-set validator treats content-type matching as an injected
capability: any callable with the `ContentTypeMatcher` shape can be passed
in. `media_type_matches` is the default implementation.
"""

from collections.abc import Callable, Sequence

ContentTypeMatcher = Callable[[str | None, Sequence[str]], bool]

# Shorthands understood in ``accept`` options
MEDIA_TYPE_SHORTHANDS = {
    "json": "application/json",
    "urlencoded": "application/x-www-form-urlencoded",
    "form": "application/x-www-form-urlencoded",
    "multipart": "multipart/*",
    "text": "text/plain",
    "html": "text/html",
    "xml": "application/xml",
}


def normalize_accept(accept: str | Sequence[str] | None) -> tuple[str, ...]:
    """Turn an ``accept`` option into a tuple of media-type patterns."""
    if accept is None:
        return ()
    if isinstance(accept, str):
        return (accept,)
    return tuple(accept)


def parse_media_type(content_type: str | None) -> tuple[str, str] | None:
    """Split a Content-Type header value into lowercase (type, subtype).

    Parameters such as ``charset`` are dropped. Returns None when the value
    is missing or not of the form ``type/subtype``.
    """
    if not content_type:
        return None
    essence = content_type.split(";", 1)[0].strip().lower()
    main, sep, sub = essence.partition("/")
    if not sep or not main or not sub or "/" in sub:
        return None
    return main, sub


def _expand_pattern(pattern: str) -> tuple[str, str] | None:
    pattern = pattern.strip().lower()
    if pattern.startswith("+"):
        return "*", "*" + pattern
    pattern = MEDIA_TYPE_SHORTHANDS.get(pattern, pattern)
    main, sep, sub = pattern.partition("/")
    if not sep or not main or not sub:
        return None
    return main, sub


def _part_matches(pattern: str, actual: str) -> bool:
    if pattern == "*":
        return True
    if pattern.startswith("*+"):
        return actual.endswith(pattern[1:])
    return pattern == actual


def media_type_matches(content_type: str | None, accepted: Sequence[str]) -> bool:
    """Check whether a declared content type satisfies any accepted pattern.

    Args:
        content_type: The request's Content-Type header value (or None)
        accepted: Accepted patterns: full types, wildcards such as
            ``application/*``, suffixes such as ``+json``, or shorthands
            such as ``json``

    Returns:
        True if the content type matches one of the patterns
    """
    actual = parse_media_type(content_type)
    if actual is None:
        return False
    for pattern in normalize_accept(accepted):
        expected = _expand_pattern(pattern)
        if expected is None:
            continue
        if _part_matches(expected[0], actual[0]) and _part_matches(expected[1], actual[1]):
            return True
    return False
