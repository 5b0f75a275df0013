"""Query-string decoding with bracket semantics.

Form and query encoders commonly express arrays and nested mappings with
brackets in the key. This module decodes them into the raw value shapes the
evaluator understands:

    foo=bar                 -> {"foo": "bar"}
    foo=1&foo=2             -> {"foo": ["1", "2"]}
    foo[]=1                 -> {"foo": ["1"]}
    foo[0]=a&foo[1]=b       -> {"foo": ["a", "b"]}
    foo[key]=1              -> {"foo": {"key": "1"}}
    foo[]=1&foo[key]=2      -> {"foo": {"0": "1", "key": "2"}}
"""

import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import unquote_plus

# Indices above this become mapping keys instead of list positions
ARRAY_LIMIT = 20

# Bracket segments past this depth are kept as one literal segment
MAX_DEPTH = 5

_SEGMENT = re.compile(r"\[([^\[\]]*)\]")

# Only short ASCII digit runs can be list positions
_INDEX = re.compile(r"[0-9]{1,2}")


class _Branch(dict):
    """A container under construction, keyed by int (list slot) or str."""

    def next_index(self) -> int:
        indices = [k for k in self if isinstance(k, int)]
        return max(indices) + 1 if indices else 0


def split_key(key: str) -> list[str]:
    """Split ``a[b][c]`` into ``["a", "b", "c"]``.

    A key whose brackets are unbalanced, or that starts with a bracket, is
    returned whole.
    """
    start = key.find("[")
    if start <= 0:
        return [key]
    root, rest = key[:start], key[start:]
    segments: list[str] = []
    position = 0
    for match in _SEGMENT.finditer(rest):
        if match.start() != position:
            break
        if len(segments) == MAX_DEPTH:
            break
        segments.append(match.group(1))
        position = match.end()
    if not segments:
        return [key]
    if position < len(rest):
        segments.append(rest[position:])
    return [root, *segments]


def _slot(branch: _Branch, segment: str) -> int | str:
    if segment == "":
        return branch.next_index()
    if _INDEX.fullmatch(segment) and int(segment) <= ARRAY_LIMIT:
        return int(segment)
    return segment


def _combine(existing: Any, value: Any) -> Any:
    if isinstance(existing, list):
        return [*existing, value]
    return [existing, value]


def _assign(branch: _Branch, segments: list[str], value: Any) -> None:
    key = _slot(branch, segments[0])
    rest = segments[1:]
    if not rest:
        branch[key] = _combine(branch[key], value) if key in branch else value
        return
    child = branch.get(key)
    if not isinstance(child, _Branch):
        child = _Branch()
        branch[key] = child
    _assign(child, rest, value)


def _finalize(value: Any) -> Any:
    if isinstance(value, list):
        return [_finalize(item) for item in value]
    if not isinstance(value, _Branch):
        return value
    if all(isinstance(k, int) for k in value):
        return [_finalize(value[k]) for k in sorted(value)]
    return {str(k): _finalize(v) for k, v in value.items()}


def build_query(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Build a raw input mapping from decoded (key, value) pairs."""
    result: dict[str, Any] = {}
    for key, value in pairs:
        segments = split_key(key)
        root = segments[0]
        if len(segments) == 1:
            existing = result.get(root)
            if root in result and not isinstance(existing, _Branch):
                result[root] = _combine(existing, value)
            elif root not in result:
                result[root] = value
            else:
                existing[existing.next_index()] = value
            continue
        child = result.get(root)
        if not isinstance(child, _Branch):
            child = _Branch()
            if root in result:
                # a plain value seen before the bracketed form becomes slot 0
                for item in result[root] if isinstance(result[root], list) else [result[root]]:
                    child[child.next_index()] = item
            result[root] = child
        _assign(child, segments[1:], value)
    return {key: _finalize(value) for key, value in result.items()}


def parse_query_string(query: str) -> dict[str, Any]:
    """Decode a raw query string (without the leading ``?``).

    ``+`` and percent-escapes are decoded in keys and values; a pair without
    ``=`` has the empty string as value; empty pairs are skipped.
    """
    if query.startswith("?"):
        query = query[1:]
    pairs = []
    for part in query.split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        key = unquote_plus(key)
        if not key:
            continue
        pairs.append((key, unquote_plus(value)))
    return build_query(pairs)


def query_from_multi_items(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Decode Starlette ``QueryParams.multi_items()`` or ``FormData.multi_items()``."""
    return build_query((key, value) for key, value in items)
