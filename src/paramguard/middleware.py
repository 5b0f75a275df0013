"""Validation-middleware factories.

These factories produce handlers of the shape ``handler(request, response,
next)``, for frameworks and adapters built around a continuation. The handler
invokes ``next`` exactly once: with no argument when the input is accepted,
or with the `ValidationError` when it is not.

``validate_get`` always validates ``request.query``. ``validate_post``
validates ``request.body`` and, when an ``accept`` option is given, checks the
request's content type first.
"""

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from .content_type import ContentTypeMatcher, media_type_matches
from .errors import ValidationError
from .models import FieldSet, ValidateOptions
from .validator import validate_fields

Continuation = Callable[..., Any]
Handler = Callable[[Any, Any, Continuation], None]


class RequestLike(Protocol):
    """The request attributes the handlers read.

    ``content_type`` is optional; when a request does not expose it, the
    ``content-type`` entry of ``headers`` is used.
    """

    query: Mapping[str, Any]
    body: Any


def _coerce_options(options: ValidateOptions | Mapping[str, Any] | None) -> ValidateOptions:
    if options is None:
        return ValidateOptions()
    if isinstance(options, ValidateOptions):
        return options
    return ValidateOptions(**options)


def request_content_type(request: Any) -> str | None:
    """Read the declared content type of a request-like object."""
    content_type = getattr(request, "content_type", None)
    if content_type:
        return content_type
    headers = getattr(request, "headers", None) or {}
    for name, value in headers.items():
        if name.lower() == "content-type":
            return value
    return None


def _finish(next: Continuation, error: ValidationError | None) -> None:
    if error is None:
        next()
    else:
        next(error)


def validate_get(
    fields: Mapping[str, Any] | FieldSet,
    options: ValidateOptions | Mapping[str, Any] | None = None,
) -> Handler:
    """Create a handler validating the request's query mapping.

    Raises:
        TypeSpecError: If a declaration is malformed (at factory time)
    """
    field_set = FieldSet.from_dict(fields)
    validate_options = _coerce_options(options)

    def handler(request: RequestLike, response: Any, next: Continuation) -> None:
        query = getattr(request, "query", None) or {}
        _finish(next, validate_fields(query, field_set, validate_options))

    return handler


def validate_post(
    fields: Mapping[str, Any] | FieldSet,
    options: ValidateOptions | Mapping[str, Any] | None = None,
    matcher: ContentTypeMatcher = media_type_matches,
) -> Handler:
    """Create a handler validating the request's decoded body.

    Raises:
        TypeSpecError: If a declaration is malformed (at factory time)
    """
    field_set = FieldSet.from_dict(fields)
    validate_options = _coerce_options(options)

    def handler(request: RequestLike, response: Any, next: Continuation) -> None:
        body = getattr(request, "body", None)
        if not isinstance(body, Mapping):
            body = {}
        error = validate_fields(
            body,
            field_set,
            validate_options,
            content_type=request_content_type(request),
            from_body=True,
            matcher=matcher,
        )
        _finish(next, error)

    return handler
