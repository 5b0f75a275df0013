"""FastAPI integration.

Route dependencies validate the query string or body of a request, and an
exception handler turns `ValidationError` into a JSON error response.

Example:
    >>> app = FastAPI()
    >>> install_error_handler(app)
    >>> @app.get("/search", dependencies=[Depends(validate_query({"q": "string"}))])
    ... async def search(q: str) -> dict:
    ...     return {"q": q}
"""

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .content_type import ContentTypeMatcher, media_type_matches, parse_media_type
from .errors import ValidationError, fail_content_type
from .models import FieldSet, ValidateOptions
from .querystring import parse_query_string, query_from_multi_items
from .validator import FieldSetValidator

logger = logging.getLogger(__name__)

Dependency = Callable[[Request], Awaitable[None]]


class ErrorResponse(BaseModel):
    """Error body returned for rejected requests."""

    status: int = Field(..., description="HTTP status code")
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    key: str | None = Field(None, description="Offending parameter, if any")


def _validator(
    fields: Mapping[str, Any] | FieldSet,
    options: ValidateOptions | None,
    matcher: ContentTypeMatcher,
) -> FieldSetValidator:
    return FieldSetValidator(FieldSet.from_dict(fields), options, matcher)


async def read_body(request: Request) -> dict[str, Any]:
    """Decode a request body into a raw input mapping.

    JSON bodies must hold an object at the top level. Urlencoded and
    multipart form bodies are decoded with bracket semantics. An empty body,
    or a body of any other media type, decodes to an empty mapping.

    Raises:
        HTTPException: If a JSON body cannot be decoded
    """
    raw = await request.body()
    if not raw:
        return {}
    media_type = parse_media_type(request.headers.get("content-type"))
    if media_type is None:
        return {}
    if media_type[1] == "json" or media_type[1].endswith("+json"):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise HTTPException(status_code=400, detail="Invalid JSON body") from e
        if not isinstance(data, dict):
            raise HTTPException(status_code=400, detail="JSON body must be an object")
        return data
    if media_type == ("application", "x-www-form-urlencoded"):
        return parse_query_string(raw.decode("utf-8", errors="replace"))
    if media_type == ("multipart", "form-data"):
        # uploaded files stay UploadFile objects, which no declaration accepts
        form = await request.form()
        return query_from_multi_items(form.multi_items())
    return {}


def validate_query(
    fields: Mapping[str, Any] | FieldSet,
    options: ValidateOptions | None = None,
) -> Dependency:
    """Create a dependency validating the request's query string."""
    validator = _validator(fields, options, media_type_matches)

    async def dependency(request: Request) -> None:
        query = query_from_multi_items(request.query_params.multi_items())
        error = validator.validate_query(query)
        if error is not None:
            raise error

    return dependency


def validate_body(
    fields: Mapping[str, Any] | FieldSet,
    options: ValidateOptions | None = None,
    matcher: ContentTypeMatcher = media_type_matches,
) -> Dependency:
    """Create a dependency validating the request's body.

    When ``options.accept`` is set the content type is checked before the
    body is read.
    """
    validator = _validator(fields, options, matcher)

    async def dependency(request: Request) -> None:
        content_type = request.headers.get("content-type")
        if not validator.accepts_content_type(content_type):
            raise fail_content_type()
        body = await read_body(request)
        error = validator.validate_body(body, content_type)
        if error is not None:
            raise error

    return dependency


def error_response(error: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status,
        content=ErrorResponse(
            status=error.status, code=error.code, message=error.message, key=error.key
        ).model_dump(),
    )


def install_error_handler(app: FastAPI) -> None:
    """Register the ValidationError exception handler on an application."""

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.code} ({exc.key})")
        return error_response(exc)
