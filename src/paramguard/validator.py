"""Field-set validation.

Applies the evaluator to every declared field of an endpoint and reports the
first rejection. Validation never raises for bad input; failures are returned
as `ValidationError` values so the caller decides how to surface them.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .content_type import ContentTypeMatcher, media_type_matches, normalize_accept
from .errors import ValidationError, fail_content_type, fail_key
from .evaluator import MISSING, check_key
from .models import FieldSet, ValidateOptions

logger = logging.getLogger(__name__)


def validate_fields(
    data: Mapping[str, Any],
    field_set: FieldSet,
    options: ValidateOptions | None = None,
    *,
    content_type: str | None = None,
    from_body: bool = False,
    matcher: ContentTypeMatcher = media_type_matches,
) -> ValidationError | None:
    """Validate an input mapping against a field set.

    Args:
        data: Raw input mapping (query or decoded body)
        field_set: Declarations to check, in declaration order
        options: Validation options
        content_type: Declared content type of the body, if any
        from_body: Whether ``data`` was decoded from a request body
        matcher: Content-type matcher consulted when ``options.accept`` is set

    Returns:
        None if every field is accepted, otherwise the first failure
    """
    if options is not None and options.accept and from_body:
        accepted = normalize_accept(options.accept)
        if not matcher(content_type, accepted):
            logger.debug(f"Content type {content_type!r} does not match {list(accepted)}")
            return fail_content_type()

    for name, spec in field_set.items():
        if not check_key(data.get(name, MISSING), spec):
            logger.debug(f"Parameter '{name}' rejected by {spec}")
            return fail_key(name)

    return None


class FieldSetValidator:
    """Reusable validator for one endpoint's field set.

    Example:
        >>> validator = FieldSetValidator.from_dict(
        ...     {"q": "string", "page": "?integer"}, accept="json"
        ... )
        >>> validator.validate_query({"q": "cats"}) is None
        True
    """

    def __init__(
        self,
        field_set: FieldSet,
        options: ValidateOptions | None = None,
        matcher: ContentTypeMatcher = media_type_matches,
    ):
        self.field_set = field_set
        self.options = options or ValidateOptions()
        self.matcher = matcher

    @classmethod
    def from_dict(
        cls,
        fields: Mapping[str, Any] | FieldSet,
        accept: str | list[str] | tuple[str, ...] | None = None,
        matcher: ContentTypeMatcher = media_type_matches,
    ) -> "FieldSetValidator":
        """Create a validator from raw declarations.

        Raises:
            TypeSpecError: If a declaration is malformed
        """
        return cls(FieldSet.from_dict(fields), ValidateOptions(accept=accept), matcher)

    def accepts_content_type(self, content_type: str | None) -> bool:
        """Check a body's content type against the accept option, if any."""
        if not self.options.accept:
            return True
        return self.matcher(content_type, normalize_accept(self.options.accept))

    def validate_query(self, data: Mapping[str, Any]) -> ValidationError | None:
        """Validate query-sourced input. The accept option does not apply."""
        return validate_fields(data, self.field_set, self.options, matcher=self.matcher)

    def validate_body(
        self, data: Mapping[str, Any], content_type: str | None
    ) -> ValidationError | None:
        """Validate body-sourced input, checking the content type first."""
        return validate_fields(
            data,
            self.field_set,
            self.options,
            content_type=content_type,
            from_body=True,
            matcher=self.matcher,
        )

    def check(
        self,
        data: Mapping[str, Any],
        *,
        content_type: str | None = None,
        from_body: bool = False,
    ) -> None:
        """Validate and raise the first failure.

        Raises:
            ValidationError: If the input is rejected
        """
        error = validate_fields(
            data,
            self.field_set,
            self.options,
            content_type=content_type,
            from_body=from_body,
            matcher=self.matcher,
        )
        if error is not None:
            raise error
