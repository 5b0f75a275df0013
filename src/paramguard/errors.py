"""Error types for paramguard.

Two families of errors exist:

- `ValidationError` is the request-facing failure. It carries an HTTP-style
  status, a machine-readable code, the offending field (if any) and a message.
  It is what the field-set validator hands to the request boundary.
- `TypeSpecError` is raised while building a field set from declarations that
  are malformed. It is a programming error at the call site and never occurs
  while a request is being validated.
"""

from typing import Any

E_BAD_PARAM = "E_BAD_PARAM"
E_BAD_CONTENT_TYPE = "E_BAD_CONTENT_TYPE"


class ValidationError(ValueError):
    """A request parameter or content type was rejected."""

    def __init__(self, status: int, code: str, key: str | None, message: str):
        super().__init__(message)
        self._status = status
        self._code = code
        self._key = key
        self._message = message

    @property
    def status(self) -> int:
        return self._status

    @property
    def code(self) -> str:
        return self._code

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def message(self) -> str:
        return self._message

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form of the error."""
        return {
            "status": self._status,
            "code": self._code,
            "key": self._key,
            "message": self._message,
        }

    def __repr__(self) -> str:
        return (
            f"ValidationError(status={self._status!r}, code={self._code!r}, "
            f"key={self._key!r}, message={self._message!r})"
        )


class TypeSpecError(ValueError):
    """A type declaration could not be parsed."""

    pass


def fail_key(key: str) -> ValidationError:
    return ValidationError(400, E_BAD_PARAM, key, f"missing or invalid parameter {key}")


def fail_content_type() -> ValidationError:
    # 415 Unsupported Media Type
    return ValidationError(415, E_BAD_CONTENT_TYPE, None, "invalid content-type")
