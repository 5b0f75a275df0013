"""Pydantic models for paramguard type declarations.

A field's acceptance rule is a `TypeSpec`, one of three variants:

- `PrimitiveSpec`: a named primitive kind, optionally marked optional.
- `PatternSpec`: a regular expression tested against the value's string form.
- `AlternationSpec`: an ordered list of primitive/pattern specs, any of which
  may accept.

Callers rarely build these by hand. `parse_type_spec` turns the compact
declaration forms into models once, when a `FieldSet` is built:

    >>> FieldSet.from_dict({
    ...     "q": "string",
    ...     "limit": "?integer",
    ...     "tags": ["array", "string"],
    ...     "sort": re.compile(r"^(asc|desc)$"),
    ... })
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .errors import TypeSpecError

PRIMITIVE_NAMES = frozenset({"null", "array", "string", "boolean", "number", "integer", "object"})

OPTIONAL_MARKER = "?"


class ParamguardBaseModel(BaseModel):
    """Base model for all paramguard models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Declarations are shared between concurrent validations
    """

    model_config = ConfigDict(extra="forbid", frozen=True)


class PrimitiveSpec(ParamguardBaseModel):
    """A primitive kind such as ``string`` or ``?integer``.

    Attributes:
        name: Primitive kind. Names outside PRIMITIVE_NAMES never accept.
        optional: Also accept an absent, empty or null value.
    """

    kind: Literal["primitive"] = "primitive"
    name: str
    optional: bool = False

    def __str__(self) -> str:
        return f"{OPTIONAL_MARKER if self.optional else ''}{self.name}"


class PatternSpec(ParamguardBaseModel):
    """A regular expression tested with search semantics.

    Anchoring is up to the declaration: ``ba[rz]`` matches ``barbarian``,
    ``^ba[rz]$`` does not.
    """

    kind: Literal["pattern"] = "pattern"
    pattern: re.Pattern[str]

    def __str__(self) -> str:
        return f"/{self.pattern.pattern}/"


MemberSpec = Annotated[Union[PrimitiveSpec, PatternSpec], Field(discriminator="kind")]


class AlternationSpec(ParamguardBaseModel):
    """Accepts when any of its options accepts, evaluated left to right."""

    kind: Literal["alternation"] = "alternation"
    options: tuple[MemberSpec, ...] = Field(min_length=1)

    def __str__(self) -> str:
        return " | ".join(str(option) for option in self.options)


TypeSpec = Annotated[
    Union[PrimitiveSpec, PatternSpec, AlternationSpec], Field(discriminator="kind")
]

_PARSED_TYPES = (PrimitiveSpec, PatternSpec, AlternationSpec)


def _parse_primitive(raw: str) -> PrimitiveSpec:
    optional = raw.startswith(OPTIONAL_MARKER)
    name = raw[len(OPTIONAL_MARKER) :] if optional else raw
    if not name:
        raise TypeSpecError(f"Empty type name in declaration {raw!r}")
    if name not in PRIMITIVE_NAMES:
        raise TypeSpecError(
            f"Unknown type {name!r}. Must be one of: {', '.join(sorted(PRIMITIVE_NAMES))}"
        )
    return PrimitiveSpec(name=name, optional=optional)


def _parse_pattern(raw: str | re.Pattern[str]) -> PatternSpec:
    if isinstance(raw, re.Pattern):
        if not isinstance(raw.pattern, str):
            raise TypeSpecError("Byte patterns are not supported")
        return PatternSpec(pattern=raw)
    try:
        return PatternSpec(pattern=re.compile(raw))
    except re.error as e:
        raise TypeSpecError(f"Invalid regular expression {raw!r}: {e}") from e


def _parse_member(raw: Any) -> PrimitiveSpec | PatternSpec:
    if isinstance(raw, (PrimitiveSpec, PatternSpec)):
        return raw
    if isinstance(raw, str):
        return _parse_primitive(raw)
    if isinstance(raw, re.Pattern):
        return _parse_pattern(raw)
    if isinstance(raw, Mapping):
        if set(raw) != {"pattern"} or not isinstance(raw["pattern"], str):
            raise TypeSpecError(f"Mapping declarations must be {{'pattern': <regex>}}, got {raw!r}")
        return _parse_pattern(raw["pattern"])
    if isinstance(raw, (list, tuple, AlternationSpec)):
        raise TypeSpecError("Alternations cannot be nested")
    raise TypeSpecError(f"Unsupported type declaration: {raw!r}")


def parse_type_spec(raw: Any) -> PrimitiveSpec | PatternSpec | AlternationSpec:
    """Normalize a raw declaration into a TypeSpec.

    Accepted forms:
        - ``"string"``, ``"?number"``: primitive, with optional marker
        - ``re.compile(...)`` or ``{"pattern": "..."}``: pattern
        - ``["array", "string"]``: alternation of the above
        - an already parsed spec, returned unchanged

    Raises:
        TypeSpecError: If the declaration is malformed
    """
    if isinstance(raw, _PARSED_TYPES):
        return raw
    if isinstance(raw, (list, tuple)):
        if not raw:
            raise TypeSpecError("An alternation needs at least one option")
        return AlternationSpec(options=tuple(_parse_member(option) for option in raw))
    return _parse_member(raw)


class ValidateOptions(ParamguardBaseModel):
    """Options for a field-set validation.

    Attributes:
        accept: Accepted media types for body-sourced input. When set, the
            body's declared content type must match before fields are checked.
    """

    accept: str | tuple[str, ...] | None = None


class FieldSet(ParamguardBaseModel):
    """The field name to TypeSpec declarations of one endpoint.

    ``fields`` is a read-only view; iterating a FieldSet yields field names in
    declaration order.
    """

    fields: dict[str, TypeSpec] = Field(default_factory=dict)

    @field_validator("fields", mode="after")
    @classmethod
    def _freeze_fields(cls, fields: dict[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(fields)

    @field_serializer("fields")
    def _dump_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        return dict(fields)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | FieldSet) -> FieldSet:
        """Build a FieldSet from raw declarations.

        Raises:
            TypeSpecError: If a declaration is malformed
        """
        if isinstance(raw, FieldSet):
            return raw
        fields: dict[str, PrimitiveSpec | PatternSpec | AlternationSpec] = {}
        for name, declaration in raw.items():
            if not isinstance(name, str):
                raise TypeSpecError(f"Field names must be strings, got {name!r}")
            try:
                fields[name] = parse_type_spec(declaration)
            except TypeSpecError as e:
                raise TypeSpecError(f"Invalid declaration for field '{name}': {e}") from e
        return cls(fields=fields)

    def names(self) -> list[str]:
        return list(self.fields)

    def items(self) -> Iterator[tuple[str, PrimitiveSpec | PatternSpec | AlternationSpec]]:
        return iter(self.fields.items())

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

