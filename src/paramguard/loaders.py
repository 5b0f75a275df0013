"""Loading field-set definitions from YAML or JSON documents.

A definition document declares the fields of one or more endpoints:

```yaml
version: 1
endpoints:
  search:
    method: GET
    fields:
      q: string
      page: "?integer"
      tags: [array, string]
  upload:
    method: POST
    accept: [json, urlencoded]
    fields:
      name: string
      sort:
        pattern: "^(asc|desc)$"
```
"""

import json
import logging
from pathlib import Path
from typing import Any, Literal

import jsonschema
import yaml
from pydantic import Field

from .errors import TypeSpecError
from .models import FieldSet, ParamguardBaseModel, ValidateOptions

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schemas" / "field-sets-1.json"


class EndpointDefinition(ParamguardBaseModel):
    """One endpoint's declarations as read from a definition document."""

    name: str
    method: Literal["GET", "POST"] = "GET"
    description: str | None = None
    options: ValidateOptions = Field(default_factory=ValidateOptions)
    field_set: FieldSet


def load_document(content: str, format: str = "yaml") -> dict[str, Any]:
    """Parse a definition document from string content.

    Args:
        content: Document content
        format: Format of the content ('yaml' or 'json')

    Raises:
        ValueError: If format is not supported or parsing fails
    """
    if format == "yaml":
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML: {e}") from e
    elif format == "json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse JSON: {e}") from e
    else:
        raise ValueError(f"Unsupported format: {format}. Use 'yaml' or 'json'")
    return data if data is not None else {}


def validate_document_structure(document: Any) -> None:
    """Validate that a document has the expected structure using JSON Schema.

    Raises:
        ValueError: If the structure is invalid
    """
    with open(SCHEMA_PATH, encoding="utf-8") as f:
        schema = json.load(f)

    try:
        jsonschema.validate(instance=document, schema=schema)
    except jsonschema.ValidationError as e:
        if e.absolute_path:
            path = ".".join(str(p) for p in e.absolute_path)
            raise ValueError(f"Definition error at '{path}': {e.message}") from e
        raise ValueError(f"Definition error: {e.message}") from e


def load_field_sets(content: str, format: str = "yaml") -> dict[str, EndpointDefinition]:
    """Load endpoint definitions from string content.

    Returns:
        Endpoint definitions keyed by endpoint name, in document order

    Raises:
        ValueError: If the document is malformed or a declaration is invalid
    """
    document = load_document(content, format=format)
    validate_document_structure(document)

    definitions: dict[str, EndpointDefinition] = {}
    for name, endpoint in document["endpoints"].items():
        try:
            field_set = FieldSet.from_dict(endpoint["fields"])
        except TypeSpecError as e:
            raise ValueError(f"Endpoint '{name}': {e}") from e
        method = endpoint.get("method", "GET")
        if method == "GET" and "accept" in endpoint:
            logger.warning(f"Endpoint '{name}': 'accept' has no effect on GET endpoints")
        definitions[name] = EndpointDefinition(
            name=name,
            method=method,
            description=endpoint.get("description"),
            options=ValidateOptions(accept=endpoint.get("accept")),
            field_set=field_set,
        )
    return definitions


def load_field_sets_from_file(path: str | Path) -> dict[str, EndpointDefinition]:
    """Load endpoint definitions from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the extension is not supported or loading fails
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Definition file not found: {path}")

    if path.suffix.lower() in [".yaml", ".yml"]:
        format = "yaml"
    elif path.suffix.lower() == ".json":
        format = "json"
    else:
        raise ValueError(f"Unsupported file extension: {path.suffix}. Use .yaml, .yml, or .json")

    return load_field_sets(path.read_text(encoding="utf-8"), format=format)
