"""paramguard - declarative validation of request parameters.

Callers declare, per field, which raw values are acceptable. The engine checks
a query mapping or a decoded body against those declarations and reports the
first violation as a structured error. It only accepts or rejects; values are
never converted.

## Declarations

- Primitive kinds: ``null``, ``array``, ``string``, ``boolean``, ``number``,
  ``integer``, ``object``
- Optional marker: ``?number`` also accepts an absent, empty or null value
- Patterns: ``re.compile(r"^ba[rz]$")`` (or ``{"pattern": "..."}`` in files)
- Alternation: ``["array", "string"]`` accepts if any option accepts

## Quick Examples

### Single values
```python
from paramguard import check_key, MISSING

check_key("1.5", "number")     # True
check_key("1.5", "integer")    # False
check_key(MISSING, "?number")  # True
```

### Middleware handlers
```python
from paramguard import validate_get, validate_post

handler = validate_post({"name": "string"}, {"accept": "json"})
handler(request, response, next)  # next() or next(ValidationError)
```

### FastAPI
```python
from fastapi import Depends, FastAPI
from paramguard.web import install_error_handler, validate_query

app = FastAPI()
install_error_handler(app)

@app.get("/search", dependencies=[Depends(validate_query({"q": "string"}))])
async def search(q: str) -> dict:
    return {"q": q}
```
"""

from .content_type import ContentTypeMatcher, media_type_matches
from .decorators import validate_params
from .errors import (
    E_BAD_CONTENT_TYPE,
    E_BAD_PARAM,
    TypeSpecError,
    ValidationError,
    fail_content_type,
    fail_key,
)
from .evaluator import MISSING, ValueKind, check_key, classify
from .loaders import EndpointDefinition, load_field_sets, load_field_sets_from_file
from .middleware import validate_get, validate_post
from .models import (
    AlternationSpec,
    FieldSet,
    PatternSpec,
    PrimitiveSpec,
    TypeSpec,
    ValidateOptions,
    parse_type_spec,
)
from .querystring import parse_query_string
from .validator import FieldSetValidator, validate_fields

__all__ = [
    # Declarations
    "TypeSpec",
    "PrimitiveSpec",
    "PatternSpec",
    "AlternationSpec",
    "FieldSet",
    "ValidateOptions",
    "parse_type_spec",
    # Evaluation
    "MISSING",
    "ValueKind",
    "classify",
    "check_key",
    # Validation
    "FieldSetValidator",
    "validate_fields",
    "validate_get",
    "validate_post",
    "validate_params",
    # Errors
    "ValidationError",
    "TypeSpecError",
    "E_BAD_PARAM",
    "E_BAD_CONTENT_TYPE",
    "fail_key",
    "fail_content_type",
    # Content types and decoding
    "ContentTypeMatcher",
    "media_type_matches",
    "parse_query_string",
    # Definition files
    "EndpointDefinition",
    "load_field_sets",
    "load_field_sets_from_file",
]
