"""Validation decorator for plain functions."""

import inspect
from collections.abc import Callable, Mapping
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

from .loaders import load_field_sets_from_file
from .models import FieldSet, ValidateOptions
from .validator import FieldSetValidator

F = TypeVar("F", bound=Callable[..., Any])


class validate_params:
    """Validate a function's arguments before it runs.

    Arguments are matched to declarations by parameter name. Declared
    parameters the caller did not pass, and that have no default, count as
    absent. Defaults are validated like passed values.

    Examples:
        @validate_params({"q": "string", "page": "?integer"})
        def search(q, page=None):
            ...

        @validate_params.from_file("endpoints.yaml", "search")
        async def search(q, page=None):
            ...

    Raises:
        ValidationError: From the wrapped function, if an argument is rejected
    """

    def __init__(
        self,
        fields: Mapping[str, Any] | FieldSet,
        options: ValidateOptions | None = None,
    ):
        self.validator = FieldSetValidator(FieldSet.from_dict(fields), options)

    def __call__(self, func: F) -> F:
        sig = inspect.signature(func)

        def params_of(args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
            bound = sig.bind_partial(*args, **kwargs)
            bound.apply_defaults()
            params = dict(bound.arguments)
            for name, parameter in sig.parameters.items():
                if parameter.kind == inspect.Parameter.VAR_KEYWORD:
                    params.update(params.pop(name, {}))
            return params

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                self.validator.check(params_of(args, kwargs))
                return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            self.validator.check(params_of(args, kwargs))
            return func(*args, **kwargs)

        return sync_wrapper  # type: ignore[return-value]

    @classmethod
    def from_file(cls, path: str | Path, endpoint: str) -> "validate_params":
        """Create the decorator from one endpoint of a definition file.

        Raises:
            KeyError: If the endpoint is not defined in the file
        """
        definitions = load_field_sets_from_file(path)
        if endpoint not in definitions:
            raise KeyError(f"Endpoint '{endpoint}' not found in {path}")
        definition = definitions[endpoint]
        return cls(definition.field_set, definition.options)

