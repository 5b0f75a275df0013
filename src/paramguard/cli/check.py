import json
from typing import Any

import click

from paramguard.cli.utils import configure_logging, output_error, output_result
from paramguard.errors import ValidationError
from paramguard.loaders import EndpointDefinition, load_field_sets_from_file
from paramguard.querystring import parse_query_string
from paramguard.validator import FieldSetValidator


def _read_body(
    query: str | None, body: str | None, body_file: str | None
) -> tuple[dict[str, Any], str]:
    if body is not None and body_file is not None:
        raise click.UsageError("--body and --body-file are mutually exclusive")
    if body_file is not None:
        with open(body_file, encoding="utf-8") as f:
            body = f.read()
    if body is not None:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"Invalid JSON body: {e}") from e
        if not isinstance(data, dict):
            raise click.BadParameter("JSON body must be an object")
        return data, "application/json"
    return parse_query_string(query or ""), "application/x-www-form-urlencoded"


def _format_result(endpoint: str, error: ValidationError | None) -> str:
    if error is None:
        return f"{click.style('✅ Accepted', fg='green', bold=True)} {endpoint}"
    where = f" (parameter '{error.key}')" if error.key is not None else ""
    return (
        f"{click.style('❌ Rejected', fg='red', bold=True)} {endpoint}{where}\n"
        f"{click.style('Error:', fg='red')} {error.code} {error.status}: {error.message}"
    )


def run_check(
    definition: EndpointDefinition,
    query: str | None,
    body: str | None = None,
    body_file: str | None = None,
    content_type: str | None = None,
) -> ValidationError | None:
    validator = FieldSetValidator(definition.field_set, definition.options)
    if definition.method == "GET":
        return validator.validate_query(parse_query_string(query or ""))
    data, inferred = _read_body(query, body, body_file)
    return validator.validate_body(data, content_type or inferred)


@click.command(name="check")
@click.argument("definitions", type=click.Path(exists=True, dir_okay=False))
@click.argument("endpoint")
@click.argument("query", required=False)
@click.option("--body", help="JSON request body (POST endpoints)")
@click.option(
    "--body-file", type=click.Path(exists=True, dir_okay=False), help="File holding a JSON body"
)
@click.option("--content-type", help="Declared content type of the body")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
@click.pass_context
def check(
    ctx: click.Context,
    definitions: str,
    endpoint: str,
    query: str | None,
    body: str | None,
    body_file: str | None,
    content_type: str | None,
    json_output: bool,
    debug: bool,
) -> None:
    """Check a query string or body against an endpoint's declarations.

    GET endpoints validate QUERY. POST endpoints validate --body/--body-file
    as JSON, or QUERY as an urlencoded form body.

    \b
    Examples:
        paramguard check endpoints.yaml search 'q=cats&page=2'
        paramguard check endpoints.yaml upload --body '{"name": "x"}'
        paramguard check endpoints.yaml upload 'name=x' --content-type text/plain
    """
    configure_logging(debug)

    try:
        loaded = load_field_sets_from_file(definitions)
        if endpoint not in loaded:
            raise click.BadParameter(f"Endpoint '{endpoint}' not found in {definitions}")
        error = run_check(loaded[endpoint], query, body, body_file, content_type)
    except click.UsageError:
        raise
    except Exception as e:
        output_error(e, json_output, debug)
        return

    if json_output:
        output_result(
            {
                "endpoint": endpoint,
                "valid": error is None,
                "error": error.to_dict() if error is not None else None,
            },
            json_output,
        )
    else:
        output_result(_format_result(endpoint, error))

    if error is not None:
        ctx.exit(1)
