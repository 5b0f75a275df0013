import click

from paramguard.cli.utils import configure_logging, output_error, output_result
from paramguard.loaders import EndpointDefinition, load_field_sets_from_file


def _summarize(definition: EndpointDefinition) -> dict[str, object]:
    return {
        "endpoint": definition.name,
        "method": definition.method,
        "accept": definition.options.accept,
        "fields": {name: str(spec) for name, spec in definition.field_set.items()},
    }


def _format_summary(definitions: dict[str, EndpointDefinition]) -> list[str]:
    if not definitions:
        return [click.style("ℹ️  No endpoints defined", fg="blue")]
    lines = [f"{click.style('🔍 Definitions', fg='cyan', bold=True)} ({len(definitions)} endpoints)"]
    for definition in definitions.values():
        lines.append(
            f"  ✓ {definition.method} {definition.name}: "
            f"{len(definition.field_set)} fields"
        )
    return lines


@click.command(name="lint")
@click.argument("definitions", type=click.Path(exists=True, dir_okay=False))
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def lint(definitions: str, json_output: bool, debug: bool) -> None:
    """Load a definition file and report its endpoints.

    \b
    Examples:
        paramguard lint endpoints.yaml
        paramguard lint endpoints.json --json-output
    """
    configure_logging(debug)

    try:
        loaded = load_field_sets_from_file(definitions)
    except Exception as e:
        output_error(e, json_output, debug)
        return

    if json_output:
        output_result([_summarize(d) for d in loaded.values()], json_output)
    else:
        output_result(_format_summary(loaded))
