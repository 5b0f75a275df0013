import json
import logging
import os
import traceback
from typing import Any

import click

DEBUG_ENV_VAR = "PARAMGUARD_DEBUG"

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def get_env_flag(env_var: str, default: bool = False) -> bool:
    """Read a boolean flag ("1", "true" or "yes", any case) from the environment."""
    value = os.environ.get(env_var)
    if not value:
        return default
    return value.strip().lower() in ("1", "true", "yes")


def configure_logging(debug: bool = False, log_level: str | None = None) -> None:
    """Send paramguard's log records to stderr.

    Args:
        debug: Log at DEBUG level. Also enabled by PARAMGUARD_DEBUG.
        log_level: Level name used when debug is off (default WARNING)
    """
    if debug or get_env_flag(DEBUG_ENV_VAR):
        level = logging.DEBUG
    else:
        level = getattr(logging, (log_level or "WARNING").upper(), logging.WARNING)

    root_logger = logging.getLogger()
    # One handler only, repeated invocations must not duplicate output
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(stream_handler)
    root_logger.setLevel(level)
    logging.getLogger("paramguard").setLevel(level)


def format_error(error: Exception, debug: bool = False) -> dict[str, Any]:
    """Describe an exception for output, with type and traceback in debug mode."""
    info: dict[str, Any] = {"error": str(error)}
    if debug:
        info["type"] = type(error).__name__
        info["traceback"] = traceback.format_exc()
    return info


def output_result(result: Any, json_output: bool = False) -> None:
    """Print a command result, wrapped as {"status": "ok", "result": ...} in JSON mode.

    Human-readable results may be a single line or a list of lines.
    """
    if json_output:
        click.echo(json.dumps({"status": "ok", "result": result}, indent=2, default=str))
        return
    lines = result if isinstance(result, list) else [result]
    for line in lines:
        click.echo(line)


def output_error(error: Exception, json_output: bool = False, debug: bool = False) -> None:
    """Print an error and abort the command.

    Raises:
        click.Abort: Always
    """
    info = format_error(error, debug)
    if json_output:
        click.echo(json.dumps({"status": "error", **info}, indent=2))
    else:
        click.echo(f"{click.style('Error:', fg='red')} {info['error']}", err=True)
        if debug:
            click.echo(f"\nTraceback:\n{info['traceback']}", err=True)
    raise click.Abort()
