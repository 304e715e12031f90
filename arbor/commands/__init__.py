"""
Command groups for the Arbor CLI.

Shared helpers turn the facade's OperationResult into CLI output or a
click.ClickException.
"""
from typing import Any

import click

from arbor.core import ArborCore
from arbor.result import ErrorKind, OperationResult

_ERROR_PREFIX = {
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.INVALID_OPERATION: "Operation Error",
    ErrorKind.VALIDATION_ERROR: "Validation Error",
    ErrorKind.PERSISTENCE_CONFLICT: "Conflict",
}


def get_core(ctx: click.Context) -> ArborCore:
    """Build the facade from the global --dir/--owner options."""
    settings = ctx.find_root().obj or {}
    return ArborCore(arbor_dir=settings.get("arbor_dir"), owner=settings.get("owner", "default"))


def unwrap(result: OperationResult) -> Any:
    """Return the result value or raise a ClickException describing the failure."""
    if result.ok:
        return result.value
    raise click.ClickException(f"{_ERROR_PREFIX[result.error]}: {result.detail}")
