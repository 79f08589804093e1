"""CLI error handling helpers."""

import click
from sqlalchemy.exc import SQLAlchemyError

from cnabit.domain.errors import DomainError, StorageError

# Errors a command reports as "Error: ..." instead of a traceback.
CLI_ERRORS = (DomainError, ValueError, StorageError, SQLAlchemyError)


def handle_domain_error(ctx: click.Context, error: Exception) -> None:
    """Render a domain or infrastructure error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
