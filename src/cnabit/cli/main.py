"""Main CLI entry point."""

import logging
from pathlib import Path

import click

from cnabit.database.factories import create_sqlite_database
from cnabit.storage import LocalFileStorage, S3FileStorage

# Import and register all commands at module level
from cnabit.cli.commands import files, process, stores, transactions, upload

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CNABIT_DB_PATH environment variable)",
    envvar="CNABIT_DB_PATH",
)
@click.option(
    "--storage-dir",
    type=click.Path(file_okay=False),
    help="Directory holding uploaded files (defaults to ~/.cnabit/files)",
    envvar="CNABIT_STORAGE_DIR",
)
@click.option("--s3-bucket", help="Store uploaded files in this S3 bucket", envvar="CNABIT_S3_BUCKET")
@click.option("--s3-endpoint-url", help="Custom S3 endpoint (e.g. LocalStack)", envvar="CNABIT_S3_ENDPOINT_URL")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="CNABIT_LOG_LEVEL",
)
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    storage_dir: str | None,
    s3_bucket: str | None,
    s3_endpoint_url: str | None,
    log_level: str,
):
    """Cnabit - CNAB settlement file processing.

    Upload fixed-width CNAB files, process them into stores and
    transactions, and inspect the resulting store balances.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=getattr(logging, log_level.upper()), format=LOG_FORMAT)

    # Build collaborators only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        ctx.obj["db"] = create_sqlite_database(database_path=db_path)
        if s3_bucket:
            ctx.obj["storage"] = S3FileStorage(s3_bucket, endpoint_url=s3_endpoint_url)
        else:
            root = Path(storage_dir) if storage_dir else Path.home() / ".cnabit" / "files"
            ctx.obj["storage"] = LocalFileStorage(root)


# Register all commands
upload.register_commands(cli)
process.register_commands(cli)
files.register_commands(cli)
stores.register_commands(cli)
transactions.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
