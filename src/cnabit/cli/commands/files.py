"""File inspection commands."""

from uuid import UUID

import click

from cnabit.cli.error_handling import CLI_ERRORS, handle_domain_error
from cnabit.cli.runtime import run_async
from cnabit.domain.entities import FileStatus
from cnabit.domain.queries import FileQueryService


def _format_timestamp(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


@click.group()
def files_group():
    """Inspect uploaded files."""
    pass


@files_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in FileStatus], case_sensitive=False),
    help="Only files in this status",
)
@click.pass_context
def list_files(ctx, status: str | None):
    """List uploaded files, newest first."""
    status_filter = None
    if status:
        status_filter = next(s for s in FileStatus if s.value.lower() == status.lower())

    async def _list(db, storage):
        return await FileQueryService(db).list_files(status_filter)

    try:
        found = run_async(ctx, _list)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    if not found:
        click.echo("No files found.")
        return

    click.echo("\nFiles:")
    click.echo("-" * 100)
    for f in found:
        click.echo(
            f"{f.id} | {f.status.value:10s} | {_format_timestamp(f.uploaded_at)} | {f.file_name}"
        )


@files_group.command("show")
@click.argument("file_id", type=click.UUID)
@click.pass_context
def show_file(ctx, file_id: UUID):
    """Show details of one file."""

    async def _show(db, storage):
        file = await FileQueryService(db).get_file(file_id)
        count = await db.transactions.count_by_file_id(file_id)
        return file, count

    try:
        file, count = run_async(ctx, _show)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nFile ID: {file.id}")
    click.echo(f"  Name: {file.file_name}")
    click.echo(f"  Size: {file.file_size} bytes")
    click.echo(f"  Status: {file.status.value}")
    click.echo(f"  Uploaded: {_format_timestamp(file.uploaded_at)}")
    if file.uploaded_by:
        click.echo(f"  Uploaded by: {file.uploaded_by}")
    click.echo(f"  Processed: {_format_timestamp(file.processed_at)}")
    click.echo(f"  Transactions: {count}")
    if file.error_message:
        click.echo(f"  Error: {file.error_message}")


def register_commands(cli):
    """Register file commands with main CLI."""
    cli.add_command(files_group, name="files")
