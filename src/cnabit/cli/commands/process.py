"""File processing commands."""

from uuid import UUID

import click

from cnabit.cli.error_handling import CLI_ERRORS, handle_domain_error
from cnabit.cli.runtime import run_async
from cnabit.domain.file_processing import FileProcessingService, ProcessingResult
from cnabit.worker import FileProcessingWorker


def echo_processing_result(result: ProcessingResult) -> None:
    """Print the outcome of processing one file."""
    status = result.status.value if result.status else "-"
    if result.success:
        if result.already_processed:
            click.echo(
                f"File {result.file_id} already processed "
                f"({result.transactions_inserted} transactions, status {status})"
            )
        else:
            click.echo(f"Processed file {result.file_id}:")
            click.echo(f"  Stores: {result.stores_upserted}")
            click.echo(f"  Transactions: {result.transactions_inserted}")
            click.echo(f"  Status: {status}")
        return

    click.echo(f"File {result.file_id} not processed ({result.failure.value}): {result.error_message}", err=True)
    for error in result.errors:
        click.echo(f"    {error}", err=True)


@click.command("process")
@click.argument("file_id", type=click.UUID)
@click.pass_context
def process_file(ctx, file_id: UUID):
    """Process an uploaded file by ID."""

    async def _process(db, storage):
        return await FileProcessingService(db, storage).process_file(file_id)

    try:
        result = run_async(ctx, _process)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    echo_processing_result(result)
    if not result.success:
        ctx.exit(1)


@click.command("process-pending")
@click.pass_context
def process_pending(ctx):
    """Process every file still in Uploaded or Processing state."""

    async def _process_pending(db, storage):
        return await FileProcessingWorker(db, storage).process_pending()

    try:
        report = run_async(ctx, _process_pending)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    if report.total == 0:
        click.echo("No pending files.")
        return

    click.echo("\nProcessing complete:")
    click.echo(f"  Processed: {report.processed}")
    click.echo(f"  Rejected: {report.rejected}")
    click.echo(f"  Failed: {report.failed}")
    for result in report.results:
        if not result.success:
            click.echo(f"    {result.file_id}: {result.error_message}", err=True)
    if report.failed:
        ctx.exit(1)


def register_commands(cli):
    """Register processing commands with main CLI."""
    cli.add_command(process_file)
    cli.add_command(process_pending)
