"""File upload command."""

from pathlib import Path

import click

from cnabit.cli.commands.process import echo_processing_result
from cnabit.cli.error_handling import CLI_ERRORS, handle_domain_error
from cnabit.cli.runtime import run_async
from cnabit.domain.file_processing import FileProcessingService
from cnabit.domain.upload import FileUploadService


@click.command("upload")
@click.argument("cnab_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--uploaded-by", help="Name recorded as the uploader")
@click.option("--process", "process_now", is_flag=True, help="Process the file right after uploading")
@click.pass_context
def upload_file(ctx, cnab_file: str, uploaded_by: str | None, process_now: bool):
    """Upload a CNAB file for processing.

    Examples:
        cnabit upload CNAB.txt
        cnabit upload CNAB.txt --process
    """
    path = Path(cnab_file)
    content = path.read_bytes()

    async def _upload(db, storage):
        uploaded = await FileUploadService(db, storage).upload(path.name, content, uploaded_by=uploaded_by)
        processed = None
        if process_now:
            processed = await FileProcessingService(db, storage).process_file(uploaded.file_id)
        return uploaded, processed

    try:
        uploaded, processed = run_async(ctx, _upload)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    click.echo(f"Uploaded '{uploaded.file_name}' ({uploaded.file_size} bytes)")
    click.echo(f"  File ID: {uploaded.file_id}")
    click.echo(f"  Status: {uploaded.status.value}")

    if processed is not None:
        echo_processing_result(processed)
        if not processed.success:
            ctx.exit(1)


def register_commands(cli):
    """Register upload command with main CLI."""
    cli.add_command(upload_file)
