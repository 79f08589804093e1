"""Transaction listing commands."""

from uuid import UUID

import click

from cnabit.cli.date_filters import resolve_cli_date_range
from cnabit.cli.error_handling import CLI_ERRORS, handle_domain_error
from cnabit.cli.runtime import run_async
from cnabit.domain.queries import TransactionQueryService
from cnabit.utils.amount_format import format_brl


@click.command("transactions")
@click.option("--store", "store_id", type=click.UUID, help="Store ID")
@click.option("--file", "file_id", type=click.UUID, help="File ID")
@click.option("--start-date", help="Start date (YYYY-MM-DD, DD/MM/YYYY, 'last month', ...)")
@click.option("--end-date", help="End date (YYYY-MM-DD, DD/MM/YYYY, 'today', ...)")
@click.option("--type", "type_code", type=click.Choice([str(code) for code in range(1, 10)]), help="Type code")
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of transactions")
@click.pass_context
def list_transactions(
    ctx,
    store_id: UUID | None,
    file_id: UUID | None,
    start_date: str | None,
    end_date: str | None,
    type_code: str | None,
    limit: int | None,
):
    """List transactions with optional filters."""
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)

    async def _list(db, storage):
        service = TransactionQueryService(db)
        found = await service.list_transactions(
            store_id=store_id,
            file_id=file_id,
            start_date=start,
            end_date=end,
            type_code=type_code,
            limit=limit,
        )
        stores = {s.id: s.name for s in await db.stores.list_stores()}
        types = {t.type_code: t for t in await service.list_transaction_types()}
        return found, stores, types

    try:
        found, stores, types = run_async(ctx, _list)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    if not found:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(found)} transaction(s):")
    click.echo("-" * 100)
    for txn in found:
        txn_type = types.get(txn.type_code)
        signed = txn.amount * txn_type.sign_multiplier if txn_type else txn.amount
        description = txn_type.description if txn_type else txn.type_code
        click.echo(
            f"{txn.id:6d} | {txn.transaction_date} {txn.transaction_time} | "
            f"{description:12s} | {format_brl(signed):>14s} | "
            f"{stores.get(txn.store_id, 'Unknown'):19s} | {txn.card}"
        )


@click.command("types")
@click.pass_context
def list_types(ctx):
    """List transaction types and their signs."""

    async def _types(db, storage):
        return await TransactionQueryService(db).list_transaction_types()

    try:
        types = run_async(ctx, _types)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    click.echo("\nTransaction types:")
    click.echo("-" * 50)
    for t in types:
        click.echo(f"{t.type_code} | {t.description:12s} | {t.nature:8s} | {t.sign}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(list_transactions)
    cli.add_command(list_types)
