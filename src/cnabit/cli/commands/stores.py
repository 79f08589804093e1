"""Store balance commands."""

import click

from cnabit.cli.error_handling import CLI_ERRORS, handle_domain_error
from cnabit.cli.runtime import run_async
from cnabit.domain.balance import BalanceService
from cnabit.utils.amount_format import format_brl


@click.command("stores")
@click.pass_context
def list_stores(ctx):
    """List stores with their current balances."""

    async def _balances(db, storage):
        return await BalanceService(db).list_store_balances()

    try:
        balances = run_async(ctx, _balances)
    except CLI_ERRORS as e:
        handle_domain_error(ctx, e)

    if not balances:
        click.echo("No stores found.")
        return

    click.echo("\nStores:")
    click.echo("-" * 80)
    for entry in balances:
        click.echo(
            f"{entry.store.name:19s} | {entry.store.owner_name:14s} | "
            f"{entry.transaction_count:5d} txns | {format_brl(entry.balance):>16s}"
        )
    click.echo("-" * 80)
    total = sum(entry.balance for entry in balances)
    click.echo(f"{'Total':>57s} {format_brl(total):>16s}")


def register_commands(cli):
    """Register store commands with main CLI."""
    cli.add_command(list_stores)
