"""Bridge between synchronous click commands and the async services."""

import asyncio
from typing import Any, Awaitable, Callable

import click

from cnabit.database.base import Database
from cnabit.storage.base import FileStorage


def run_async(ctx: click.Context, operation: Callable[[Database, FileStorage], Awaitable[Any]]) -> Any:
    """Run operation(db, storage) on a fresh event loop.

    The database is connected and its schema ensured before the operation and
    disconnected afterwards, whatever the outcome.
    """
    db: Database = ctx.obj["db"]
    storage: FileStorage = ctx.obj["storage"]

    async def _main() -> Any:
        await db.connect()
        try:
            await db.initialize_schema()
            return await operation(db, storage)
        finally:
            await db.disconnect()

    return asyncio.run(_main())
