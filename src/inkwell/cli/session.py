"""Run async database work from synchronous CLI commands."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.config import get_settings
from inkwell.core.database import Database


T = TypeVar("T")


async def _run(url: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
    database = Database(url)
    await database.connect()
    try:
        async with database.session() as session:
            try:
                result = await work(session)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            return result
    finally:
        await database.disconnect()


def run_in_session(work: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run ``work`` in one committed transaction against the configured database."""
    return asyncio.run(_run(get_settings().async_database_url, work))


def run_with_database(work: Callable[[Database], Awaitable[T]]) -> T:
    """Run ``work`` with a connected database handle."""

    async def runner() -> T:
        database = Database(get_settings().async_database_url)
        await database.connect()
        try:
            return await work(database)
        finally:
            await database.disconnect()

    return asyncio.run(runner())
