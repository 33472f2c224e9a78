"""Command: inkwell init-db - Create tables directly from the models."""

import typer
from rich.console import Console

from inkwell.cli.session import run_with_database
from inkwell.core.database import Database


console = Console()


async def _create_all(database: Database) -> None:
    from inkwell.models import metadata

    async with database.engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


def init_db() -> None:
    """Create all tables without running migrations.

    Intended for local development and throwaway databases; use
    'alembic upgrade head' for anything that must be migrated later.
    """
    try:
        run_with_database(_create_all)
    except Exception as e:
        console.print(f"[red]Error:[/red] Could not create tables: {e}")
        raise typer.Exit(1) from e
    console.print("[green]✓[/green] Tables created")
