"""Command: inkwell seed - Seed built-in permissions and system roles."""

import typer
from rich.console import Console
from rich.table import Table

from inkwell.cli.session import run_in_session
from inkwell.core.errors import AppException


console = Console()


def seed() -> None:
    """Seed the built-in permission catalog and system roles.

    Existing rows are left untouched, so the command is safe to re-run.
    """
    from inkwell.modules.rbac.seeding import seed_built_ins

    try:
        result = run_in_session(seed_built_ins)
    except AppException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    table = Table(title="Seeded", show_header=True)
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Added", style="green", justify="right")
    table.add_row("Permissions", str(result.permissions))
    table.add_row("System roles", str(result.system_roles))

    console.print()
    console.print(table)
    console.print()
