"""Main Inkwell CLI application."""

import typer
from rich.console import Console

from inkwell import __version__
from inkwell.cli.commands import init_db, roles, seed, serve, tenants, users


console = Console()

app = typer.Typer(
    name="inkwell",
    help="Operate an Inkwell deployment: seed, provision and inspect roles.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register commands
app.command(name="init-db")(init_db.init_db)
app.command(name="seed")(seed.seed)
app.command(name="provision-tenant")(tenants.provision_tenant)
app.command(name="bootstrap-admin")(users.bootstrap_admin)
app.command(name="assign-role")(users.assign_role)
app.command(name="resolve")(roles.resolve)
app.command(name="audit")(roles.audit)
app.command(name="serve")(serve.serve)


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """Inkwell CLI - Seed, provision and inspect roles."""
    if version:
        console.print(f"[bold cyan]inkwell[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
