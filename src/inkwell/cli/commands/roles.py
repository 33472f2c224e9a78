"""Commands: inkwell resolve / audit - Inspect effective role permissions."""

from dataclasses import dataclass
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.cli.session import run_in_session
from inkwell.core.errors import AppException, ConflictError, IntegrityError
from inkwell.core.permissions.schemas import EffectiveGrantSet, RoleDefinition


console = Console()


def resolve(
    role_id: UUID = typer.Argument(..., help="Id of the role to resolve"),
) -> None:
    """Show the effective permissions of a role, with where each came from."""
    from inkwell.core.permissions.resolver import RoleResolver
    from inkwell.modules.rbac.repos import SQLAlchemyRBACRepository

    async def work(session: AsyncSession) -> tuple[RoleDefinition, EffectiveGrantSet]:
        resolver = RoleResolver(SQLAlchemyRBACRepository(session))
        role = await resolver.repo.fetch_role(role_id)
        effective = await resolver.resolve(role_id)
        return role, effective

    try:
        role, effective = run_in_session(work)
    except AppException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        for key, value in e.details.items():
            console.print(f"  [dim]{key}:[/dim] {value}")
        raise typer.Exit(1) from e

    if not effective.grants:
        console.print(f"[yellow]Role '{role.name}' grants no permissions.[/yellow]")
        return

    table = Table(title=f"Effective permissions of {role.name}", show_header=True)
    table.add_column("Permission", style="cyan", no_wrap=True)
    table.add_column("Resource", no_wrap=True)
    table.add_column("Conditions")
    table.add_column("Via", style="dim")

    for resolved in effective.grants:
        grant = resolved.grant
        resource = grant.resource_type.value
        if grant.resource_id:
            resource = f"{resource}:{grant.resource_id}"
        conditions = (
            grant.conditions.model_dump_json(exclude_defaults=True) if grant.conditions else ""
        )
        table.add_row(grant.permission, resource, conditions, " > ".join(resolved.chain))

    console.print()
    console.print(table)
    console.print()


@dataclass
class AuditProblem:
    role: RoleDefinition
    error: AppException


def audit() -> None:
    """Resolve every role and report the ones that cannot be resolved.

    Catches data that bypassed validation: dangling parents or
    permissions, inheritance cycles and conflicting grants. Exits with
    status 1 when a problem is found.
    """
    from inkwell.core.permissions.resolver import RoleResolver
    from inkwell.modules.rbac.repos import SQLAlchemyRBACRepository

    async def work(session: AsyncSession) -> tuple[int, list[AuditProblem]]:
        resolver = RoleResolver(SQLAlchemyRBACRepository(session))
        roles = await resolver.repo.list_roles()
        problems = []
        for role in roles:
            try:
                await resolver.resolve_role(role)
            except (IntegrityError, ConflictError) as e:
                problems.append(AuditProblem(role, e))
        return len(roles), problems

    try:
        checked, problems = run_in_session(work)
    except AppException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if not problems:
        console.print(f"[green]✓[/green] All {checked} roles resolve cleanly")
        return

    table = Table(title="Roles that fail to resolve", show_header=True)
    table.add_column("Role", style="cyan", no_wrap=True)
    table.add_column("Tenant", no_wrap=True)
    table.add_column("Error", style="red", no_wrap=True)
    table.add_column("Message")

    for problem in problems:
        table.add_row(
            problem.role.name,
            str(problem.role.tenant_id) if problem.role.tenant_id else "system",
            problem.error.error_code,
            problem.error.message,
        )

    console.print()
    console.print(table)
    console.print(f"\n[red]{len(problems)} of {checked} roles have problems.[/red]")
    raise typer.Exit(1)
