"""Command: inkwell provision-tenant - Create a tenant with its built-in roles."""

from dataclasses import dataclass

import typer
from pydantic import ValidationError
from rich.console import Console
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.cli.session import run_in_session
from inkwell.core.errors import AppException


console = Console()


@dataclass
class ProvisionResult:
    tenant_id: str
    code: str
    created: bool
    roles_added: int


def provision_tenant(
    code: str = typer.Argument(..., help="Unique tenant code (e.g. 'daily-planet')"),
    name: str = typer.Argument(..., help="Display name of the tenant"),
    domain: str | None = typer.Option(None, "--domain", "-d", help="Custom domain"),
    email: str | None = typer.Option(None, "--email", "-e", help="Contact email"),
) -> None:
    """Create a tenant, or add missing built-in roles to an existing one.

    Built-in permissions are seeded first, so this works on a fresh
    database.
    """
    from inkwell.core.permissions.roles import RoleStore
    from inkwell.modules.rbac.repos import SQLAlchemyRBACRepository
    from inkwell.modules.rbac.seeding import seed_built_ins
    from inkwell.modules.tenants.repos import TenantRepository
    from inkwell.modules.tenants.schemas import TenantCreate
    from inkwell.modules.tenants.services import TenantService

    try:
        data = TenantCreate(code=code, name=name, domain=domain, contact_email=email)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid tenant: {e.errors()[0]['msg']}")
        raise typer.Exit(1) from e

    async def work(session: AsyncSession) -> ProvisionResult:
        await seed_built_ins(session)
        service = TenantService(
            TenantRepository(session), RoleStore(SQLAlchemyRBACRepository(session))
        )

        existing = await service.repo.get_by_code(data.code)
        if existing:
            added = await service.provision_roles(existing.id)
            return ProvisionResult(str(existing.id), existing.code, False, added)

        tenant = await service.create_tenant(data)
        roles = await service.roles.list_roles(tenant.id)
        return ProvisionResult(str(tenant.id), tenant.code, True, len(roles))

    try:
        result = run_in_session(work)
    except AppException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if result.created:
        console.print(
            f"[green]✓[/green] Created tenant [cyan]{result.code}[/cyan] ({result.tenant_id})"
        )
    else:
        console.print(
            f"[yellow]Tenant already exists:[/yellow] {result.code} ({result.tenant_id})"
        )
    console.print(f"  Built-in roles added: {result.roles_added}")
