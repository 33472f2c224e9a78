"""Commands: inkwell bootstrap-admin / assign-role - Manage user role assignments."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.cli.session import run_in_session
from inkwell.core.errors import AppException, NotFoundError
from inkwell.core.permissions.enums import RoleType, SystemRole


if TYPE_CHECKING:
    from inkwell.modules.users.services import UserService


T = TypeVar("T")


console = Console()


def bootstrap_admin(
    username: str = typer.Argument(..., help="Username of the administrator"),
    display_name: str | None = typer.Option(
        None, "--display-name", "-n", help="Display name (defaults to the username)"
    ),
    role: SystemRole = typer.Option(
        SystemRole.SUPER_ADMIN, "--role", "-r", help="System role to assign"
    ),
) -> None:
    """Create a user, if needed, and give them a built-in system role.

    This is how the first administrator gets access to the API.
    """
    from inkwell.core.permissions.catalog import built_in_role_id
    from inkwell.modules.rbac.seeding import seed_built_ins
    from inkwell.modules.users.schemas import UserCreate

    try:
        data = UserCreate(username=username, display_name=display_name or username)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid user: {e.errors()[0]['msg']}")
        raise typer.Exit(1) from e

    async def work(session: AsyncSession) -> str:
        await seed_built_ins(session)
        service = _user_service(session)

        user = await service.repo.get_by_username(data.username)
        if user is None:
            user = await service.create_user(data)
        await service.assign_system_role(user.id, built_in_role_id(role.value))
        return str(user.id)

    user_id = _run(work)
    console.print(
        f"[green]✓[/green] [cyan]{data.username}[/cyan] ({user_id}) is now {role.value}"
    )


def assign_role(
    username: str = typer.Argument(..., help="Username to assign the role to"),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant code"),
    role: str = typer.Option(..., "--role", "-r", help="Tenant or custom role name"),
) -> None:
    """Assign a tenant role, or add a custom role, within one tenant."""

    async def work(session: AsyncSession) -> RoleType:
        from inkwell.modules.tenants.repos import TenantRepository

        service = _user_service(session)
        user = await service.repo.get_by_username(username)
        if user is None:
            raise NotFoundError("User not found", resource="user", resource_id=username)
        found = await TenantRepository(session).get_by_code(tenant)
        if found is None:
            raise NotFoundError("Tenant not found", resource="tenant", resource_id=tenant)
        definition = await service.roles.repo.fetch_role_by_name(role, found.id)
        if definition is None:
            raise NotFoundError("Role not found", resource="role", resource_id=role)

        if definition.type == RoleType.CUSTOM:
            await service.add_custom_role(user.id, definition.id)
        else:
            await service.assign_tenant_role(user.id, found.id, definition.id)
        return definition.type

    role_type = _run(work)
    console.print(
        f"[green]✓[/green] Assigned {role_type.value} role [cyan]{role}[/cyan] "
        f"to {username} in {tenant}"
    )


def _user_service(session: AsyncSession) -> "UserService":
    from inkwell.core.permissions.roles import RoleStore
    from inkwell.modules.rbac.repos import SQLAlchemyRBACRepository
    from inkwell.modules.users.repos import UserRepository
    from inkwell.modules.users.services import UserService

    return UserService(UserRepository(session), RoleStore(SQLAlchemyRBACRepository(session)))


def _run(work: Callable[[AsyncSession], Awaitable[T]]) -> T:
    try:
        return run_in_session(work)
    except AppException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e
