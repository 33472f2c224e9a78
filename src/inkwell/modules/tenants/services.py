"""Tenant service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from inkwell.core.errors import ConflictError, NotFoundError
from inkwell.core.permissions.roles import RoleStore
from inkwell.modules.rbac.services import Roles
from inkwell.modules.tenants.models import Tenant
from inkwell.modules.tenants.repos import TenantRepo, TenantRepository
from inkwell.modules.tenants.schemas import TenantCreate, TenantUpdate


logger = structlog.get_logger()


class TenantService:
    """Service for tenant lifecycle operations.

    Every new tenant is provisioned with the built-in tenant roles in
    the same transaction.
    """

    def __init__(self, repo: TenantRepo, roles: Roles) -> None:
        self.repo: TenantRepository = repo
        self.roles: RoleStore = roles

    async def create_tenant(self, data: TenantCreate) -> Tenant:
        """Create a tenant and its built-in roles.

        Raises:
            ConflictError: If the code or domain is already used
        """
        if await self.repo.get_by_code(data.code):
            raise ConflictError(
                "Tenant code already exists",
                error_code="tenant_code_exists",
                details={"code": data.code},
            )
        if data.domain and await self.repo.get_by_domain(data.domain):
            raise ConflictError(
                "Tenant domain already exists",
                error_code="tenant_domain_exists",
                details={"domain": data.domain},
            )

        tenant = await self.repo.create(Tenant(**data.model_dump()))
        await self.roles.provision_tenant_roles(tenant.id)

        logger.info("tenant_created", tenant_id=str(tenant.id), code=tenant.code)
        return tenant

    async def get_tenant(self, tenant_id: UUID) -> Tenant:
        """Get a tenant by ID.

        Raises:
            NotFoundError: If tenant not found
        """
        tenant = await self.repo.get_by_id(tenant_id)
        if not tenant:
            raise NotFoundError(
                "Tenant not found",
                resource="tenant",
                resource_id=tenant_id,
            )
        return tenant

    async def update_tenant(self, tenant_id: UUID, data: TenantUpdate) -> Tenant:
        """Update tenant settings."""
        tenant = await self.get_tenant(tenant_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(tenant, field, value)
        return await self.repo.update(tenant)

    async def provision_roles(self, tenant_id: UUID) -> int:
        """Create any missing built-in roles of an existing tenant.

        Returns:
            Number of roles created
        """
        tenant = await self.get_tenant(tenant_id)
        created = await self.roles.provision_tenant_roles(tenant.id)
        return len(created)

    async def deactivate_tenant(self, tenant_id: UUID) -> Tenant:
        """Deactivate a tenant. Its roles stop granting anything."""
        tenant = await self.get_tenant(tenant_id)
        tenant.is_active = False
        tenant = await self.repo.update(tenant)
        logger.info("tenant_deactivated", tenant_id=str(tenant_id))
        return tenant

    async def activate_tenant(self, tenant_id: UUID) -> Tenant:
        """Reactivate a tenant."""
        tenant = await self.get_tenant(tenant_id)
        tenant.is_active = True
        tenant = await self.repo.update(tenant)
        logger.info("tenant_activated", tenant_id=str(tenant_id))
        return tenant


# Type alias for dependency injection
TenantSvc = Annotated[TenantService, Depends(TenantService)]
