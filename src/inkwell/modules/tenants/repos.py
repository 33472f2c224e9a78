"""Tenant repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from inkwell.api.dependencies import DBSession
from inkwell.modules.tenants.models import Tenant


class TenantRepository:
    """Repository for Tenant database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, tenant: Tenant) -> Tenant:
        """Create a new tenant.

        Args:
            tenant: Tenant instance to create

        Returns:
            The created tenant with ID and timestamps populated
        """
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        return await self.session.get(Tenant, tenant_id)

    async def get_by_code(self, code: str) -> Tenant | None:
        result = await self.session.execute(select(Tenant).where(Tenant.code == code))
        return result.scalar_one_or_none()

    async def get_by_domain(self, domain: str) -> Tenant | None:
        result = await self.session.execute(select(Tenant).where(Tenant.domain == domain))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Tenant]:
        result = await self.session.execute(select(Tenant).order_by(Tenant.code))
        return list(result.scalars().all())

    async def update(self, tenant: Tenant) -> Tenant:
        """Flush changes made to a tenant and reload server-side values."""
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant


# Type alias for dependency injection
TenantRepo = Annotated[TenantRepository, Depends(TenantRepository)]
