"""User repository for role assignment storage."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from inkwell.api.dependencies import DBSession
from inkwell.core.permissions.schemas import UserAssignments
from inkwell.modules.users.models import User, UserCustomRole, UserTenantRole


class UserRepository:
    """Repository for User database operations.

    Role links are loaded with the user, so assignments are read in
    one round trip per relationship.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user, attribute_names=["tenant_roles", "custom_roles"])
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_assignments(self, user_id: UUID) -> UserAssignments | None:
        """Get the role assignments of a user.

        Args:
            user_id: The user's UUID

        Returns:
            Assignments if the user exists, None otherwise
        """
        # Role links may have been removed by database cascades
        stmt = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        user = (await self.session.execute(stmt)).scalar_one_or_none()
        if user is None:
            return None
        return UserAssignments(
            user_id=user.id,
            system_role_id=user.system_role_id,
            tenant_roles={link.tenant_id: link.role_id for link in user.tenant_roles},
            custom_role_ids=[link.role_id for link in user.custom_roles],
        )

    async def set_system_role(self, user: User, role_id: UUID | None) -> User:
        user.system_role_id = role_id
        await self.session.flush()
        return user

    async def set_tenant_role(self, user: User, tenant_id: UUID, role_id: UUID) -> User:
        """Assign the user's role in a tenant, replacing any previous one."""
        for link in user.tenant_roles:
            if link.tenant_id == tenant_id:
                link.role_id = role_id
                break
        else:
            user.tenant_roles.append(
                UserTenantRole(user_id=user.id, tenant_id=tenant_id, role_id=role_id)
            )
        await self.session.flush()
        return user

    async def add_custom_role(self, user: User, role_id: UUID) -> User:
        if all(link.role_id != role_id for link in user.custom_roles):
            user.custom_roles.append(UserCustomRole(user_id=user.id, role_id=role_id))
            await self.session.flush()
        return user


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
