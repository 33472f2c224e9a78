"""User service for role assignment logic."""

from uuid import UUID

import structlog

from inkwell.core.errors import ConflictError, NotFoundError, ValidationError
from inkwell.core.permissions.enums import RoleType
from inkwell.core.permissions.roles import RoleStore
from inkwell.modules.users.models import User
from inkwell.modules.users.repos import UserRepository
from inkwell.modules.users.schemas import UserCreate


logger = structlog.get_logger()


class UserService:
    """Service for user management operations.

    Assignments are checked against the role's type and tenant so that
    the permission checker only ever sees consistent data.
    """

    def __init__(self, repo: UserRepository, roles: RoleStore) -> None:
        self.repo = repo
        self.roles = roles

    async def create_user(self, data: UserCreate) -> User:
        """Create a new user.

        Raises:
            ConflictError: If the username is taken
        """
        existing = await self.repo.get_by_username(data.username)
        if existing:
            raise ConflictError(
                "Username already taken",
                error_code="username_exists",
                details={"username": data.username},
            )

        user = await self.repo.create(
            User(username=data.username, display_name=data.display_name)
        )
        logger.info("user_created", user_id=str(user.id), username=user.username)
        return user

    async def get_user(self, user_id: UUID) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If user not found
        """
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(
                "User not found",
                resource="user",
                resource_id=user_id,
            )
        return user

    async def assign_system_role(self, user_id: UUID, role_id: UUID | None) -> User:
        """Set or clear the user's system role.

        Raises:
            ValidationError: If the role is not a system role
        """
        user = await self.get_user(user_id)
        if role_id is not None:
            role = await self.roles.get_role(role_id)
            if role.type != RoleType.SYSTEM:
                raise ValidationError(
                    "Only system roles can be assigned as a system role",
                    error_code="invalid_role_assignment",
                    details={"role_id": str(role_id), "type": role.type.value},
                )

        user = await self.repo.set_system_role(user, role_id)
        logger.info(
            "system_role_assigned",
            user_id=str(user_id),
            role_id=str(role_id) if role_id else None,
        )
        return user

    async def assign_tenant_role(self, user_id: UUID, tenant_id: UUID, role_id: UUID) -> User:
        """Set the user's role in a tenant.

        Raises:
            ValidationError: If the role is not a tenant role of that tenant
        """
        user = await self.get_user(user_id)
        role = await self.roles.get_role(role_id)
        if role.type != RoleType.TENANT or role.tenant_id != tenant_id:
            raise ValidationError(
                "Role is not a tenant role of this tenant",
                error_code="invalid_role_assignment",
                details={"role_id": str(role_id), "tenant_id": str(tenant_id)},
            )

        user = await self.repo.set_tenant_role(user, tenant_id, role_id)
        logger.info(
            "tenant_role_assigned",
            user_id=str(user_id),
            tenant_id=str(tenant_id),
            role_id=str(role_id),
        )
        return user

    async def add_custom_role(self, user_id: UUID, role_id: UUID) -> User:
        """Grant the user a custom role.

        Raises:
            ValidationError: If the role is not a custom role
        """
        user = await self.get_user(user_id)
        role = await self.roles.get_role(role_id)
        if role.type != RoleType.CUSTOM:
            raise ValidationError(
                "Only custom roles can be added as custom roles",
                error_code="invalid_role_assignment",
                details={"role_id": str(role_id), "type": role.type.value},
            )

        user = await self.repo.add_custom_role(user, role_id)
        logger.info("custom_role_assigned", user_id=str(user_id), role_id=str(role_id))
        return user
