"""User factory for tests."""

from uuid import UUID, uuid4

from polyfactory.factories.pydantic_factory import ModelFactory

from inkwell.modules.users.schemas import UserCreate


class UserCreateFactory(ModelFactory[UserCreate]):
    """Factory for creating UserCreate schemas."""

    __model__ = UserCreate

    @classmethod
    def username(cls) -> str:
        """Generate a unique username."""
        return f"user_{uuid4().hex[:8]}"

    @classmethod
    def display_name(cls) -> str:
        return f"Test User {uuid4().hex[:4]}"


def identity_headers(user_id: UUID, tenant_id: UUID | None = None) -> dict[str, str]:
    """Identity headers as set by the upstream authentication layer."""
    headers = {"X-User-ID": str(user_id)}
    if tenant_id is not None:
        headers["X-Tenant-ID"] = str(tenant_id)
    return headers
