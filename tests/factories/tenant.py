"""Factory for tenant creation payloads."""

from uuid import uuid4

from polyfactory.factories.pydantic_factory import ModelFactory

from inkwell.modules.tenants.schemas import TenantCreate


class TenantCreateFactory(ModelFactory[TenantCreate]):
    """Factory for generating TenantCreate test data."""

    __model__ = TenantCreate

    @classmethod
    def code(cls) -> str:
        """Generate a unique lower-case tenant code."""
        return f"tenant-{uuid4().hex[:8]}"

    @classmethod
    def name(cls) -> str:
        """Generate a publication name."""
        return f"{cls.__faker__.company()} Press"

    @classmethod
    def domain(cls) -> str:
        """Generate a unique domain."""
        return f"{uuid4().hex[:8]}.example.com"

    @classmethod
    def contact_email(cls) -> str:
        return f"editors-{uuid4().hex[:6]}@example.com"

    @classmethod
    def contact_phone(cls) -> None:
        return None

    @classmethod
    def allow_comments(cls) -> bool:
        return True

    @classmethod
    def allow_rating(cls) -> bool:
        return True
