"""Every ORM model, imported in one place so ``Base.metadata`` is complete.

Alembic and ``inkwell init-db`` build the schema from this metadata.
"""

from inkwell.core.database import Base
from inkwell.core.permissions.models import Permission, Role, RoleGrant, RoleParent
from inkwell.modules.tenants.models import Tenant
from inkwell.modules.users.models import User, UserCustomRole, UserTenantRole


metadata = Base.metadata

__all__ = [
    "Permission",
    "Role",
    "RoleGrant",
    "RoleParent",
    "Tenant",
    "User",
    "UserCustomRole",
    "UserTenantRole",
    "metadata",
]
