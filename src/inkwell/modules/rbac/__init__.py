"""RBAC module - permission registry, roles and authorization checks."""

from fastapi import APIRouter


router = APIRouter(tags=["rbac"])

# Import routes to register them (must be after router is defined)
from inkwell.modules.rbac import routes  # noqa: F401, E402


# Module metadata
__module_info__ = {
    "name": "rbac",
    "version": "1.0.0",
    "description": "Role-based access control",
    "dependencies": [],
}
