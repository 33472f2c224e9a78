"""Users module - role assignments of platform users.

Users have no HTTP routes of their own; assignments are managed through
the CLI and read by the permission checker.
"""

# Module metadata
__module_info__ = {
    "name": "users",
    "version": "1.0.0",
    "description": "User role assignments",
    "dependencies": ["tenants", "rbac"],
}
