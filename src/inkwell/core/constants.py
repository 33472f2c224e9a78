"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_NAME_LENGTH = 255
MAX_DISPLAY_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_ROLE_NAME_LENGTH = 100
MAX_PERMISSION_CODE_LENGTH = 100
MAX_CATEGORY_LENGTH = 50
MAX_RESOURCE_TYPE_LENGTH = 20
MAX_RESOURCE_ID_LENGTH = 255
MAX_USERNAME_LENGTH = 30
MIN_USERNAME_LENGTH = 3
MAX_EMAIL_LENGTH = 255
MAX_PHONE_LENGTH = 32
MAX_TENANT_CODE_LENGTH = 63

# Lock scope used for platform-wide role and permission mutations
SYSTEM_SCOPE = "system"
