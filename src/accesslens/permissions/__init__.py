"""Object and field permission aggregation.

Provides:
- aggregate_object_permissions(): merge object grants across principals
- aggregate_field_permissions(): merge field grants across principals
- PermissionService: per-user object and field permission reports
"""

from .aggregator import aggregate_field_permissions, aggregate_object_permissions
from .constants import (
    FIELD_PERMISSION_KINDS,
    OBJECT_PERMISSION_KINDS,
    is_permissionable_field,
    is_permissionable_object,
)
from .service import PermissionService

__all__ = [
    "FIELD_PERMISSION_KINDS",
    "OBJECT_PERMISSION_KINDS",
    "PermissionService",
    "aggregate_field_permissions",
    "aggregate_object_permissions",
    "is_permissionable_field",
    "is_permissionable_object",
]
