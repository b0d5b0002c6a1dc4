"""Permission kinds and object eligibility rules.

Provides:
- ``OBJECT_PERMISSION_KINDS`` / ``FIELD_PERMISSION_KINDS``: the grant
  attributes aggregated per object and per field.
- ``is_permissionable_object()``: which describe-global entries get an
  object permission row.
- ``is_permissionable_field()``: which describe fields get a field row.
"""

from __future__ import annotations

from typing import Any, Mapping

# Attribute names shared by ObjectPermissionRecord and ObjectPermissionSet
OBJECT_PERMISSION_KINDS: tuple[str, ...] = (
    "create",
    "read",
    "edit",
    "delete",
    "view_all_records",
    "modify_all_records",
    "view_all_fields",
)

# Attribute names shared by FieldPermissionRecord and FieldPermissionSet
FIELD_PERMISSION_KINDS: tuple[str, ...] = ("read", "edit")

# Describe flags an object must carry to be reported
REQUIRED_OBJECT_CAPABILITIES: tuple[str, ...] = (
    "queryable",
    "updateable",
    "deletable",
    "createable",
    "triggerable",
)

# Describe flags that exclude an object
EXCLUDING_OBJECT_FLAGS: tuple[str, ...] = ("customSetting", "deprecatedAndHidden")

# System companion objects (tags, history, share, feed, change events, custom metadata)
EXCLUDED_NAME_MARKERS: tuple[str, ...] = (
    "__Tag",
    "__History",
    "__Share",
    "__Feed",
    "__ChangeEvent",
    "__mdt",
)


def is_permissionable_object(describe: Mapping[str, Any]) -> bool:
    """Check whether a describe-global entry is a reportable data object."""
    name = describe.get("name") or ""
    if not name:
        return False
    if not all(describe.get(flag) for flag in REQUIRED_OBJECT_CAPABILITIES):
        return False
    if any(describe.get(flag) for flag in EXCLUDING_OBJECT_FLAGS):
        return False
    return not any(marker in name for marker in EXCLUDED_NAME_MARKERS)


def is_permissionable_field(describe: Mapping[str, Any]) -> bool:
    """Fields that carry FLS and are not parts of a compound field."""
    return bool(describe.get("permissionable")) and not describe.get("compoundFieldName")


__all__ = [
    "EXCLUDED_NAME_MARKERS",
    "FIELD_PERMISSION_KINDS",
    "OBJECT_PERMISSION_KINDS",
    "is_permissionable_field",
    "is_permissionable_object",
]
