"""Typed projections of raw directory records.

Raw query results are loosely typed dicts with nested relationship
objects that may be null. Each projection is built once at the gateway
boundary; nothing past the gateway reads raw records.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from ..models import GroupNode, PrincipalKind, PrincipalRef, RoleNode, UserInfo, UserSummary

_FROZEN = ConfigDict(frozen=True)


def nested(raw: Mapping[str, Any], *path: str) -> Any:
    """Follow a relationship path, returning None at the first gap."""
    value: Any = raw
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def principal_id(raw: Mapping[str, Any]) -> str:
    """Id of the entity that owns a permission record.

    Profile-owned permission sets resolve to the profile, aggregate
    permission sets of a group resolve to the group.
    """
    return (
        nested(raw, "Parent", "ProfileId")
        or nested(raw, "Parent", "PermissionSetGroupId")
        or raw.get("ParentId")
        or ""
    )


class UserRecord(BaseModel):
    model_config = _FROZEN

    id: str
    name: str = ""
    email: str = ""
    profile_id: Optional[str] = None
    profile_name: Optional[str] = None
    role_id: Optional[str] = None
    role_name: Optional[str] = None
    role_developer_name: Optional[str] = None

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "UserRecord":
        return cls(
            id=raw["Id"],
            name=raw.get("Name") or "",
            email=raw.get("Email") or "",
            profile_id=raw.get("ProfileId"),
            profile_name=nested(raw, "Profile", "Name"),
            role_id=raw.get("UserRoleId"),
            role_name=nested(raw, "UserRole", "Name"),
            role_developer_name=nested(raw, "UserRole", "DeveloperName"),
        )

    def profile_principal(self) -> Optional[PrincipalRef]:
        if not self.profile_id:
            return None
        return PrincipalRef(
            kind=PrincipalKind.PROFILE,
            id=self.profile_id,
            display_name=self.profile_name or self.profile_id,
        )

    def to_user_info(self, email: Optional[str] = None) -> UserInfo:
        return UserInfo(
            id=self.id,
            name=self.name,
            email=email or self.email,
            role=self.role_name or "No Role",
            profile=self.profile_name or "",
        )


def user_summary_from_record(raw: Mapping[str, Any]) -> UserSummary:
    return UserSummary(
        id=raw["Id"],
        name=raw.get("Name") or "",
        email=raw.get("Email") or "",
        role=nested(raw, "UserRole", "Name"),
        profile=nested(raw, "Profile", "Name"),
    )


class ObjectPermissionRecord(BaseModel):
    """One ObjectPermissions row attributed to its owning principal."""

    model_config = _FROZEN

    principal_id: str
    sobject_type: str
    create: bool = False
    read: bool = False
    edit: bool = False
    delete: bool = False
    view_all_records: bool = False
    modify_all_records: bool = False
    view_all_fields: bool = False

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "ObjectPermissionRecord":
        return cls(
            principal_id=principal_id(raw),
            sobject_type=raw.get("SobjectType") or "",
            create=bool(raw.get("PermissionsCreate")),
            read=bool(raw.get("PermissionsRead")),
            edit=bool(raw.get("PermissionsEdit")),
            delete=bool(raw.get("PermissionsDelete")),
            view_all_records=bool(raw.get("PermissionsViewAllRecords")),
            modify_all_records=bool(raw.get("PermissionsModifyAllRecords")),
            view_all_fields=bool(raw.get("PermissionsViewAllFields")),
        )


class FieldPermissionRecord(BaseModel):
    """One FieldPermissions row; ``field`` is qualified (``Account.Industry``)."""

    model_config = _FROZEN

    principal_id: str
    field: str
    read: bool = False
    edit: bool = False

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "FieldPermissionRecord":
        return cls(
            principal_id=principal_id(raw),
            field=raw.get("Field") or "",
            read=bool(raw.get("PermissionsRead")),
            edit=bool(raw.get("PermissionsEdit")),
        )


def permission_set_principal(raw: Mapping[str, Any]) -> Optional[PrincipalRef]:
    """Direct permission set of an assignment row; group-derived rows yield None."""
    ps_id = raw.get("PermissionSetId")
    if not ps_id or raw.get("PermissionSetGroupId"):
        return None
    name = nested(raw, "PermissionSet", "Name") or nested(raw, "PermissionSet", "Label") or ps_id
    return PrincipalRef(kind=PrincipalKind.PERMISSION_SET, id=ps_id, display_name=name)


def permission_set_group_principal(raw: Mapping[str, Any]) -> Optional[PrincipalRef]:
    group_id = raw.get("PermissionSetGroupId")
    if not group_id:
        return None
    name = (
        nested(raw, "PermissionSetGroup", "DeveloperName")
        or nested(raw, "PermissionSetGroup", "MasterLabel")
        or group_id
    )
    return PrincipalRef(kind=PrincipalKind.PERMISSION_SET_GROUP, id=group_id, display_name=name)


def role_from_record(raw: Mapping[str, Any]) -> RoleNode:
    return RoleNode(id=raw["Id"], developer_name=raw.get("DeveloperName") or "", parent_id=raw.get("ParentRoleId"))


def group_from_record(raw: Mapping[str, Any]) -> GroupNode:
    return GroupNode(id=raw["Id"], developer_name=raw.get("DeveloperName") or "")


def queue_from_record(raw: Mapping[str, Any]) -> Optional[GroupNode]:
    queue_id = raw.get("QueueId")
    if not queue_id:
        return None
    return GroupNode(
        id=queue_id,
        developer_name=nested(raw, "Queue", "DeveloperName") or queue_id,
        label=nested(raw, "Queue", "Name"),
    )


__all__ = [
    "FieldPermissionRecord",
    "ObjectPermissionRecord",
    "UserRecord",
    "group_from_record",
    "nested",
    "permission_set_group_principal",
    "permission_set_principal",
    "principal_id",
    "queue_from_record",
    "role_from_record",
    "user_summary_from_record",
]
