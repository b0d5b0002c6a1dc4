"""``BaseDirectory`` implementation backed by ``DirectoryClient``."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..exceptions import QueryError
from ..interfaces import BaseDirectory
from ..models import GroupNode, PrincipalKind, PrincipalRef, RoleNode, UserSummary
from ..permissions.constants import is_permissionable_field, is_permissionable_object
from . import queries
from .client import DirectoryClient
from .records import (
    FieldPermissionRecord,
    ObjectPermissionRecord,
    UserRecord,
    group_from_record,
    permission_set_group_principal,
    permission_set_principal,
    queue_from_record,
    role_from_record,
    user_summary_from_record,
)

logger = logging.getLogger(__name__)


def _ids_by_kind(principals: Sequence[PrincipalRef]) -> tuple[list[str], list[str], list[str]]:
    profiles: list[str] = []
    permission_sets: list[str] = []
    groups: list[str] = []
    for principal in principals:
        if principal.kind is PrincipalKind.PROFILE:
            profiles.append(principal.id)
        elif principal.kind is PrincipalKind.PERMISSION_SET_GROUP:
            groups.append(principal.id)
        else:
            permission_sets.append(principal.id)
    return profiles, permission_sets, groups


class DirectoryGateway(BaseDirectory):
    """Runs SOQL through the client and projects results to typed records."""

    def __init__(self, client: DirectoryClient):
        self.client = client

    # Users

    async def find_active_user_by_email(self, email: str) -> Optional[UserRecord]:
        records = await self.client.query(queries.active_user_by_email(email))
        return UserRecord.from_record(records[0]) if records else None

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        records = await self.client.query(queries.user_by_id(user_id))
        return UserRecord.from_record(records[0]) if records else None

    async def list_active_users(self) -> List[UserSummary]:
        records = await self.client.query(queries.active_standard_users())
        return [user_summary_from_record(r) for r in records]

    # Object metadata

    async def list_permissionable_objects(self) -> List[str]:
        sobjects = await self.client.describe_global()
        return [s["name"] for s in sobjects if is_permissionable_object(s)]

    async def list_permissionable_fields(self, object_name: str) -> List[str]:
        describe = await self.client.describe(object_name)
        return [f["name"] for f in describe.get("fields", []) if is_permissionable_field(f)]

    # Permission assignments and grants

    async def get_permission_set_principals(self, user_id: str) -> List[PrincipalRef]:
        try:
            records = await self.client.query(queries.permission_set_assignments(user_id))
        except QueryError as e:
            logger.debug("Retrying permission sets without group column: %s", e.message)
            records = await self.client.query(queries.permission_set_assignments(user_id, with_groups=False))
        return [p for p in map(permission_set_principal, records) if p is not None]

    async def get_permission_set_group_principals(self, user_id: str) -> List[PrincipalRef]:
        try:
            records = await self.client.query(queries.permission_set_group_assignments(user_id))
        except QueryError as e:
            logger.debug("Permission set groups unavailable: %s", e.message)
            return []
        principals: dict[str, PrincipalRef] = {}
        for record in records:
            principal = permission_set_group_principal(record)
            if principal is not None:
                principals.setdefault(principal.id, principal)
        return list(principals.values())

    async def get_object_permission_records(self, principals: Sequence[PrincipalRef]) -> List[ObjectPermissionRecord]:
        if not principals:
            return []
        records = await self.client.query(queries.object_permissions(*_ids_by_kind(principals)))
        return [ObjectPermissionRecord.from_record(r) for r in records]

    async def get_field_permission_records(
        self, object_name: str, principals: Sequence[PrincipalRef]
    ) -> List[FieldPermissionRecord]:
        if not principals:
            return []
        records = await self.client.query(queries.field_permissions(object_name, *_ids_by_kind(principals)))
        return [FieldPermissionRecord.from_record(r) for r in records]

    # Sharing

    async def get_internal_sharing_model(self, object_name: str) -> Optional[str]:
        records = await self.client.tooling_query(queries.entity_sharing_model(object_name))
        return records[0].get("InternalSharingModel") if records else None

    async def get_legacy_default_access(self, object_name: str) -> Optional[str]:
        field = queries.LEGACY_DEFAULT_ACCESS_FIELDS.get(object_name)
        if field is None:
            return None
        records = await self.client.query(queries.organization_default_access())
        return records[0].get(field) if records else None

    async def get_object_queues(self, object_name: str) -> List[GroupNode]:
        records = await self.client.query(queries.object_queues(object_name))
        return [q for q in map(queue_from_record, records) if q is not None]

    # Hierarchy

    async def find_group(self, developer_name: str) -> Optional[GroupNode]:
        records = await self.client.query(queries.group_by_developer_name(developer_name))
        return group_from_record(records[0]) if records else None

    async def is_direct_member(self, group_id: str, user_id: str) -> bool:
        records = await self.client.query(queries.direct_membership(group_id, user_id))
        return bool(records)

    async def get_nested_group_ids(self, group_id: str) -> List[str]:
        records = await self.client.query(queries.nested_groups(group_id))
        return [r["UserOrGroupId"] for r in records if r.get("UserOrGroupId")]

    async def find_role(self, developer_name: str) -> Optional[RoleNode]:
        records = await self.client.query(queries.role_by_developer_name(developer_name))
        return role_from_record(records[0]) if records else None

    async def get_child_roles(self, role_id: str) -> List[RoleNode]:
        records = await self.client.query(queries.child_roles(role_id))
        return [role_from_record(r) for r in records]


__all__ = ["DirectoryGateway"]
