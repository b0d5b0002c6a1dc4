"""Shared in-memory collaborators for engine tests."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

import pytest

from accesslens.directory.records import FieldPermissionRecord, ObjectPermissionRecord, UserRecord
from accesslens.exceptions import QueryError
from accesslens.interfaces import BaseDirectory, BaseRuleSource
from accesslens.models import GroupNode, PrincipalKind, PrincipalRef, RoleNode, UserSummary


class InMemoryDirectory(BaseDirectory):
    """Directory backed by plain dicts.

    ``fail`` maps a method name to the exception it should raise.
    ``calls`` counts invocations per method name.
    """

    def __init__(self) -> None:
        self.users: Dict[str, UserRecord] = {}
        self.objects: List[str] = []
        self.fields: Dict[str, List[str]] = {}
        self.permission_sets: Dict[str, List[PrincipalRef]] = {}
        self.permission_set_groups: Dict[str, List[PrincipalRef]] = {}
        self.object_records: List[ObjectPermissionRecord] = []
        self.field_records: List[FieldPermissionRecord] = []
        self.sharing_models: Dict[str, Optional[str]] = {}
        self.legacy_defaults: Dict[str, Optional[str]] = {}
        self.queues: Dict[str, List[GroupNode]] = {}
        self.groups: Dict[str, GroupNode] = {}
        self.members: Dict[str, set] = {}
        self.roles: Dict[str, RoleNode] = {}
        self.fail: Dict[str, Exception] = {}
        self.calls: Counter = Counter()

    def _enter(self, name: str) -> None:
        self.calls[name] += 1
        if name in self.fail:
            raise self.fail[name]

    # Builders

    def add_user(self, user_id: str, *, role: Optional[str] = None, profile: str = "Standard User", **kwargs: Any) -> UserRecord:
        user = UserRecord(
            id=user_id,
            name=kwargs.get("name", user_id),
            email=kwargs.get("email", f"{user_id}@example.com"),
            profile_id=kwargs.get("profile_id", f"00e-{profile}"),
            profile_name=profile,
            role_id=f"00E-{role}" if role else None,
            role_name=role,
            role_developer_name=role,
        )
        self.users[user_id] = user
        return user

    def add_group(self, name: str, members: Sequence[str] = ()) -> GroupNode:
        group = GroupNode(id=f"00G-{name}", developer_name=name)
        self.groups[name] = group
        self.members.setdefault(group.id, set()).update(members)
        return group

    def add_role(self, name: str, parent: Optional[str] = None) -> RoleNode:
        role = RoleNode(id=f"00E-{name}", developer_name=name, parent_id=f"00E-{parent}" if parent else None)
        self.roles[name] = role
        return role

    # Users

    async def find_active_user_by_email(self, email: str) -> Optional[UserRecord]:
        self._enter("find_active_user_by_email")
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        self._enter("get_user")
        return self.users.get(user_id)

    async def list_active_users(self) -> List[UserSummary]:
        self._enter("list_active_users")
        return [
            UserSummary(id=u.id, name=u.name, email=u.email, role=u.role_name, profile=u.profile_name)
            for u in sorted(self.users.values(), key=lambda u: u.name)
        ]

    # Object metadata

    async def list_permissionable_objects(self) -> List[str]:
        self._enter("list_permissionable_objects")
        return list(self.objects)

    async def list_permissionable_fields(self, object_name: str) -> List[str]:
        self._enter("list_permissionable_fields")
        return list(self.fields.get(object_name, []))

    # Assignments and grants

    async def get_permission_set_principals(self, user_id: str) -> List[PrincipalRef]:
        self._enter("get_permission_set_principals")
        return list(self.permission_sets.get(user_id, []))

    async def get_permission_set_group_principals(self, user_id: str) -> List[PrincipalRef]:
        self._enter("get_permission_set_group_principals")
        return list(self.permission_set_groups.get(user_id, []))

    async def get_object_permission_records(self, principals: Sequence[PrincipalRef]) -> List[ObjectPermissionRecord]:
        self._enter("get_object_permission_records")
        ids = {p.id for p in principals}
        return [r for r in self.object_records if r.principal_id in ids]

    async def get_field_permission_records(
        self, object_name: str, principals: Sequence[PrincipalRef]
    ) -> List[FieldPermissionRecord]:
        self._enter("get_field_permission_records")
        ids = {p.id for p in principals}
        return [r for r in self.field_records if r.principal_id in ids and r.field.startswith(f"{object_name}.")]

    # Sharing

    async def get_internal_sharing_model(self, object_name: str) -> Optional[str]:
        self._enter("get_internal_sharing_model")
        return self.sharing_models.get(object_name)

    async def get_legacy_default_access(self, object_name: str) -> Optional[str]:
        self._enter("get_legacy_default_access")
        return self.legacy_defaults.get(object_name)

    async def get_object_queues(self, object_name: str) -> List[GroupNode]:
        self._enter("get_object_queues")
        return list(self.queues.get(object_name, []))

    # Hierarchy

    async def find_group(self, developer_name: str) -> Optional[GroupNode]:
        self._enter("find_group")
        return self.groups.get(developer_name)

    async def is_direct_member(self, group_id: str, user_id: str) -> bool:
        self._enter("is_direct_member")
        return user_id in self.members.get(group_id, set())

    async def get_nested_group_ids(self, group_id: str) -> List[str]:
        self._enter("get_nested_group_ids")
        group_ids = {g.id for g in self.groups.values()}
        return sorted(m for m in self.members.get(group_id, set()) if m in group_ids)

    async def find_role(self, developer_name: str) -> Optional[RoleNode]:
        self._enter("find_role")
        return self.roles.get(developer_name)

    async def get_child_roles(self, role_id: str) -> List[RoleNode]:
        self._enter("get_child_roles")
        return [r for r in self.roles.values() if r.parent_id == role_id]


class StaticRuleSource(BaseRuleSource):
    """Serves prepared documents keyed by object name."""

    def __init__(self, documents: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None) -> None:
        self.documents = documents or {}
        self.error = error

    async def fetch(self, object_name: str) -> Optional[Dict[str, Any]]:
        if self.error is not None:
            raise self.error
        return self.documents.get(object_name)


def principal(kind: PrincipalKind, pid: str, name: str) -> PrincipalRef:
    return PrincipalRef(kind=kind, id=pid, display_name=name)


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory()


@pytest.fixture
def rule_source() -> StaticRuleSource:
    return StaticRuleSource()


@pytest.fixture
def query_error() -> QueryError:
    return QueryError("Salesforce API Error: sObject type 'X' is not supported.")
