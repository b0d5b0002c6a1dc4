"""SOQL builders for every query the gateway issues.

Values are always passed through ``soql_quote``.
"""

from __future__ import annotations

from typing import Iterable

OBJECT_PERMISSION_COLUMNS = (
    "PermissionsCreate",
    "PermissionsRead",
    "PermissionsEdit",
    "PermissionsDelete",
    "PermissionsViewAllRecords",
    "PermissionsModifyAllRecords",
    "PermissionsViewAllFields",
)

FIELD_PERMISSION_COLUMNS = ("PermissionsRead", "PermissionsEdit")

# Per-object default access fields on the legacy settings record
LEGACY_DEFAULT_ACCESS_FIELDS = {
    "Account": "DefaultAccountAccess",
    "Contact": "DefaultContactAccess",
    "Case": "DefaultCaseAccess",
    "Opportunity": "DefaultOpportunityAccess",
    "Lead": "DefaultLeadAccess",
}

_USER_COLUMNS = (
    "Id, Name, Email, ProfileId, Profile.Name, UserRoleId, UserRole.Name, UserRole.DeveloperName"
)
_PARENT_COLUMNS = "ParentId, Parent.ProfileId, Parent.PermissionSetGroupId"


def soql_quote(value: str) -> str:
    """Quote a string literal for SOQL."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def soql_in(values: Iterable[str]) -> str:
    return "(" + ",".join(soql_quote(v) for v in values) + ")"


# ── Users ───────────────────────────────────────────────


def active_user_by_email(email: str) -> str:
    return f"SELECT {_USER_COLUMNS} FROM User WHERE Email = {soql_quote(email)} AND IsActive = true LIMIT 1"


def user_by_id(user_id: str) -> str:
    return f"SELECT {_USER_COLUMNS} FROM User WHERE Id = {soql_quote(user_id)} LIMIT 1"


def active_standard_users() -> str:
    return (
        "SELECT Id, Name, Email, UserRole.Name, Profile.Name FROM User "
        "WHERE IsActive = true AND UserType = 'Standard' ORDER BY Name"
    )


# ── Assignments and grants ──────────────────────────────


def permission_set_assignments(user_id: str, with_groups: bool = True) -> str:
    """Direct permission-set assignments of ``user_id``.

    With ``with_groups`` the group column is selected so rows that come from
    a permission-set group can be told apart. Orgs without the column need
    ``with_groups=False``.
    """
    columns = "PermissionSetId, PermissionSet.Name, PermissionSet.Label"
    if with_groups:
        columns += ", PermissionSetGroupId"
    return (
        f"SELECT {columns} FROM PermissionSetAssignment WHERE AssigneeId = {soql_quote(user_id)} "
        "AND PermissionSet.IsOwnedByProfile = false"
    )


def permission_set_group_assignments(user_id: str) -> str:
    return (
        "SELECT PermissionSetGroupId, PermissionSetGroup.DeveloperName, PermissionSetGroup.MasterLabel "
        f"FROM PermissionSetAssignment WHERE AssigneeId = {soql_quote(user_id)} "
        "AND PermissionSetGroupId != null"
    )


def _parent_filter(profile_ids: list[str], permission_set_ids: list[str], group_ids: list[str]) -> str:
    clauses = []
    if profile_ids:
        clauses.append(f"Parent.ProfileId IN {soql_in(profile_ids)}")
    if permission_set_ids:
        clauses.append(f"ParentId IN {soql_in(permission_set_ids)}")
    if group_ids:
        clauses.append(f"Parent.PermissionSetGroupId IN {soql_in(group_ids)}")
    return "(" + " OR ".join(clauses) + ")"


def object_permissions(profile_ids: list[str], permission_set_ids: list[str], group_ids: list[str]) -> str:
    columns = ", ".join(("SobjectType",) + OBJECT_PERMISSION_COLUMNS)
    return (
        f"SELECT {columns}, {_PARENT_COLUMNS} FROM ObjectPermissions "
        f"WHERE {_parent_filter(profile_ids, permission_set_ids, group_ids)}"
    )


def field_permissions(
    object_name: str, profile_ids: list[str], permission_set_ids: list[str], group_ids: list[str]
) -> str:
    columns = ", ".join(("Field",) + FIELD_PERMISSION_COLUMNS)
    return (
        f"SELECT {columns}, {_PARENT_COLUMNS} FROM FieldPermissions "
        f"WHERE {_parent_filter(profile_ids, permission_set_ids, group_ids)} "
        f"AND SobjectType = {soql_quote(object_name)}"
    )


# ── Sharing ─────────────────────────────────────────────


def entity_sharing_model(object_name: str) -> str:
    return (
        "SELECT InternalSharingModel FROM EntityDefinition "
        f"WHERE QualifiedApiName = {soql_quote(object_name)} LIMIT 1"
    )


def organization_default_access() -> str:
    return f"SELECT {', '.join(LEGACY_DEFAULT_ACCESS_FIELDS.values())} FROM OrganizationSettings LIMIT 1"


def object_queues(object_name: str) -> str:
    return f"SELECT QueueId, Queue.Name, Queue.DeveloperName FROM QueueSobject WHERE SobjectType = {soql_quote(object_name)}"


# ── Hierarchy ───────────────────────────────────────────


def group_by_developer_name(developer_name: str) -> str:
    return f"SELECT Id, DeveloperName FROM Group WHERE DeveloperName = {soql_quote(developer_name)} LIMIT 1"


def direct_membership(group_id: str, user_id: str) -> str:
    return (
        "SELECT UserOrGroupId FROM GroupMember "
        f"WHERE GroupId = {soql_quote(group_id)} AND UserOrGroupId = {soql_quote(user_id)}"
    )


def nested_groups(group_id: str) -> str:
    return (
        "SELECT UserOrGroupId FROM GroupMember "
        f"WHERE GroupId = {soql_quote(group_id)} AND UserOrGroupId IN (SELECT Id FROM Group)"
    )


def role_by_developer_name(developer_name: str) -> str:
    return (
        "SELECT Id, DeveloperName, ParentRoleId FROM UserRole "
        f"WHERE DeveloperName = {soql_quote(developer_name)} LIMIT 1"
    )


def child_roles(role_id: str) -> str:
    return f"SELECT Id, DeveloperName, ParentRoleId FROM UserRole WHERE ParentRoleId = {soql_quote(role_id)}"
