"""Data models for access resolution results.

Every model is a frozen snapshot built fresh for one resolution request.
Output models serialize with camelCase aliases for the display layer::

    report.model_dump(by_alias=True)
    # {"userInfo": {...}, "permissions": [{"objectName": "Account", ...}]}
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

_FROZEN = ConfigDict(frozen=True)
_FROZEN_CAMEL = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ── Principals & grants ─────────────────────────────────


class PrincipalKind(str, Enum):
    """Kind of permission-bearing entity."""

    PROFILE = "Profile"
    PERMISSION_SET = "Permission Set"
    PERMISSION_SET_GROUP = "Permission Set Group"


class PrincipalRef(BaseModel):
    """One permission-bearing entity assigned to the subject user."""

    model_config = _FROZEN

    kind: PrincipalKind
    id: str
    display_name: str

    @property
    def label(self) -> str:
        """Attribution label, e.g. ``"Sales (Profile)"``."""
        return f"{self.display_name} ({self.kind.value})"


class PermissionGrant(BaseModel):
    """Aggregated grant for one permission kind.

    ``granted`` is derived from ``sources``. Sources keep one entry per
    contributing record, duplicates included, in first-seen order.
    """

    model_config = _FROZEN

    sources: tuple[str, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def granted(self) -> bool:
        return bool(self.sources)


class ObjectPermissionSet(BaseModel):
    """Seven object-level grants for one object."""

    model_config = _FROZEN_CAMEL

    create: PermissionGrant = Field(default_factory=PermissionGrant)
    read: PermissionGrant = Field(default_factory=PermissionGrant)
    edit: PermissionGrant = Field(default_factory=PermissionGrant)
    delete: PermissionGrant = Field(default_factory=PermissionGrant)
    view_all_records: PermissionGrant = Field(default_factory=PermissionGrant)
    modify_all_records: PermissionGrant = Field(default_factory=PermissionGrant)
    view_all_fields: PermissionGrant = Field(default_factory=PermissionGrant)


class FieldPermissionSet(BaseModel):
    """Read/edit grants for one field."""

    model_config = _FROZEN_CAMEL

    read: PermissionGrant = Field(default_factory=PermissionGrant)
    edit: PermissionGrant = Field(default_factory=PermissionGrant)


# ── Sharing ─────────────────────────────────────────────


class AccessLevel(str, Enum):
    """Record-level access as shown to users, lowest first."""

    NO_ACCESS = "No Access"
    READ_ONLY = "Read Only"
    EDIT = "Edit"

    @property
    def rank(self) -> int:
        return _ACCESS_RANK[self]


_ACCESS_RANK = {
    AccessLevel.NO_ACCESS: 0,
    AccessLevel.READ_ONLY: 1,
    AccessLevel.EDIT: 2,
}


class RuleType(str, Enum):
    """Sharing rule family, by the collection that declares it."""

    CRITERIA_BASED = "Criteria-Based Rule"
    OWNER_BASED = "Owner-Based Rule"


class TargetKind(str, Enum):
    """``sharedTo`` kinds that the resolver can evaluate."""

    ALL_INTERNAL_USERS = "allInternalUsers"
    GROUP = "group"
    ROLE = "role"
    ROLE_AND_SUBORDINATES = "roleAndSubordinates"
    ROLE_AND_SUBORDINATES_INTERNAL = "roleAndSubordinatesInternal"


class SharingTarget(BaseModel):
    """Audience of a sharing rule.

    ``name`` is a group or role developer name; it is ``None`` only for
    ``allInternalUsers``.
    """

    model_config = _FROZEN

    kind: TargetKind
    name: Optional[str] = None

    @model_validator(mode="after")
    def _check_name(self) -> "SharingTarget":
        if self.kind is TargetKind.ALL_INTERNAL_USERS:
            if self.name is not None:
                raise ValueError("allInternalUsers target takes no name")
        elif not self.name:
            raise ValueError(f"{self.kind.value} target requires a name")
        return self

    def describe(self) -> str:
        if self.kind is TargetKind.ALL_INTERNAL_USERS:
            return "All Internal Users"
        return f"{self.kind.value}: {self.name}"


class SharingRuleDescriptor(BaseModel):
    """One sharing rule as read from the object's rule metadata."""

    model_config = _FROZEN

    rule_type: RuleType
    rule_name: str
    access_level: str
    target: SharingTarget
    criteria_statement: str = ""


class SharingFact(BaseModel):
    """One reason the user can (or cannot) see records of an object."""

    model_config = _FROZEN

    type: str
    name: str
    access: AccessLevel
    tooltip: Optional[str] = None


def max_access(facts: Iterable[SharingFact]) -> AccessLevel:
    """Highest access level across ``facts``.

    The resolver reports every fact without precedence; callers that want
    a single effective level can collapse the list with this helper.
    """
    best = AccessLevel.NO_ACCESS
    for fact in facts:
        if fact.access.rank > best.rank:
            best = fact.access
    return best


# ── Hierarchy snapshots ─────────────────────────────────


class RoleNode(BaseModel):
    """One role in the role hierarchy."""

    model_config = _FROZEN

    id: str
    developer_name: str
    parent_id: Optional[str] = None


class GroupNode(BaseModel):
    """One public group or queue."""

    model_config = _FROZEN

    id: str
    developer_name: str
    label: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.label or self.developer_name


# ── Users & reports ─────────────────────────────────────


class UserInfo(BaseModel):
    """Subject user summary shown above a permission report."""

    model_config = _FROZEN_CAMEL

    id: str
    name: str
    email: str
    role: str = "No Role"
    profile: str = ""


class UserSummary(BaseModel):
    """Row of the active-user picker."""

    model_config = _FROZEN_CAMEL

    id: str
    name: str
    email: str
    role: Optional[str] = None
    profile: Optional[str] = None


class ObjectPermissionEntry(BaseModel):
    model_config = _FROZEN_CAMEL

    object_name: str
    permissions: ObjectPermissionSet
    user_id: str


class FieldPermissionEntry(BaseModel):
    model_config = _FROZEN_CAMEL

    field_name: str
    permissions: FieldPermissionSet


class UserPermissionReport(BaseModel):
    """Object permissions for one user, sorted by object name."""

    model_config = _FROZEN_CAMEL

    user_info: UserInfo
    permissions: tuple[ObjectPermissionEntry, ...] = ()


__all__ = [
    "AccessLevel",
    "FieldPermissionEntry",
    "FieldPermissionSet",
    "GroupNode",
    "ObjectPermissionEntry",
    "ObjectPermissionSet",
    "PermissionGrant",
    "PrincipalKind",
    "PrincipalRef",
    "RoleNode",
    "RuleType",
    "SharingFact",
    "SharingRuleDescriptor",
    "SharingTarget",
    "TargetKind",
    "UserInfo",
    "UserPermissionReport",
    "UserSummary",
    "max_access",
]
