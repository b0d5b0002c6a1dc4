"""Abstract collaborators consumed by the resolution engine.

The engine never talks to the transport directly: it asks a
``BaseDirectory`` for typed snapshots, a ``BaseRuleSource`` for raw
sharing-rule documents, and the transport asks a ``BaseSessionProvider``
for credentials.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from .directory.records import FieldPermissionRecord, ObjectPermissionRecord, UserRecord
    from .directory.session import OrgSession
    from .models import GroupNode, PrincipalRef, RoleNode, UserSummary


class BaseSessionProvider(ABC):
    """Supplies the instance URL and bearer token for the target org."""

    @abstractmethod
    async def get_session(self) -> "OrgSession":
        raise NotImplementedError

    def invalidate(self) -> None:
        """Forget cached credentials so the next call fetches fresh ones."""


class BaseRuleSource(ABC):
    """Retrieves an object's raw sharing-rule metadata document."""

    @abstractmethod
    async def fetch(self, object_name: str) -> Optional[Dict[str, Any]]:
        """Return the parsed document, or None when the object has none."""
        raise NotImplementedError


class BaseDirectory(ABC):
    """Typed query surface over users, hierarchy and permission data.

    Lookups that find nothing return None or an empty list. Implementations
    raise QueryError when the org rejects a query, and let
    AuthenticationError / TransportError propagate.
    """

    # Users

    @abstractmethod
    async def find_active_user_by_email(self, email: str) -> Optional["UserRecord"]:
        raise NotImplementedError

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional["UserRecord"]:
        raise NotImplementedError

    @abstractmethod
    async def list_active_users(self) -> List["UserSummary"]:
        raise NotImplementedError

    # Object metadata

    @abstractmethod
    async def list_permissionable_objects(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    async def list_permissionable_fields(self, object_name: str) -> List[str]:
        raise NotImplementedError

    # Permission assignments and grants

    @abstractmethod
    async def get_permission_set_principals(self, user_id: str) -> List["PrincipalRef"]:
        raise NotImplementedError

    @abstractmethod
    async def get_permission_set_group_principals(self, user_id: str) -> List["PrincipalRef"]:
        raise NotImplementedError

    @abstractmethod
    async def get_object_permission_records(
        self, principals: Sequence["PrincipalRef"]
    ) -> List["ObjectPermissionRecord"]:
        raise NotImplementedError

    @abstractmethod
    async def get_field_permission_records(
        self, object_name: str, principals: Sequence["PrincipalRef"]
    ) -> List["FieldPermissionRecord"]:
        raise NotImplementedError

    # Sharing

    @abstractmethod
    async def get_internal_sharing_model(self, object_name: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    async def get_legacy_default_access(self, object_name: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    async def get_object_queues(self, object_name: str) -> List["GroupNode"]:
        raise NotImplementedError

    # Hierarchy

    @abstractmethod
    async def find_group(self, developer_name: str) -> Optional["GroupNode"]:
        raise NotImplementedError

    @abstractmethod
    async def is_direct_member(self, group_id: str, user_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def get_nested_group_ids(self, group_id: str) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    async def find_role(self, developer_name: str) -> Optional["RoleNode"]:
        raise NotImplementedError

    @abstractmethod
    async def get_child_roles(self, role_id: str) -> List["RoleNode"]:
        raise NotImplementedError


__all__ = ["BaseDirectory", "BaseRuleSource", "BaseSessionProvider"]
