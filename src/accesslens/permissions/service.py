"""Object and field permission reports for one user."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..exceptions import UserNotFoundError
from ..interfaces import BaseDirectory
from ..models import (
    FieldPermissionEntry,
    ObjectPermissionEntry,
    PrincipalRef,
    UserPermissionReport,
    UserSummary,
)
from .aggregator import aggregate_field_permissions, aggregate_object_permissions

if TYPE_CHECKING:
    from ..directory.records import UserRecord

logger = logging.getLogger(__name__)


class PermissionService:
    """Resolves principals and aggregates their grants.

    Args:
        directory: Typed directory to query.
        max_fields: Optional cap on fields per object report.
        user_search_min_chars: Shortest search term that returns results.
        user_search_limit: Maximum rows returned by ``search_users``.
    """

    def __init__(
        self,
        directory: BaseDirectory,
        *,
        max_fields: Optional[int] = None,
        user_search_min_chars: int = 2,
        user_search_limit: int = 20,
    ):
        self.directory = directory
        self.max_fields = max_fields
        self.user_search_min_chars = user_search_min_chars
        self.user_search_limit = user_search_limit

    async def get_principals(self, user: "UserRecord") -> List[PrincipalRef]:
        """Profile first, then permission sets, then permission-set groups."""
        principals: List[PrincipalRef] = []
        profile = user.profile_principal()
        if profile is not None:
            principals.append(profile)
        principals.extend(await self.directory.get_permission_set_principals(user.id))
        principals.extend(await self.directory.get_permission_set_group_principals(user.id))
        return principals

    async def get_user_object_permissions(self, email: str) -> UserPermissionReport:
        """Effective object permissions of the active user with ``email``.

        Raises:
            UserNotFoundError: no active user has this email.
        """
        user = await self.directory.find_active_user_by_email(email)
        if user is None:
            raise UserNotFoundError(f"User with email {email} not found or inactive", email=email)

        objects = await self.directory.list_permissionable_objects()
        principals = await self.get_principals(user)
        records = await self.directory.get_object_permission_records(principals)
        logger.debug(
            "Aggregating %d object permission records from %d principals over %d objects",
            len(records),
            len(principals),
            len(objects),
        )

        entries = [
            ObjectPermissionEntry(
                object_name=object_name,
                permissions=aggregate_object_permissions(object_name, principals, records),
                user_id=user.id,
            )
            for object_name in objects
        ]
        entries.sort(key=lambda e: e.object_name)
        return UserPermissionReport(user_info=user.to_user_info(email=email), permissions=tuple(entries))

    async def get_field_permissions(self, object_name: str, user_id: str) -> List[FieldPermissionEntry]:
        """Field-level read/edit grants of ``user_id`` on ``object_name``.

        Raises:
            UserNotFoundError: ``user_id`` does not exist.
        """
        user = await self.directory.get_user(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found", user_id=user_id)

        fields = await self.directory.list_permissionable_fields(object_name)
        if self.max_fields is not None:
            fields = fields[: self.max_fields]
        principals = await self.get_principals(user)
        records = await self.directory.get_field_permission_records(object_name, principals)

        entries = [
            FieldPermissionEntry(
                field_name=field,
                permissions=aggregate_field_permissions(f"{object_name}.{field}", principals, records),
            )
            for field in fields
        ]
        entries.sort(key=lambda e: e.field_name)
        return entries

    async def list_active_users(self) -> List[UserSummary]:
        return await self.directory.list_active_users()

    def search_users(self, users: Sequence[UserSummary], term: Optional[str]) -> List[UserSummary]:
        """Case-insensitive match on name or email.

        Terms shorter than ``user_search_min_chars`` return nothing.
        """
        if not term or len(term) < self.user_search_min_chars:
            return []
        needle = term.lower()
        matches = [u for u in users if needle in u.name.lower() or needle in u.email.lower()]
        return matches[: self.user_search_limit]


__all__ = ["PermissionService"]
