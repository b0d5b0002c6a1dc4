"""Group and role hierarchy membership checks.

Group membership graphs may contain cycles (group A nests B, B nests A),
and role data is not guaranteed to be a clean tree. Every walk threads a
visited set keyed by resolved id, so a revisited node ends its branch
with ``False`` and no further queries.

Directory query failures are answered with ``False``; authentication and
transport failures propagate.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..exceptions import QueryError
from ..interfaces import BaseDirectory
from ..models import RoleNode, SharingTarget, TargetKind

logger = logging.getLogger(__name__)


class HierarchyResolver:
    """Answers "is this user inside that group / role (tree)?"."""

    def __init__(self, directory: BaseDirectory):
        self.directory = directory

    async def is_user_in_target(self, target: SharingTarget, user_id: str) -> bool:
        """Dispatch on the sharing target kind."""
        if target.kind is TargetKind.ALL_INTERNAL_USERS:
            return True
        if target.kind is TargetKind.GROUP:
            return await self.is_user_in_group(target.name, user_id)  # type: ignore[arg-type]
        if target.kind is TargetKind.ROLE:
            return await self.is_user_in_role(target.name, user_id, include_subordinates=False)  # type: ignore[arg-type]
        # roleAndSubordinates and roleAndSubordinatesInternal
        return await self.is_user_in_role(target.name, user_id, include_subordinates=True)  # type: ignore[arg-type]

    # ── Groups ──────────────────────────────────────────

    async def is_user_in_group(self, group_name: str, user_id: str, visited: Optional[set[str]] = None) -> bool:
        """Direct or nested membership of ``user_id`` in group ``group_name``.

        Args:
            group_name: Group developer name.
            user_id: User to look for.
            visited: Group ids already walked in this check.
        """
        try:
            group = await self.directory.find_group(group_name)
        except QueryError as e:
            logger.warning("Group lookup failed for %s: %s", group_name, e.message)
            return False
        if group is None:
            logger.debug("Group %s not found", group_name)
            return False
        return await self._group_contains(group.id, user_id, set() if visited is None else visited)

    async def _group_contains(self, group_id: str, user_id: str, visited: set[str]) -> bool:
        if group_id in visited:
            return False
        visited.add(group_id)

        try:
            if await self.directory.is_direct_member(group_id, user_id):
                return True
            nested_ids = await self.directory.get_nested_group_ids(group_id)
        except QueryError as e:
            logger.warning("Membership query failed for group %s: %s", group_id, e.message)
            return False

        for nested_id in nested_ids:
            if await self._group_contains(nested_id, user_id, visited):
                return True
        return False

    # ── Roles ───────────────────────────────────────────

    async def is_user_in_role(self, role_name: str, user_id: str, include_subordinates: bool) -> bool:
        """Whether the user's role is ``role_name`` or, optionally, below it.

        An unknown role or a user without a role yields ``False``.
        """
        try:
            user = await self.directory.get_user(user_id)
        except QueryError as e:
            logger.warning("User lookup failed for %s: %s", user_id, e.message)
            return False
        if user is None or not user.role_developer_name:
            return False

        user_role = user.role_developer_name
        if user_role == role_name:
            return True
        if not include_subordinates:
            return False

        try:
            role = await self.directory.find_role(role_name)
            if role is None:
                logger.debug("Role %s not found", role_name)
                return False
            return await self._subtree_contains(role, user_role, set())
        except QueryError as e:
            logger.warning("Role hierarchy query failed under %s: %s", role_name, e.message)
            return False

    async def _subtree_contains(self, role: RoleNode, user_role: str, visited: set[str]) -> bool:
        if role.id in visited:
            return False
        visited.add(role.id)

        for child in await self.directory.get_child_roles(role.id):
            if child.developer_name == user_role:
                return True
            if await self._subtree_contains(child, user_role, visited):
                return True
        return False


__all__ = ["HierarchyResolver"]
