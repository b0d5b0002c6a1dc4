"""Tests for accesslens.sharing.hierarchy."""

from __future__ import annotations

import pytest
from conftest import InMemoryDirectory

from accesslens.exceptions import AuthenticationError, QueryError
from accesslens.models import SharingTarget, TargetKind
from accesslens.sharing import HierarchyResolver


class TestGroupMembership:
    """Tests for is_user_in_group."""

    @pytest.mark.asyncio
    async def test_direct_member(self, directory: InMemoryDirectory) -> None:
        directory.add_group("Finance", members=["005A"])
        assert await HierarchyResolver(directory).is_user_in_group("Finance", "005A") is True

    @pytest.mark.asyncio
    async def test_nested_member(self, directory: InMemoryDirectory) -> None:
        """Test membership through two levels of nested groups."""
        leaf = directory.add_group("Leaf", members=["005A"])
        middle = directory.add_group("Middle", members=[leaf.id])
        directory.add_group("Top", members=[middle.id, "005B"])

        resolver = HierarchyResolver(directory)
        assert await resolver.is_user_in_group("Top", "005A") is True
        assert await resolver.is_user_in_group("Middle", "005B") is False

    @pytest.mark.asyncio
    async def test_cycle_terminates(self, directory: InMemoryDirectory) -> None:
        """Test that A nests B nests A ends with False and no re-queries."""
        a = directory.add_group("A")
        b = directory.add_group("B", members=[a.id])
        directory.members[a.id].add(b.id)

        assert await HierarchyResolver(directory).is_user_in_group("A", "005X") is False
        assert directory.calls["is_direct_member"] == 2
        assert directory.calls["get_nested_group_ids"] == 2

    @pytest.mark.asyncio
    async def test_unknown_group(self, directory: InMemoryDirectory) -> None:
        assert await HierarchyResolver(directory).is_user_in_group("Ghost", "005A") is False

    @pytest.mark.asyncio
    async def test_query_error_is_false(self, directory: InMemoryDirectory, query_error: QueryError) -> None:
        """Test that a rejected membership query answers False."""
        directory.add_group("Finance", members=["005A"])
        directory.fail["is_direct_member"] = query_error
        assert await HierarchyResolver(directory).is_user_in_group("Finance", "005A") is False

    @pytest.mark.asyncio
    async def test_authentication_error_propagates(self, directory: InMemoryDirectory) -> None:
        directory.fail["find_group"] = AuthenticationError()
        with pytest.raises(AuthenticationError):
            await HierarchyResolver(directory).is_user_in_group("Finance", "005A")


class TestRoleMembership:
    """Tests for is_user_in_role."""

    @pytest.fixture
    def org(self, directory: InMemoryDirectory) -> InMemoryDirectory:
        directory.add_role("CEO")
        directory.add_role("VP_Sales", parent="CEO")
        directory.add_role("Sales_Manager", parent="VP_Sales")
        directory.add_role("Sales_Rep", parent="Sales_Manager")
        directory.add_role("VP_Support", parent="CEO")
        directory.add_user("005REP", role="Sales_Rep")
        directory.add_user("005NOROLE")
        return directory

    @pytest.mark.asyncio
    async def test_exact_role(self, org: InMemoryDirectory) -> None:
        resolver = HierarchyResolver(org)
        assert await resolver.is_user_in_role("Sales_Rep", "005REP", include_subordinates=False) is True
        assert await resolver.is_user_in_role("Sales_Manager", "005REP", include_subordinates=False) is False

    @pytest.mark.asyncio
    async def test_three_levels_below(self, org: InMemoryDirectory) -> None:
        """Test a user three levels under the target role."""
        resolver = HierarchyResolver(org)
        assert await resolver.is_user_in_role("CEO", "005REP", include_subordinates=True) is True
        assert await resolver.is_user_in_role("CEO", "005REP", include_subordinates=False) is False

    @pytest.mark.asyncio
    async def test_sibling_branch(self, org: InMemoryDirectory) -> None:
        assert await HierarchyResolver(org).is_user_in_role("VP_Support", "005REP", include_subordinates=True) is False

    @pytest.mark.asyncio
    async def test_unknown_role_and_missing_user_role(self, org: InMemoryDirectory) -> None:
        resolver = HierarchyResolver(org)
        assert await resolver.is_user_in_role("Ghost", "005REP", include_subordinates=True) is False
        assert await resolver.is_user_in_role("CEO", "005NOROLE", include_subordinates=True) is False
        assert await resolver.is_user_in_role("CEO", "005MISSING", include_subordinates=True) is False

    @pytest.mark.asyncio
    async def test_role_cycle_terminates(self, directory: InMemoryDirectory) -> None:
        """Test that a corrupt parent cycle ends with False."""
        directory.add_role("Loop_A", parent="Loop_B")
        directory.add_role("Loop_B", parent="Loop_A")
        directory.add_user("005X", role="Elsewhere")

        assert await HierarchyResolver(directory).is_user_in_role("Loop_A", "005X", include_subordinates=True) is False
        assert directory.calls["get_child_roles"] == 2

    @pytest.mark.asyncio
    async def test_query_error_is_false(self, org: InMemoryDirectory, query_error: QueryError) -> None:
        org.fail["get_child_roles"] = query_error
        assert await HierarchyResolver(org).is_user_in_role("CEO", "005REP", include_subordinates=True) is False


class TestTargetDispatch:
    """Tests for is_user_in_target."""

    @pytest.mark.asyncio
    async def test_all_internal_users(self, directory: InMemoryDirectory) -> None:
        target = SharingTarget(kind=TargetKind.ALL_INTERNAL_USERS)
        assert await HierarchyResolver(directory).is_user_in_target(target, "005A") is True
        assert sum(directory.calls.values()) == 0

    @pytest.mark.asyncio
    async def test_role_and_subordinates_internal(self, directory: InMemoryDirectory) -> None:
        directory.add_role("COO")
        directory.add_role("Ops", parent="COO")
        directory.add_user("005OPS", role="Ops")

        resolver = HierarchyResolver(directory)
        internal = SharingTarget(kind=TargetKind.ROLE_AND_SUBORDINATES_INTERNAL, name="COO")
        exact = SharingTarget(kind=TargetKind.ROLE, name="COO")
        assert await resolver.is_user_in_target(internal, "005OPS") is True
        assert await resolver.is_user_in_target(exact, "005OPS") is False

    @pytest.mark.asyncio
    async def test_group(self, directory: InMemoryDirectory) -> None:
        directory.add_group("Finance", members=["005A"])
        target = SharingTarget(kind=TargetKind.GROUP, name="Finance")
        assert await HierarchyResolver(directory).is_user_in_target(target, "005A") is True
