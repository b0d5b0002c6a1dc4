"""Tests for accesslens.permissions.service."""

from __future__ import annotations

import pytest
from conftest import InMemoryDirectory, principal

from accesslens.directory.records import FieldPermissionRecord, ObjectPermissionRecord
from accesslens.exceptions import UserNotFoundError
from accesslens.models import PrincipalKind, UserSummary
from accesslens.permissions import PermissionService


@pytest.fixture
def org(directory: InMemoryDirectory) -> InMemoryDirectory:
    directory.add_user("005ANN", name="Ann Lee", email="ann@example.com", profile="Sales", profile_id="00eSALES", role="AE")
    directory.objects = ["Opportunity", "Account", "Case"]
    directory.permission_sets["005ANN"] = [principal(PrincipalKind.PERMISSION_SET, "0PSAPI", "API_Access")]
    directory.permission_set_groups["005ANN"] = [principal(PrincipalKind.PERMISSION_SET_GROUP, "0PGOPS", "Ops")]
    directory.object_records = [
        ObjectPermissionRecord(principal_id="00eSALES", sobject_type="Account", read=True, create=True),
        ObjectPermissionRecord(principal_id="0PSAPI", sobject_type="Account", read=True),
        ObjectPermissionRecord(principal_id="0PGOPS", sobject_type="Case", edit=True),
    ]
    directory.fields["Account"] = ["Rating", "Industry", "AnnualRevenue"]
    directory.field_records = [
        FieldPermissionRecord(principal_id="00eSALES", field="Account.Industry", read=True),
        FieldPermissionRecord(principal_id="0PSAPI", field="Account.Industry", read=True, edit=True),
        FieldPermissionRecord(principal_id="0PGOPS", field="Account.Rating", read=True),
    ]
    return directory


class TestObjectPermissions:
    """Tests for get_user_object_permissions."""

    @pytest.mark.asyncio
    async def test_report_sorted_by_object(self, org: InMemoryDirectory) -> None:
        report = await PermissionService(org).get_user_object_permissions("ann@example.com")

        assert [e.object_name for e in report.permissions] == ["Account", "Case", "Opportunity"]
        assert all(e.user_id == "005ANN" for e in report.permissions)
        assert report.user_info.name == "Ann Lee"
        assert report.user_info.role == "AE"
        assert report.user_info.profile == "Sales"

    @pytest.mark.asyncio
    async def test_grants_attributed_to_principals(self, org: InMemoryDirectory) -> None:
        report = await PermissionService(org).get_user_object_permissions("ann@example.com")
        account, case, opportunity = report.permissions

        assert account.permissions.read.sources == ("Sales (Profile)", "API_Access (Permission Set)")
        assert account.permissions.create.sources == ("Sales (Profile)",)
        assert case.permissions.edit.sources == ("Ops (Permission Set Group)",)
        assert opportunity.permissions.read.granted is False

    @pytest.mark.asyncio
    async def test_principal_order(self, org: InMemoryDirectory) -> None:
        """Test profile, then permission sets, then groups."""
        user = org.users["005ANN"]
        principals = await PermissionService(org).get_principals(user)
        assert [p.kind for p in principals] == [
            PrincipalKind.PROFILE,
            PrincipalKind.PERMISSION_SET,
            PrincipalKind.PERMISSION_SET_GROUP,
        ]

    @pytest.mark.asyncio
    async def test_unknown_email(self, org: InMemoryDirectory) -> None:
        with pytest.raises(UserNotFoundError, match="User with email nobody@example.com not found or inactive"):
            await PermissionService(org).get_user_object_permissions("nobody@example.com")

    @pytest.mark.asyncio
    async def test_camel_case_report(self, org: InMemoryDirectory) -> None:
        report = await PermissionService(org).get_user_object_permissions("ann@example.com")
        dumped = report.model_dump(by_alias=True)

        assert set(dumped) == {"userInfo", "permissions"}
        assert dumped["permissions"][0]["objectName"] == "Account"
        assert dumped["permissions"][0]["permissions"]["viewAllRecords"]["granted"] is False


class TestFieldPermissions:
    """Tests for get_field_permissions."""

    @pytest.mark.asyncio
    async def test_fields_sorted_with_sources(self, org: InMemoryDirectory) -> None:
        entries = await PermissionService(org).get_field_permissions("Account", "005ANN")

        assert [e.field_name for e in entries] == ["AnnualRevenue", "Industry", "Rating"]
        industry = entries[1].permissions
        assert industry.read.sources == ("Sales (Profile)", "API_Access (Permission Set)")
        assert industry.edit.sources == ("API_Access (Permission Set)",)
        assert entries[2].permissions.read.sources == ("Ops (Permission Set Group)",)
        assert entries[0].permissions.read.granted is False

    @pytest.mark.asyncio
    async def test_max_fields(self, org: InMemoryDirectory) -> None:
        """Test that the cap applies in describe order, before sorting."""
        entries = await PermissionService(org, max_fields=2).get_field_permissions("Account", "005ANN")
        assert [e.field_name for e in entries] == ["Industry", "Rating"]

    @pytest.mark.asyncio
    async def test_unknown_user(self, org: InMemoryDirectory) -> None:
        with pytest.raises(UserNotFoundError):
            await PermissionService(org).get_field_permissions("Account", "005NOPE")


class TestUserSearch:
    """Tests for list_active_users and search_users."""

    USERS = [
        UserSummary(id="005A", name="Ann Lee", email="ann@example.com"),
        UserSummary(id="005B", name="Bob Annis", email="bob@example.com"),
        UserSummary(id="005C", name="Cy Young", email="cy@corp.example"),
    ]

    def test_matches_name_or_email_case_insensitive(self) -> None:
        service = PermissionService(InMemoryDirectory())
        assert [u.id for u in service.search_users(self.USERS, "ANN")] == ["005A", "005B"]
        assert [u.id for u in service.search_users(self.USERS, "corp")] == ["005C"]

    def test_short_term_returns_nothing(self) -> None:
        service = PermissionService(InMemoryDirectory())
        assert service.search_users(self.USERS, "a") == []
        assert service.search_users(self.USERS, None) == []

    def test_limit(self) -> None:
        service = PermissionService(InMemoryDirectory(), user_search_limit=1)
        assert [u.id for u in service.search_users(self.USERS, "example")] == ["005A"]

    @pytest.mark.asyncio
    async def test_list_active_users(self, org: InMemoryDirectory) -> None:
        users = await PermissionService(org).list_active_users()
        assert [u.email for u in users] == ["ann@example.com"]
