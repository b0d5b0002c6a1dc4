"""One-stop facade over permission and sharing resolution."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from .config import InspectorConfig, load_config_from_env
from .directory.client import DirectoryClient
from .directory.gateway import DirectoryGateway
from .directory.metadata import CliRuleSource
from .directory.session import session_provider_from_config
from .interfaces import BaseDirectory, BaseRuleSource
from .models import FieldPermissionEntry, SharingFact, UserPermissionReport, UserSummary
from .permissions.service import PermissionService
from .sharing.resolver import SharingAccessResolver

logger = logging.getLogger(__name__)


class PermissionInspector:
    """Effective object, field and record access of org users.

    Build one from configuration with ``from_config()`` (owns and closes
    its HTTP client), or pass any ``BaseDirectory`` / ``BaseRuleSource``.

    Example::

        async with PermissionInspector.from_config() as inspector:
            report = await inspector.get_user_object_permissions("ann@example.com")
            facts = await inspector.get_object_sharing_access("Account", report.user_info.id)
    """

    def __init__(
        self,
        directory: BaseDirectory,
        rule_source: BaseRuleSource,
        config: Optional[InspectorConfig] = None,
        client: Optional[DirectoryClient] = None,
    ):
        self.config = config or InspectorConfig()
        self.directory = directory
        self.permissions = PermissionService(
            directory,
            max_fields=self.config.max_fields,
            user_search_min_chars=self.config.user_search_min_chars,
            user_search_limit=self.config.user_search_limit,
        )
        self.sharing = SharingAccessResolver(directory, rule_source)
        self._client = client

    @classmethod
    def from_config(cls, config: Optional[InspectorConfig] = None) -> "PermissionInspector":
        config = config or load_config_from_env()
        client = DirectoryClient(
            session_provider_from_config(config),
            api_version=config.api_version,
            timeout=config.request_timeout,
        )
        rule_source = CliRuleSource(
            sf_cli_path=config.sf_cli_path,
            target_org=config.target_org,
            timeout=config.sf_cli_timeout,
        )
        return cls(DirectoryGateway(client), rule_source, config=config, client=client)

    async def __aenter__(self) -> "PermissionInspector":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    # Object and field permissions

    async def get_user_object_permissions(self, email: str) -> UserPermissionReport:
        return await self.permissions.get_user_object_permissions(email)

    async def get_field_permissions(self, object_name: str, user_id: str) -> List[FieldPermissionEntry]:
        return await self.permissions.get_field_permissions(object_name, user_id)

    async def list_active_users(self) -> List[UserSummary]:
        return await self.permissions.list_active_users()

    def search_users(self, users: Sequence[UserSummary], term: Optional[str]) -> List[UserSummary]:
        return self.permissions.search_users(users, term)

    # Sharing

    async def get_object_sharing_access(self, object_name: str, user_id: str) -> List[SharingFact]:
        return await self.sharing.resolve(object_name, user_id)

    async def resolve_sharing_for_objects(
        self, object_names: Iterable[str], user_id: str
    ) -> dict[str, List[SharingFact]]:
        """Resolve several objects concurrently.

        Concurrency is bounded by ``config.max_concurrency`` when set. The
        first raised error (or a cancellation) aborts the whole call once the
        remaining resolutions have been cancelled and have finished.
        """
        names = list(dict.fromkeys(object_names))
        limit = self.config.max_concurrency
        semaphore = asyncio.Semaphore(limit) if limit else None

        async def resolve_one(name: str) -> List[SharingFact]:
            if semaphore is None:
                return await self.sharing.resolve(name, user_id)
            async with semaphore:
                return await self.sharing.resolve(name, user_id)

        tasks = [asyncio.ensure_future(resolve_one(name)) for name in names]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return dict(zip(names, results))


__all__ = ["PermissionInspector"]
