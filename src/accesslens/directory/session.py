"""Session providers: where the instance URL and bearer token come from."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import InspectorConfig
from ..exceptions import AuthenticationError
from ..interfaces import BaseSessionProvider
from .cli import run_sf, target_org_args

logger = logging.getLogger(__name__)

CLI_NOT_FOUND = "Salesforce CLI not found. Please install it first: npm install -g @salesforce/cli"
NO_ORG = "No authenticated org found. Please run: sf org login web"
NO_CREDENTIALS = "Unable to get org credentials. Please run: sf org login web"
CLI_TIMEOUT = "Salesforce CLI timed out while reading org credentials"


class OrgSession(BaseModel):
    """Authenticated access to one org."""

    model_config = ConfigDict(frozen=True)

    instance_url: str
    access_token: str = Field(repr=False)

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"


class StaticSessionProvider(BaseSessionProvider):
    """Fixed credentials, typically from SF_INSTANCE_URL / SF_ACCESS_TOKEN.

    A static token cannot be refreshed, so invalidation is a no-op and an
    expired token keeps failing with AuthenticationError.
    """

    def __init__(self, instance_url: str, access_token: str):
        self._session = OrgSession(instance_url=instance_url.rstrip("/"), access_token=access_token)

    async def get_session(self) -> OrgSession:
        return self._session


class CliSessionProvider(BaseSessionProvider):
    """Credentials from ``sf org display --json``.

    The CLI is invoked lazily on first use and again after ``invalidate()``.
    """

    def __init__(
        self,
        sf_cli_path: str = "sf",
        target_org: Optional[str] = None,
        timeout: Optional[float] = 120.0,
    ):
        self.sf_cli_path = sf_cli_path
        self.target_org = target_org
        self.timeout = timeout
        self._session: Optional[OrgSession] = None
        self._lock = asyncio.Lock()

    async def get_session(self) -> OrgSession:
        async with self._lock:
            if self._session is None:
                self._session = await self._fetch()
            return self._session

    def invalidate(self) -> None:
        self._session = None

    async def _fetch(self) -> OrgSession:
        try:
            result = await run_sf(
                self.sf_cli_path,
                "org",
                "display",
                "--json",
                *target_org_args(self.target_org),
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise AuthenticationError(CLI_NOT_FOUND) from e
        except asyncio.TimeoutError as e:
            raise AuthenticationError(CLI_TIMEOUT, timeout=self.timeout) from e

        try:
            payload = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise AuthenticationError() from e

        org_info = payload.get("result") if isinstance(payload, dict) else None
        if not org_info:
            raise AuthenticationError(NO_ORG)

        instance_url = org_info.get("instanceUrl")
        access_token = org_info.get("accessToken")
        if not instance_url or not access_token:
            raise AuthenticationError(NO_CREDENTIALS)

        logger.info("Using org session for %s", instance_url)
        return OrgSession(instance_url=instance_url.rstrip("/"), access_token=access_token)


def session_provider_from_config(config: InspectorConfig) -> BaseSessionProvider:
    """Static credentials when configured, otherwise the sf CLI."""
    if config.has_static_session:
        return StaticSessionProvider(config.instance_url, config.access_token)  # type: ignore[arg-type]
    return CliSessionProvider(
        sf_cli_path=config.sf_cli_path,
        target_org=config.target_org,
        timeout=config.sf_cli_timeout,
    )


__all__ = [
    "CliSessionProvider",
    "OrgSession",
    "StaticSessionProvider",
    "session_provider_from_config",
]
