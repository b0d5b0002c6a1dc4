"""HTTP transport for the org's REST and Tooling query APIs."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..exceptions import AuthenticationError, QueryError, TransportError
from ..interfaces import BaseSessionProvider
from .session import OrgSession

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class DirectoryClient:
    """Async request/response client returning ordered record lists.

    The session is fetched lazily on first request. An HTTP 401 drops it
    (and invalidates the provider) before raising AuthenticationError, so
    the next call re-authenticates.

    Usage::

        async with DirectoryClient(CliSessionProvider()) as client:
            users = await client.query("SELECT Id FROM User LIMIT 1")
    """

    def __init__(
        self,
        session_provider: BaseSessionProvider,
        api_version: str = "63.0",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session_provider = session_provider
        self.api_version = api_version
        self._session: Optional[OrgSession] = None
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "DirectoryClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def base_path(self) -> str:
        return f"/services/data/v{self.api_version}"

    async def _get_session(self) -> OrgSession:
        if self._session is None:
            self._session = await self.session_provider.get_session()
        return self._session

    def invalidate_session(self) -> None:
        self._session = None
        self.session_provider.invalidate()

    async def get(self, path: str, params: Optional[dict[str, str]] = None, *, absolute: bool = False) -> Any:
        """GET a JSON resource.

        Args:
            path: Path under the versioned API root, or from the instance
                root when ``absolute`` is set (as in ``nextRecordsUrl``).
            params: Query string parameters.
        """
        session = await self._get_session()
        url = f"{session.instance_url}{path if absolute else self.base_path + path}"
        try:
            response = await self._http.get(
                url,
                params=params,
                headers={"Authorization": session.authorization, "Content-Type": "application/json"},
            )
        except httpx.TransportError as e:
            raise TransportError(f"Salesforce API unreachable: {e}") from e

        if response.status_code == 401:
            self.invalidate_session()
            raise AuthenticationError("Authentication failed. Please check your credentials.")
        if response.is_error:
            message = _error_message(response)
            raise QueryError(f"Salesforce API Error: {message}", status_code=response.status_code)
        return response.json()

    async def _query(self, path: str, soql: str) -> list[Record]:
        logger.debug("SOQL: %s", soql)
        payload = await self.get(path, params={"q": soql})
        records: list[Record] = list(payload.get("records", []))
        while not payload.get("done", True) and payload.get("nextRecordsUrl"):
            payload = await self.get(payload["nextRecordsUrl"], absolute=True)
            records.extend(payload.get("records", []))
        return records

    async def query(self, soql: str) -> list[Record]:
        """Run a SOQL query against the data API, following pagination."""
        return await self._query("/query/", soql)

    async def tooling_query(self, soql: str) -> list[Record]:
        """Run a SOQL query against the Tooling API."""
        return await self._query("/tooling/query/", soql)

    async def describe_global(self) -> list[Record]:
        payload = await self.get("/sobjects/")
        return list(payload.get("sobjects", []))

    async def describe(self, object_name: str) -> Record:
        return await self.get(f"/sobjects/{object_name}/describe/")


def _error_message(response: httpx.Response) -> str:
    """Platform error message from a failed response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, list) and body and isinstance(body[0], dict):
        return body[0].get("message") or response.reason_phrase
    if isinstance(body, dict):
        return body.get("message") or body.get("error_description") or response.reason_phrase
    return response.reason_phrase


__all__ = ["DirectoryClient", "Record"]
