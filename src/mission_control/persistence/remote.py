# src/mission_control/persistence/remote.py

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from ..core.ports import ExportedDocument, PushResult, WorkspaceDocument
from .errors import RemoteStoreError

logger = logging.getLogger(__name__)

_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


def _make_timeout(timeout_s: float | None) -> Any:
    # None keeps the httpx default rather than disabling timeouts.
    if timeout_s is None:
        return httpx.Timeout(5.0)
    return httpx.Timeout(timeout_s)


class HttpRemoteStore:
    """
    Remote store client for the data API:

    - GET  {base}/data    -> full document
    - POST {base}/data    -> {"success": true, "lastSync": "..."}
    - GET  {base}/export  -> attachment with the persisted document

    The httpx client is created lazily so construction never touches the network.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = _make_timeout(timeout_seconds)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{method} {path} failed: {e!r}") from e

        if not response.is_success:
            raise RemoteStoreError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json_object(response: httpx.Response, what: str) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteStoreError(f"{what}: response is not JSON") from e
        if not isinstance(body, dict):
            raise RemoteStoreError(f"{what}: expected a JSON object")
        return body

    async def fetch_document(self) -> WorkspaceDocument:
        response = await self._request("GET", "/data")
        doc = self._json_object(response, "GET /data")
        logger.debug("Fetched document tasks=%s", len(doc.get("tasks") or []))
        return doc

    async def push_document(self, document: WorkspaceDocument) -> PushResult:
        response = await self._request("POST", "/data", json=document)
        body = self._json_object(response, "POST /data")
        last_sync = body.get("lastSync")
        return PushResult(
            success=bool(body.get("success", True)),
            last_sync=str(last_sync) if last_sync else None,
        )

    async def export_document(self) -> ExportedDocument:
        response = await self._request("GET", "/export")
        disposition = response.headers.get("Content-Disposition", "")
        m = _FILENAME_RE.search(disposition)
        filename = m.group(1).strip() if m else "mission-control-backup.json"
        return ExportedDocument(filename=filename, content=response.content)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
