"""
Async client for the mediatree API.
"""

import logging
from typing import Any

import httpx

from mediatree.errors import Unauthorized, UpstreamFailure
from mediatree.models import DirectoryListing, DirectoryNode, ImageObject

logger = logging.getLogger(__name__)


def _error_message(res: httpx.Response, default: str) -> tuple[str, Any]:
    try:
        data = res.json()
    except ValueError:
        return default, None
    if not isinstance(data, dict):
        return default, None
    message = data.get("message") or data.get("detail") or data.get("error")
    return (message if isinstance(message, str) else default), data.get("details")


class MediaTreeClient:
    """
    Talks to a mediatree server. Pass an existing httpx.AsyncClient (with base_url set) to share connections,
    or a base_url to let this client create and own one.
    """

    def __init__(
        self,
        base_url: str = "",
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "MediaTreeClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"X-API-Key": self.api_key} if self.api_key is not None else {}

    async def _request(
        self, method: str, url: str, failure_message: str, allow_404: bool = False, **kwargs
    ) -> httpx.Response:
        try:
            res = await self._client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"{failure_message}: {e}") from e
        if res.status_code == 401:
            raise Unauthorized()
        if res.is_error and not (allow_404 and res.status_code == 404):
            message, details = _error_message(res, failure_message)
            logger.warning(f"{method} {url} returned {res.status_code}: {message}")
            raise UpstreamFailure(message, status_code=res.status_code, details=details)
        return res

    async def fetch_tree(self) -> DirectoryNode:
        """Fetch the complete directory tree."""
        res = await self._request("GET", "/api/organize", "Failed to fetch directory tree")
        return DirectoryNode.model_validate(res.json())

    async def list_directory(self, path: str = "") -> DirectoryListing | None:
        """One directory from the server; None if it does not exist."""
        res = await self._request("GET", "/api/images", "Failed to list directory", allow_404=True, params={"path": path})
        if res.status_code == 404:
            return None
        return DirectoryListing.model_validate(res.json())

    async def upload(
        self, data: bytes, filename: str, id: str | None = None, content_type: str | None = None
    ) -> ImageObject:
        files = {"file": (filename, data, content_type or "application/octet-stream")}
        form = {"id": id} if id else {}
        res = await self._request("POST", "/api/images", "Upload failed", files=files, data=form)
        return ImageObject.model_validate(res.json()["image"])

    async def delete(self, id: str) -> str:
        res = await self._request("DELETE", "/api/images", "Delete failed", params={"id": id})
        return res.json()["deleted"]
