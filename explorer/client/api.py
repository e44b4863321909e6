"""
Async HTTP client for the explorer API.
"""
import logging
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class ApiClientError(Exception):
    """Non-2xx response; the message is the server's `error` string."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ExplorerApiClient:
    """
    Thin wrapper around the explorer endpoints returning decoded JSON.

    Use as an async context manager, or pass an existing session that the
    caller closes itself.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 15,
    ):
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    @staticmethod
    async def _parse_error(response: aiohttp.ClientResponse) -> str:
        try:
            data = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return "Request failed."
        if isinstance(data, dict) and data.get("error"):
            return data["error"]
        return "Request failed."

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        query = {key: str(value) for key, value in (params or {}).items() if value is not None}
        async with self._get_session().request(method, url, params=query, json=json) as response:
            if response.status >= 400:
                message = await self._parse_error(response)
                logger.warning(f"{method} {path} failed with {response.status}: {message}")
                raise ApiClientError(message, response.status)
            if response.status == 204:
                return None
            return await response.json()

    async def fetch_folders(self, limit: Optional[int] = None, offset: Optional[int] = None):
        return await self._request("GET", "/api/folders", params={"limit": limit, "offset": offset})

    async def fetch_folder(self, folder_id: int):
        return await self._request("GET", f"/api/folders/{folder_id}")

    async def fetch_root_folders(self, limit: Optional[int] = None, offset: Optional[int] = None):
        return await self._request("GET", "/api/folders/roots", params={"limit": limit, "offset": offset})

    async def fetch_folder_children(
        self,
        folder_id: int,
        type: str = "all",
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ):
        params = {"type": type, "limit": limit, "offset": offset}
        return await self._request("GET", f"/api/folders/{folder_id}/children", params=params)

    async def create_folder(self, name: str, parent_id: Optional[int] = None):
        return await self._request("POST", "/api/folders", json={"name": name, "parentId": parent_id})

    async def update_folder(self, folder_id: int, **changes):
        """Send only the given changes; `parent_id=None` moves the folder to the root."""
        body = {}
        if "name" in changes:
            body["name"] = changes["name"]
        if "parent_id" in changes:
            body["parentId"] = changes["parent_id"]
        return await self._request("PUT", f"/api/folders/{folder_id}", json=body)

    async def delete_folder(self, folder_id: int):
        return await self._request("DELETE", f"/api/folders/{folder_id}")

    async def fetch_files(self, limit: Optional[int] = None, offset: Optional[int] = None):
        return await self._request("GET", "/api/files", params={"limit": limit, "offset": offset})

    async def fetch_file(self, file_id: int):
        return await self._request("GET", f"/api/files/{file_id}")

    async def create_file(self, name: str, folder_id: int):
        return await self._request("POST", "/api/files", json={"name": name, "folderId": folder_id})

    async def update_file(self, file_id: int, **changes):
        body = {}
        if "name" in changes:
            body["name"] = changes["name"]
        if "folder_id" in changes:
            body["folderId"] = changes["folder_id"]
        return await self._request("PUT", f"/api/files/{file_id}", json=body)

    async def delete_file(self, file_id: int):
        return await self._request("DELETE", f"/api/files/{file_id}")

    async def search(
        self,
        query: str,
        scope: str = "all",
        match: str = "prefix",
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ):
        params = {"q": query, "scope": scope, "match": match, "limit": limit, "offset": offset}
        return await self._request("GET", "/api/search", params=params)
