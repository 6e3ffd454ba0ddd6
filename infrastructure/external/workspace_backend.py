"""
Workspace backend adapters.
Handles the request/response boundary to the process that owns the file system and search index.
"""

from typing import List, Optional, Protocol, Dict, Any

import httpx
from pydantic import BaseModel, Field, TypeAdapter

from config.app_config import BackendConfig
from infrastructure.external.errors import BackendError, BackendUnavailable, ExpectedAbsence, is_absence_message
from infrastructure.monitoring.logging_service import get_logger


class SearchHit(BaseModel):
    """One ranked semantic search result"""
    path: str
    snippet: str
    score: float = Field(ge=0.0)


_SEARCH_HITS = TypeAdapter(List[SearchHit])


class WorkspaceBackend(Protocol):
    """Operations the engine consumes from the workspace backend"""

    async def health_probe(self) -> None:
        ...

    async def read_file_content(self, path: str) -> str:
        ...

    async def search_files(self, query: str, top_k: int) -> List[SearchHit]:
        ...


class HttpWorkspaceBackend:
    """
    Adapter for a workspace backend exposed over HTTP.

    Transport failures and timeouts are raised as BackendUnavailable. A 404, or any
    error body saying the file does not exist, is ExpectedAbsence; any other non-2xx
    answer is BackendError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        health_probe_path: str = "non-existent-file-for-health-check.txt",
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.logger = get_logger(__name__)
        self.base_url = base_url
        self.health_probe_path = health_probe_path
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def health_probe(self) -> None:
        """
        Probe connectivity by reading a sentinel file that is not expected to exist.
        A "not found" answer therefore proves the backend is up.
        """
        await self.read_file_content(self.health_probe_path)

    async def read_file_content(self, path: str) -> str:
        response = await self._get("/api/file", {"path": path})
        return response.text

    async def search_files(self, query: str, top_k: int) -> List[SearchHit]:
        response = await self._get("/api/search", {"query": query, "top_k": top_k})
        try:
            return _SEARCH_HITS.validate_python(response.json())
        except ValueError as e:
            raise BackendError(f"Malformed search response: {e}", status_code=response.status_code) from e

    async def _get(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise BackendUnavailable(f"Request to {url} timed out") from e
        except httpx.TransportError as e:
            raise BackendUnavailable(f"Backend unreachable at {self.base_url}: {e}") from e

        if response.status_code == 404:
            raise ExpectedAbsence(response.text or f"Not found: {url}")

        if response.is_error and is_absence_message(response.text):
            raise ExpectedAbsence(response.text)

        if response.is_error:
            self.logger.debug(f"Backend answered {response.status_code} for {url}")
            raise BackendError(
                f"Backend returned {response.status_code}: {response.text}",
                status_code=response.status_code
            )

        return response

    async def aclose(self) -> None:
        await self._client.aclose()


class OfflineWorkspaceBackend:
    """Backend used when no workspace backend is configured: every call is unavailable"""

    REASON = "No workspace backend configured"

    async def health_probe(self) -> None:
        raise BackendUnavailable(self.REASON)

    async def read_file_content(self, path: str) -> str:
        raise BackendUnavailable(self.REASON)

    async def search_files(self, query: str, top_k: int) -> List[SearchHit]:
        raise BackendUnavailable(self.REASON)


def create_workspace_backend(config: BackendConfig) -> WorkspaceBackend:
    """Build the backend adapter matching the configuration"""
    if config.is_offline:
        get_logger(__name__).info("No backend URL configured, running in fallback mode")
        return OfflineWorkspaceBackend()

    return HttpWorkspaceBackend(
        base_url=config.base_url,
        timeout=config.request_timeout_seconds,
        health_probe_path=config.health_probe_path
    )
