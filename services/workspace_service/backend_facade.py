"""
Backend facade - every data-fetching feature goes through one resilient-call pattern:
attempt the real backend, classify the failure, fall back to deterministic data and tag the provenance.
"""

from typing import Awaitable, Callable, List, Optional, TypeVar

from config.app_config import BackendConfig, get_backend_config
from infrastructure.external.errors import ExpectedAbsence, WorkspaceBackendError
from infrastructure.external.workspace_backend import SearchHit, WorkspaceBackend, create_workspace_backend
from infrastructure.monitoring.logging_service import (
    get_logger,
    ErrorTracker,
    log_execution_time,
    log_fallback_used
)
from infrastructure.resilience.retry_service import RetryService
from services.workspace_service.fallback_content import WorkspaceFallbackSystem, get_fallback_system
from services.workspace_service.models import FetchResult

T = TypeVar("T")


class BackendFacade:
    """
    Resilient access to the workspace backend.

    No method raises for backend failures: each returns a FetchResult whose
    provenance tells the presentation layer whether it is looking at live data.
    """

    def __init__(
        self,
        backend: Optional[WorkspaceBackend] = None,
        config: Optional[BackendConfig] = None,
        retry_service: Optional[RetryService] = None,
        fallback_system: Optional[WorkspaceFallbackSystem] = None
    ):
        self.logger = get_logger(__name__)
        self.error_tracker = ErrorTracker(self.logger)
        self.config = config or get_backend_config()
        self.backend = backend or create_workspace_backend(self.config)
        self.retry_service = retry_service or RetryService()
        self.circuit_breaker = self.retry_service.get_backend_circuit_breaker(
            failure_threshold=self.config.failure_threshold,
            recovery_timeout=self.config.recovery_timeout
        )
        self.fallback_system = fallback_system or get_fallback_system()

    async def _resilient_call(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
        absence_is_live: bool = False,
        absence_payload: Optional[T] = None,
        **log_details
    ) -> FetchResult[T]:
        """
        Run one backend operation through the shared classification rules

        Args:
            operation: Operation name for logs
            call: Zero-argument coroutine function performing the real call
            fallback: Pure function producing the fallback payload
            absence_is_live: Treat ExpectedAbsence as a live answer
            absence_payload: Payload to report when absence counts as live
            **log_details: Extra fields for structured logs
        """
        async def classified_call():
            try:
                return await call()
            except FileNotFoundError as e:
                raise ExpectedAbsence(str(e)) from e

        try:
            with log_execution_time(self.logger, operation, **log_details):
                payload = await self.retry_service.resilient_call(
                    classified_call,
                    timeout=self.config.request_timeout_seconds,
                    circuit_breaker=self.circuit_breaker,
                    max_retries=self.config.max_retries
                )
            return FetchResult.live(payload)

        except ExpectedAbsence as e:
            if absence_is_live:
                self.logger.debug(f"{operation}: absence reported, backend is live ({e})")
                return FetchResult.live(absence_payload)
            diagnostic = str(e)

        except WorkspaceBackendError as e:
            diagnostic = str(e)

        except Exception as e:
            # Adapter bugs still degrade instead of breaking the chat
            self.error_tracker.track_error(e, context=operation, **log_details)
            diagnostic = f"{type(e).__name__}: {e}"

        log_fallback_used(self.logger, operation, diagnostic, **log_details)
        return FetchResult.fallback(fallback(), diagnostic)

    async def check_health(self) -> FetchResult[None]:
        """Probe backend connectivity; a "not found" answer proves the backend is up"""
        return await self._resilient_call(
            "health_probe",
            self.backend.health_probe,
            fallback=lambda: None,
            absence_is_live=True
        )

    async def fetch_file_content(self, path: str) -> FetchResult[str]:
        """
        Fetch file content, falling back to synthetic content

        Args:
            path: Workspace-relative file path

        Returns:
            FetchResult with the file text
        """
        return await self._resilient_call(
            "read_file_content",
            lambda: self.backend.read_file_content(path),
            fallback=lambda: self.fallback_system.get_file_content(path),
            path=path
        )

    async def search(self, query: str, top_k: Optional[int] = None) -> FetchResult[List[SearchHit]]:
        """
        Semantic search over the workspace, falling back to a fixed corpus

        Args:
            query: Search text; blank queries return no hits without calling the backend
            top_k: Maximum number of hits (defaults to configuration)

        Returns:
            FetchResult with ranked hits
        """
        query = query.strip()
        if not query:
            return FetchResult.live([])

        if top_k is None:
            top_k = self.config.search_top_k

        return await self._resilient_call(
            "search_files",
            lambda: self.backend.search_files(query, top_k),
            fallback=lambda: self.fallback_system.search(query, top_k),
            query=query,
            top_k=top_k
        )


# Global facade instance
_backend_facade: Optional[BackendFacade] = None


def get_backend_facade() -> BackendFacade:
    """Get the global backend facade instance"""
    global _backend_facade
    if _backend_facade is None:
        _backend_facade = BackendFacade()
    return _backend_facade
