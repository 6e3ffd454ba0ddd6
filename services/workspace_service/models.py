"""
Workspace service data models for provenance-tagged backend results.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

from infrastructure.external.workspace_backend import SearchHit

T = TypeVar("T")


class Provenance(Enum):
    """Where a fetched payload came from"""
    LIVE = "live"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Result of any backend-facing operation: always a payload, tagged with its provenance"""
    payload: T
    provenance: Provenance
    diagnostic: Optional[str] = None

    def __post_init__(self):
        if self.provenance is Provenance.LIVE and self.diagnostic is not None:
            raise ValueError("Live results carry no diagnostic")

    @classmethod
    def live(cls, payload: T) -> "FetchResult[T]":
        return cls(payload=payload, provenance=Provenance.LIVE)

    @classmethod
    def fallback(cls, payload: T, diagnostic: str) -> "FetchResult[T]":
        return cls(payload=payload, provenance=Provenance.FALLBACK, diagnostic=diagnostic)

    @property
    def is_fallback(self) -> bool:
        return self.provenance is Provenance.FALLBACK


@dataclass(frozen=True)
class BackendStatus:
    """Latest known connectivity of the workspace backend"""
    is_connected: bool = False
    last_checked: Optional[datetime] = None
    error: Optional[str] = None
    circuit_state: str = "closed"

    @property
    def label(self) -> str:
        return "Backend Connected" if self.is_connected else "Fallback Mode"

    @property
    def detail(self) -> str:
        return "Real file search & content" if self.is_connected else "Using mock data"


__all__ = ["Provenance", "FetchResult", "BackendStatus", "SearchHit"]
