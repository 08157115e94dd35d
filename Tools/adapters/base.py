"""
Record source interface.

Every data source the dashboard reads from exposes its collections as named
tools returning a ToolResult, so the API layer can unwrap records and map
failures to HTTP status codes in one place.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

# ToolResult.error_type values
UNAUTHENTICATED = "unauthenticated"
UPSTREAM = "upstream"
UNKNOWN_TOOL = "unknown_tool"


@dataclass
class ToolResult:
    """Outcome of one tool call: the records, or why there are none."""

    success: bool
    data: Any
    error: Optional[str] = None
    error_type: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.metadata.setdefault("fetched_at", datetime.now(timezone.utc).isoformat())

    @property
    def unauthenticated(self) -> bool:
        """True when the call failed for lack of a usable credential."""
        return self.error_type == UNAUTHENTICATED

    @property
    def records(self) -> list[Any]:
        return self.data if self.success and self.data else []

    @classmethod
    def ok(cls, data: Any, **metadata) -> "ToolResult":
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, error_type: str = UPSTREAM, **metadata) -> "ToolResult":
        return cls(success=False, data=None, error=error, error_type=error_type, metadata=metadata)


class BaseAdapter(ABC):
    """A source of newest-first record collections."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def list_tools(self) -> list[dict[str, Any]]:
        """
        Describe the collections this source serves.

        Each entry has ``name``, ``description`` and ``parameters``.
        """
        pass

    @abstractmethod
    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """
        Fetch one collection.

        Args:
            tool_name: Collection name from list_tools()
            arguments: Tool parameters, e.g. ``{"limit": 7}``

        Returns:
            ToolResult carrying the raw records, or the failure class
        """
        pass

    async def close(self):
        """Release open connections. Sources without any keep the no-op."""
        pass  # noqa: B027
