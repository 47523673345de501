"""
Key-value storage contract used by the domain services.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStore(ABC):
    """
    Whole-value key-value store.

    Values are JSON-compatible structures. A ``set`` replaces the stored
    value in one step; readers never see a partially written value.
    """

    backend_name = "abstract"

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; deleting a missing key is not an error."""

    async def close(self) -> None:
        """Release backend resources."""
