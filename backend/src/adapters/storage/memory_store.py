"""
In-process store, used for tests and the ``memory`` backend.
"""

import json
import logging
from typing import Any, Dict, Optional

from core.exceptions import StorageSerializationError

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class InMemoryStore(KeyValueStore):
    """
    Dictionary-backed store. Values are kept as JSON text so callers get
    fresh copies and non-serializable values fail the same way they would
    on disk.
    """

    backend_name = "memory"

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageSerializationError("encode", key, original_error=e) from e
        logger.debug(f"Stored {key} in memory")

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
