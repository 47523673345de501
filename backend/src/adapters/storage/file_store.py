"""
JSON file store: one file per key under the data directory.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import aiofiles

from core.exceptions import ErrorContext, StorageException, StorageSerializationError
from core.utils import StorageKeyBuilder

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class FileStore(KeyValueStore):
    """
    Persistent store for a single operator's machine.

    Each write goes to its own temporary file that is then swapped in with
    ``os.replace``, so a crash mid-write leaves the previous value intact
    and concurrent writers of one key never share a temporary file.
    """

    backend_name = "file"

    def __init__(self, data_dir: Union[str, Path] = ".data/touchline"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"File store initialized at {self.data_dir}")

    def _path(self, key: str) -> Path:
        return self.data_dir / StorageKeyBuilder.safe_filename(key)

    async def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            raise StorageException(
                f"Failed to read {path}",
                context=ErrorContext(operation="file_store.get", parameters={'key': key}),
                original_error=e
            ) from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageSerializationError("decode", key, original_error=e) from e

    async def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageSerializationError("encode", key, original_error=e) from e

        path = self._path(key)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=path.name + ".", suffix=".tmp")
            os.close(fd)
            async with aiofiles.open(tmp_name, "w", encoding="utf-8") as f:
                await f.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageException(
                f"Failed to write {path}",
                context=ErrorContext(operation="file_store.set", parameters={'key': key}),
                original_error=e
            ) from e

        logger.debug(f"Wrote {len(payload)} bytes to {path}")

    async def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Deleted {path}")
