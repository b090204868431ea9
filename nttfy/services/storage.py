import asyncio
import json
import os
from abc import ABC, abstractmethod
from typing import Dict, Optional

import aiofiles

from nttfy.core.logging import get_logger

logger = get_logger("KeyValueStorage")


class StorageError(Exception):
    """Raised when the backing store cannot be read or written"""


class KeyValueStorage(ABC):
    """Async string key-value store, the persistence contract of the client"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...


class JsonFileStorage(KeyValueStorage):
    """
    Key-value storage kept in a single JSON object file.

    The file is read lazily on first access and rewritten atomically
    (tmp file + replace) on every set. A file that is not a JSON object
    is moved to `<path>.corrupt` before the store starts over empty. A lock serializes writers so the
    last set always wins on disk.
    """

    def __init__(self, file_path: str):
        self._file_path = file_path
        self._lock = asyncio.Lock()
        self._cache: Optional[Dict[str, str]] = None

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            await self._ensure_loaded()
            return self._cache.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            await self._ensure_loaded()
            previous = dict(self._cache)
            self._cache[key] = value
            try:
                await self._flush()
            except OSError as e:
                self._cache = previous
                raise StorageError(f"Failed to write {self._file_path}: {e}") from e

    async def _ensure_loaded(self) -> None:
        if self._cache is not None:
            return
        try:
            async with aiofiles.open(self._file_path, "r", encoding="utf-8") as fh:
                content = await fh.read()
            raw = json.loads(content) if content else {}
            if not isinstance(raw, dict):
                raise ValueError("expected a JSON object")
            self._cache = {str(k): str(v) for k, v in raw.items()}
            logger.debug(f"Loaded {len(self._cache)} key(s) from {self._file_path}")
        except FileNotFoundError:
            logger.info(f"Storage file {self._file_path} not found, starting empty")
            self._cache = {}
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Storage file {self._file_path} is malformed ({e}), starting empty")
            self._set_aside_corrupt_file()
            self._cache = {}
        except OSError as e:
            raise StorageError(f"Failed to read {self._file_path}: {e}") from e

    def _set_aside_corrupt_file(self) -> None:
        corrupt_path = f"{self._file_path}.corrupt"
        try:
            os.replace(self._file_path, corrupt_path)
            logger.warning(f"Moved unreadable storage file to {corrupt_path}")
        except OSError as e:
            raise StorageError(f"Failed to move aside malformed {self._file_path}: {e}") from e

    async def _flush(self) -> None:
        payload = json.dumps(self._cache, indent=2, ensure_ascii=False)
        tmp_path = f"{self._file_path}.tmp"
        directory = os.path.dirname(self._file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as fh:
                await fh.write(payload)
            os.replace(tmp_path, self._file_path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
