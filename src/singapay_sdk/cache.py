"""Key/value caches used to share access tokens between SDK instances.

Every backend implements the :class:`Cache` protocol. Operations are
coroutines so that network-backed stores (Redis) and local ones share one
calling convention. ``ttl`` is expressed in seconds; ``None`` means the
entry never expires.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import math
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

import redis.asyncio as redis

logger = logging.getLogger(__name__)


@runtime_checkable
class Cache(Protocol):
    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool: ...

    async def delete(self, key: str) -> bool: ...

    async def has(self, key: str) -> bool: ...

    async def clear(self) -> bool: ...


class MemoryCache:
    """Process-local cache; entries vanish once their TTL has elapsed."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._values: Dict[str, Any] = {}
        self._expirations: Dict[str, float] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any:
        async with self._lock:
            if not self._alive(key):
                return None
            return self._values[key]

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        async with self._lock:
            self._values[key] = value
            if ttl is None:
                self._expirations.pop(key, None)
            else:
                self._expirations[key] = self._clock() + ttl
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            self._values.pop(key, None)
            self._expirations.pop(key, None)
            return True

    async def has(self, key: str) -> bool:
        async with self._lock:
            return self._alive(key)

    async def clear(self) -> bool:
        async with self._lock:
            self._values.clear()
            self._expirations.clear()
            return True

    def _alive(self, key: str) -> bool:
        if key not in self._values:
            return False
        expires_at = self._expirations.get(key)
        if expires_at is not None and self._clock() >= expires_at:
            self._values.pop(key, None)
            self._expirations.pop(key, None)
            return False
        return True


class FileCache:
    """Stores each entry as a small JSON document inside ``directory``."""

    def __init__(self, directory: Optional[str] = None, clock: Callable[[], float] = time.time) -> None:
        self._dir = Path(directory) if directory else Path(tempfile.gettempdir()) / "singapay_cache"
        self._dir.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._dir / f"{digest}.cache"

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt cache file %s", path)
            path.unlink(missing_ok=True)
            return None

    def _expired(self, entry: Dict[str, Any]) -> bool:
        expires_at = entry.get("expires_at")
        return expires_at is not None and self._clock() >= expires_at

    async def get(self, key: str) -> Any:
        path = self._path(key)
        entry = self._read(path)
        if entry is None:
            return None
        if self._expired(entry):
            path.unlink(missing_ok=True)
            return None
        return entry.get("value")

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        entry = {
            "key": key,
            "value": value,
            "expires_at": self._clock() + ttl if ttl is not None else None,
        }
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(entry, fh, separators=(",", ":"))
        tmp.replace(path)
        return True

    async def delete(self, key: str) -> bool:
        self._path(key).unlink(missing_ok=True)
        return True

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None

    async def clear(self) -> bool:
        for path in self._dir.glob("*.cache"):
            path.unlink(missing_ok=True)
        return True

    async def cleanup(self) -> int:
        """Remove expired entries and return how many were deleted."""
        removed = 0
        for path in self._dir.glob("*.cache"):
            entry = self._read(path)
            if entry is not None and self._expired(entry):
                path.unlink(missing_ok=True)
                removed += 1
        return removed


class RedisCache:
    """Cache backed by an existing ``redis.asyncio.Redis`` connection."""

    def __init__(self, client: redis.Redis, prefix: str = "singapay_") -> None:
        self._redis = client
        self._prefix = prefix

    async def get(self, key: str) -> Any:
        raw = await self._redis.get(self._prefix + key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        serialized = json.dumps(value, separators=(",", ":"))
        name = self._prefix + key
        if ttl is None:
            await self._redis.set(name, serialized)
        elif ttl <= 0:
            await self._redis.delete(name)
            return False
        else:
            await self._redis.setex(name, max(1, math.ceil(ttl)), serialized)
        return True

    async def delete(self, key: str) -> bool:
        await self._redis.delete(self._prefix + key)
        return True

    async def has(self, key: str) -> bool:
        return bool(await self._redis.exists(self._prefix + key))

    async def clear(self) -> bool:
        keys = [name async for name in self._redis.scan_iter(match=f"{self._prefix}*")]
        if keys:
            await self._redis.delete(*keys)
        return True


__all__ = ["Cache", "FileCache", "MemoryCache", "RedisCache"]
