import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple
from uuid import UUID

from src.app.services.tenant_cache import ITenantCache, tenant_key


class MemoryTenantCache(ITenantCache):
    """In-process TTL cache; entries are visible to this process only"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    async def get(self, tenant_id: UUID, key: str) -> Optional[Any]:
        cache_key = tenant_key(tenant_id, key)
        with self._lock:
            entry = self._entries.get(cache_key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[cache_key]
                return None
            return value

    async def set(self, tenant_id: UUID, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[tenant_key(tenant_id, key)] = (self._clock() + ttl_seconds, value)

    async def remove(self, tenant_id: UUID, key: str) -> None:
        with self._lock:
            self._entries.pop(tenant_key(tenant_id, key), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
