from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID


def tenant_key(tenant_id: UUID, key: str) -> str:
    return f"tenant:{tenant_id}:{key}"


class ITenantCache(ABC):
    """
    Tenant-namespaced cache with TTL.

    Values must be JSON-serializable. get_or_set does not guarantee a single
    factory call under concurrent misses.
    """

    @abstractmethod
    async def get(self, tenant_id: UUID, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, tenant_id: UUID, key: str, value: Any, ttl_seconds: float) -> None:
        pass

    @abstractmethod
    async def remove(self, tenant_id: UUID, key: str) -> None:
        pass

    async def get_or_set(
        self,
        tenant_id: UUID,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl_seconds: float,
    ) -> Any:
        value = await self.get(tenant_id, key)
        if value is not None:
            return value
        value = await factory()
        if value is not None:
            await self.set(tenant_id, key, value, ttl_seconds)
        return value
