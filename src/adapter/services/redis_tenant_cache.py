import json
import logging
import math
from typing import Any, Optional
from uuid import UUID

from redis.asyncio import Redis

from src.app.services.tenant_cache import ITenantCache, tenant_key

logger = logging.getLogger(__name__)


class RedisTenantCache(ITenantCache):
    """Shared cache across replicas; values stored as JSON with a TTL"""

    def __init__(self, client: Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisTenantCache":
        return cls(Redis.from_url(url, decode_responses=True))

    async def get(self, tenant_id: UUID, key: str) -> Optional[Any]:
        raw = await self.client.get(tenant_key(tenant_id, key))
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, tenant_id: UUID, key: str, value: Any, ttl_seconds: float) -> None:
        await self.client.set(
            tenant_key(tenant_id, key),
            json.dumps(value),
            px=max(1, math.ceil(ttl_seconds * 1000)),
        )

    async def remove(self, tenant_id: UUID, key: str) -> None:
        await self.client.delete(tenant_key(tenant_id, key))
