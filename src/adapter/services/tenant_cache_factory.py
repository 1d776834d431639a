import logging

from src.adapter.services.memory_tenant_cache import MemoryTenantCache
from src.adapter.services.redis_tenant_cache import RedisTenantCache
from src.app.services.tenant_cache import ITenantCache

logger = logging.getLogger(__name__)


def build_tenant_cache(config) -> ITenantCache:
    backend = str(getattr(config, "CACHE_BACKEND", "memory")).lower()
    if backend == "redis":
        logger.info("Using Redis tenant cache")
        return RedisTenantCache.from_url(config.REDIS_URL)
    if backend != "memory":
        raise ValueError(f"Unknown CACHE_BACKEND: {backend}")
    return MemoryTenantCache()
