import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./tenants.db")
    DB_TIMEOUT_SECONDS = float(data.get("DB_TIMEOUT_SECONDS", 15))
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))
    CACHE_BACKEND = data.get("CACHE_BACKEND", "memory")
    USAGE_SUMMARY_CACHE_TTL_SECONDS = int(data.get("USAGE_SUMMARY_CACHE_TTL_SECONDS", 60))
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
    SUPERADMIN_ROLE = data.get("SUPERADMIN_ROLE", "superadmin")
    TENANT_HEADER = data.get("TENANT_HEADER", "X-Tenant-Id")

    # Lifecycle policy
    DEFAULT_PLAN_NAME = data.get("DEFAULT_PLAN_NAME", "Free")
    DEFAULT_GRACE_PERIOD_DAYS = int(data.get("DEFAULT_GRACE_PERIOD_DAYS", 30))
    DEFAULT_RETENTION_DAYS = int(data.get("DEFAULT_RETENTION_DAYS", 90))
    DEFAULT_API_LIMIT_PER_DAY = int(data.get("DEFAULT_API_LIMIT_PER_DAY", 1000))

    # Background workers
    ENABLE_BACKGROUND_WORKERS = bool(data.get("ENABLE_BACKGROUND_WORKERS", False))
    RECONCILIATION_INTERVAL_SECONDS = float(data.get("RECONCILIATION_INTERVAL_SECONDS", 300))
    PROVISIONING_INTERVAL_SECONDS = float(data.get("PROVISIONING_INTERVAL_SECONDS", 10))
    PROVISIONING_BATCH_SIZE = int(data.get("PROVISIONING_BATCH_SIZE", 5))
    PROVISIONING_TIMEOUT_SECONDS = float(data.get("PROVISIONING_TIMEOUT_SECONDS", 60))
    TENANT_OPERATION_TIMEOUT_SECONDS = float(data.get("TENANT_OPERATION_TIMEOUT_SECONDS", 30))
