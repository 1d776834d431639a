from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.domain.entities import Tenant, TenantStatus
from src.domain.errors import ConcurrencyConflictError

FIXED_NOW = datetime(2026, 3, 15, 12, 0, 0)


async def apply_tenant_changes(tenant, expected_version, changes):
    """In-memory stand-in for the version-checked tenant update"""
    if tenant.version != expected_version:
        raise ConcurrencyConflictError(tenant.id, expected_version)
    for field, value in changes.items():
        setattr(tenant, field, value)
    tenant.version = expected_version + 1
    return tenant


async def _echo(entity):
    return entity


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def make_tenant():
    def _make(status: TenantStatus = TenantStatus.active, **fields) -> Tenant:
        return Tenant(
            id=fields.pop("id", uuid4()),
            name=fields.pop("name", "Acme Corp"),
            normalized_name=fields.pop("normalized_name", "acme corp"),
            admin_email=fields.pop("admin_email", "owner@acme.com"),
            status=status,
            version=fields.pop("version", 1),
            **fields,
        )

    return _make


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.tenants.compare_and_set = AsyncMock(side_effect=apply_tenant_changes)
    uow.lifecycle_events.append = AsyncMock(side_effect=_echo)
    uow.tenant_data.purge_tenant = AsyncMock(return_value={})
    uow.usage_metrics.delete_for_tenant = AsyncMock(return_value=0)
    uow.alerts.get_active = AsyncMock(return_value=None)
    uow.alerts.create = AsyncMock(side_effect=_echo)
    return uow
