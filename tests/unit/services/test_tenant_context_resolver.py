"""
Unit tests for resolve_tenant_context

Header and claim must agree for normal users; superadmins are elevated.
"""

from uuid import UUID, uuid4

from src.app.services.tenant_context_resolver import resolve_tenant_context
from src.domain.context import TenantContext


def test_matching_header_and_claim_resolves_tenant():
    tenant_id = uuid4()

    result = resolve_tenant_context(
        str(tenant_id), {"user_id": "u-1", "tenant": str(tenant_id), "role": "admin"}
    )

    assert result.is_ok()
    context = result.value
    assert context.tenant_id == tenant_id
    assert context.elevated is False
    assert context.user_id == "u-1"


def test_header_for_other_tenant_is_forbidden():
    result = resolve_tenant_context(
        str(uuid4()), {"user_id": "u-1", "tenant": str(uuid4()), "role": "admin"}
    )

    assert result.is_err()
    assert result.error.code == "FORBIDDEN_TENANT_MISMATCH"


def test_mismatch_is_detected_before_parsing():
    # Same UUID, different spelling: compared as strings, so still a mismatch
    tenant_id = uuid4()

    result = resolve_tenant_context(
        str(tenant_id).upper(), {"tenant": str(tenant_id), "role": "member"}
    )

    assert result.is_err()
    assert result.error.code == "FORBIDDEN_TENANT_MISMATCH"


def test_missing_header_for_normal_user():
    result = resolve_tenant_context(None, {"tenant": str(uuid4()), "role": "member"})

    assert result.is_err()
    assert result.error.code == "MISSING_TENANT_CONTEXT"
    assert result.error.reason == "header"


def test_missing_claim_for_normal_user():
    result = resolve_tenant_context(str(uuid4()), {"role": "member"})

    assert result.is_err()
    assert result.error.code == "MISSING_TENANT_CONTEXT"
    assert result.error.reason == "claim"


def test_non_uuid_tenant_id_is_rejected():
    result = resolve_tenant_context("acme", {"tenant": "acme", "role": "member"})

    assert result.is_err()
    assert result.error.code == "INVALID_TENANT_ID"


def test_superadmin_without_header_is_elevated_across_tenants():
    result = resolve_tenant_context(None, {"user_id": "root", "role": "superadmin"})

    assert result.is_ok()
    context = result.value
    assert context.elevated is True
    assert context.tenant_id is None
    assert context.is_cross_tenant is True


def test_superadmin_with_header_is_elevated_for_that_tenant():
    tenant_id = uuid4()

    result = resolve_tenant_context(str(tenant_id), {"role": "superadmin"})

    assert result.is_ok()
    assert result.value == TenantContext.elevated_for(tenant_id)
    assert result.value.is_cross_tenant is False


def test_superadmin_role_name_is_configurable():
    result = resolve_tenant_context(None, {"role": "root"}, superadmin_role="root")

    assert result.is_ok()
    assert result.value.elevated is True


def test_header_whitespace_is_ignored():
    tenant_id = uuid4()

    result = resolve_tenant_context(f"  {tenant_id} ", {"tenant": str(tenant_id)})

    assert result.is_ok()
    assert result.value.tenant_id == UUID(str(tenant_id))
