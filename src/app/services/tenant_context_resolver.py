"""
Tenant Context Resolver

Derives the TenantContext of a request from the tenant header and the
authenticated identity claims. The header alone is never trusted.
"""

import logging
from typing import Mapping, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.domain.context import TenantContext

logger = logging.getLogger(__name__)

TENANT_CLAIM = "tenant"
ROLE_CLAIM = "role"
USER_CLAIM = "user_id"


def _parse_tenant_id(raw: str) -> Optional[UUID]:
    try:
        return UUID(raw)
    except (ValueError, AttributeError, TypeError):
        return None


def resolve_tenant_context(
    header_value: Optional[str],
    claims: Mapping[str, object],
    superadmin_role: str = "superadmin",
) -> Result[TenantContext]:
    """
    Resolve the tenant context of one request.

    Business Logic:
    1. Superadmin without header: elevated across all tenants
    2. Superadmin with header: elevated, scoped to that tenant
    3. Anyone else: header and tenant claim must both be present and equal
    4. Tenant id must be a UUID

    Errors:
        - MISSING_TENANT_CONTEXT: header or claim absent for a normal user
        - FORBIDDEN_TENANT_MISMATCH: header names a tenant other than the claim
        - INVALID_TENANT_ID: tenant id is not a UUID
    """
    header = header_value.strip() if header_value else None
    user_id = claims.get(USER_CLAIM)
    user_id = str(user_id) if user_id is not None else None

    if claims.get(ROLE_CLAIM) == superadmin_role:
        if not header:
            return Return.ok(TenantContext.elevated_all(user_id=user_id))
        tenant_id = _parse_tenant_id(header)
        if tenant_id is None:
            return Return.err(Error("INVALID_TENANT_ID", "Tenant id must be a UUID"))
        return Return.ok(TenantContext.elevated_for(tenant_id, user_id=user_id))

    claim = claims.get(TENANT_CLAIM)
    claim = str(claim).strip() if claim else None
    if not header or not claim:
        return Return.err(
            Error(
                "MISSING_TENANT_CONTEXT",
                "Tenant header and tenant claim are both required",
                reason="header" if not header else "claim",
            )
        )

    # Compared as given, before any parsing
    if header != claim:
        logger.warning(f"Tenant mismatch for user {user_id}: header={header} claim={claim}")
        return Return.err(
            Error("FORBIDDEN_TENANT_MISMATCH", "Tenant header does not match authenticated tenant")
        )

    tenant_id = _parse_tenant_id(header)
    if tenant_id is None:
        return Return.err(Error("INVALID_TENANT_ID", "Tenant id must be a UUID"))
    return Return.ok(TenantContext.for_tenant(tenant_id, user_id=user_id))
