from contextlib import asynccontextmanager

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.logging_email_service import LoggingEmailService
from src.adapter.services.tenant_cache_factory import build_tenant_cache
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt
from src.app.services.email_service import IEmailService
from src.app.services.tenant_cache import ITenantCache
from src.app.services.tenant_context_resolver import (
    ROLE_CLAIM,
    USER_CLAIM,
    resolve_tenant_context,
)
from src.domain.context import TenantContext

engine = create_async_engine(
    ApplicationConfig.DB_URI,
    echo=False,
    future=True,
    connect_args={"timeout": ApplicationConfig.DB_TIMEOUT_SECONDS},
)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer()

_tenant_cache: ITenantCache = None
_email_service: IEmailService = None


@asynccontextmanager
async def unit_of_work_scope():
    """Fresh session per scope, for work outside a request (workers, on-demand ticks)"""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_uow_factory():
    return unit_of_work_scope


def get_tenant_cache() -> ITenantCache:
    global _tenant_cache
    if _tenant_cache is None:
        _tenant_cache = build_tenant_cache(ApplicationConfig)
    return _tenant_cache


def get_email_service() -> IEmailService:
    global _email_service
    if _email_service is None:
        _email_service = LoggingEmailService()
    return _email_service


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Returns:
        Decoded JWT payload containing user_id, tenant, role

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    payload = verify_jwt(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return payload


async def get_tenant_context(
    request: Request,
    current_user: dict = Depends(get_current_user),
) -> TenantContext:
    """
    Resolve the request's TenantContext from the tenant header and JWT claims.

    Raises:
        ClientError: 400 MISSING_TENANT_CONTEXT / INVALID_TENANT_ID,
                     403 FORBIDDEN_TENANT_MISMATCH
    """
    result = resolve_tenant_context(
        request.headers.get(ApplicationConfig.TENANT_HEADER),
        current_user,
        superadmin_role=ApplicationConfig.SUPERADMIN_ROLE,
    )
    if result.is_err():
        error = result.error
        if error.code == "FORBIDDEN_TENANT_MISMATCH":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    return result.value


async def require_superadmin(
    current_user: dict = Depends(get_current_user),
) -> TenantContext:
    """Admin routes: only a superadmin JWT gets through, as an elevated context"""
    if current_user.get(ROLE_CLAIM) != ApplicationConfig.SUPERADMIN_ROLE:
        raise ClientError(
            Error("INSUFFICIENT_ROLE", "Superadmin role required"),
            status_code=status.HTTP_403_FORBIDDEN,
        )
    user_id = current_user.get(USER_CLAIM)
    return TenantContext.elevated_all(user_id=str(user_id) if user_id else None)


def actor_of(context: TenantContext) -> str:
    """triggered_by value recorded on lifecycle events"""
    return f"superadmin:{context.user_id}" if context.user_id else "superadmin"
