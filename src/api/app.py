import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from src.domain.errors import CrossTenantAccessError, TenantIsolationError

from .error import ClientError, ServerError

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code} {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_isolation_error(request: Request, exc: TenantIsolationError):
    if isinstance(exc, CrossTenantAccessError):
        code, status_code = "FORBIDDEN_TENANT_MISMATCH", status.HTTP_403_FORBIDDEN
    else:
        code, status_code = "MISSING_TENANT_CONTEXT", status.HTTP_400_BAD_REQUEST
    logger.warning(f"Tenant isolation violation on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code, content={"error": {"code": code, "message": str(exc)}}
    )


def build_lifespan(ApplicationConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from src.adapter.repositories.tenant_repository import validate_sort_columns
        from src.app.use_cases.provisioning import SeedPlansUseCase
        from src.app.workers.runner import build_workers, start_workers, stop_workers
        from src.depends import engine, get_email_service, get_tenant_cache, unit_of_work_scope

        validate_sort_columns()

        if ApplicationConfig.AUTO_CREATE_TABLES:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
            async with unit_of_work_scope() as uow:
                await SeedPlansUseCase(uow).execute()

        stop_event = asyncio.Event()
        tasks = []
        if ApplicationConfig.ENABLE_BACKGROUND_WORKERS:
            workers = build_workers(
                ApplicationConfig, unit_of_work_scope, get_email_service(), get_tenant_cache()
            )
            tasks = start_workers(workers, stop_event)

        yield

        if tasks:
            await stop_workers(tasks, stop_event)
        await engine.dispose()

    return lifespan


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(
        title="Tenant Lifecycle Service",
        version="0.1.0",
        lifespan=build_lifespan(ApplicationConfig),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import health_check, lifecycle, organization, provisioning, usage, webhooks

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(provisioning.router)
    app.include_router(lifecycle.router)
    app.include_router(usage.router)
    app.include_router(organization.router)
    app.include_router(webhooks.router)

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(TenantIsolationError, handle_isolation_error)

    return app
