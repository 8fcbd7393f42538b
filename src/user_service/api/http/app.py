"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from user_service.api.http.app_data import ApplicationDependencies
from user_service.api.http.routers.health import router as health_router
from user_service.api.http.routers.users import router as users_router
from user_service.api.utils.app_startup import configure_logging
from user_service.core.exceptions import InvalidInputError, UserServiceError
from user_service.core.services import DbSessionService, RedisService
from user_service.core.storage import build_record_cache
from user_service.runtime.context import get_config


async def build_dependencies() -> ApplicationDependencies:
    """Create the process-wide database engine, Redis client and cache."""
    config = get_config()

    database_service = DbSessionService(config.database)
    if config.database.synchronize:
        database_service.create_all()

    redis_service = RedisService(config.redis)
    record_cache = await build_record_cache(
        redis_service.get_client(),
        require_redis=config.app.environment == "production" and config.redis.enabled,
    )

    return ApplicationDependencies(
        database_service=database_service,
        record_cache=record_cache,
        cache_config=config.cache,
        redis_service=redis_service,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    # Tests install their own dependencies before startup.
    owns_dependencies = getattr(app.state, "app_dependencies", None) is None
    if owns_dependencies:
        app.state.app_dependencies = await build_dependencies()

    try:
        yield
    finally:
        logger.info("Shutting down application")
        if owns_dependencies:
            deps: ApplicationDependencies = app.state.app_dependencies
            if deps.redis_service is not None:
                await deps.redis_service.close()
            deps.database_service.dispose()
            app.state.app_dependencies = None


def _error_body(
    request: Request, status_code: int, error: str, message: Any
) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "error": error,
        "message": message,
        "path": request.url.path,
        "method": request.method,
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": getattr(request.state, "request_id", None),
    }


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())[1:])
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return messages


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(UserServiceError)
    async def service_error_handler(request: Request, exc: UserServiceError) -> JSONResponse:
        message: Any = exc.message
        if isinstance(exc, InvalidInputError):
            message = exc.details
        logger.bind(status_code=exc.status_code, error_type=type(exc).__name__).info(
            "request.rejected: {}", exc.message
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, exc.error, message),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = InvalidInputError(_validation_messages(exc))
        return JSONResponse(
            status_code=error.status_code,
            content=_error_body(request, error.status_code, error.error, error.details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        phrase = HTTPStatus(exc.status_code).phrase
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, phrase, exc.detail),
            headers=getattr(exc, "headers", None),
        )


def create_app() -> FastAPI:
    config = get_config()

    app = FastAPI(
        title="User Service",
        lifespan=lifespan,
        docs_url=None if config.app.environment == "production" else "/docs",
        redoc_url=None if config.app.environment == "production" else "/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }

        start = time.perf_counter()
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)
            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                return JSONResponse(
                    status_code=500,
                    content=_error_body(request, 500, "internal_error", "Internal Server Error"),
                    headers={"X-Request-ID": request_id},
                )

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")
            response.headers.setdefault("X-Request-ID", request_id)
            return response

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(users_router)
    return app


app = create_app()

__all__ = ["app", "build_dependencies", "create_app"]
