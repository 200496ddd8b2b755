from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_auth.api.deps import build_token_service
from blog_auth.api.routers.auth import router as auth_router
from blog_auth.api.routers.oauth import router as oauth_router
from blog_auth.api.routers.users import router as users_router
from blog_auth.api.schemas.common import ApiResponse
from blog_auth.application.use_cases.register_user import RegisterUserUseCase
from blog_auth.infrastructure.db.engine import create_schema, get_engine
from blog_auth.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from blog_auth.infrastructure.db.seeds.seed_accounts_defaults import seed_accounts_defaults
from blog_auth.infrastructure.security.password_hasher import PasswordHasher
from blog_auth.shared.config import Settings, get_settings
from blog_auth.shared.logging_config import configure_logging


logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error."


def _bootstrap_database(settings: Settings) -> None:
    if not settings.postgres_dsn:
        logger.warning("startup: database_skipped reason=POSTGRES_DSN not set")
        return
    engine = get_engine(settings.postgres_dsn)
    if settings.db_auto_create:
        create_schema(engine)
        logger.info("startup: schema_created")

    users_repo = SqlAccountsRepository(engine)
    created = seed_accounts_defaults(
        settings=settings,
        users_port=users_repo,
        register_user=RegisterUserUseCase(users_port=users_repo, password_hasher=PasswordHasher()),
    )
    logger.info("startup: seeded accounts=%s", created)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    # An unusable signing key must stop the process before it serves requests.
    build_token_service()
    _bootstrap_database(settings)
    logger.info("startup: ready algorithm=%s", settings.jwt_algorithm)
    yield


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.error(message).model_dump(),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.info(
        "http_error: status=%s method=%s path=%s detail=%s",
        exc.status_code,
        request.method,
        request.url.path,
        exc.detail,
    )
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())[1:])
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    message = "; ".join(parts) or "Invalid request."
    logger.info("validation_error: method=%s path=%s detail=%s", request.method, request.url.path, message)
    return _error_response(400, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error: method=%s path=%s", request.method, request.url.path)
    return _error_response(500, INTERNAL_ERROR_MESSAGE)


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(title="Blog Auth API", lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Authorization"],
    )
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)

    application.include_router(auth_router)
    application.include_router(oauth_router)
    application.include_router(users_router)
    return application


app = create_app()
