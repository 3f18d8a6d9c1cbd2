"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from academia.api.dependencies import (
    close_orchestrators,
    close_store,
    init_event_manager,
    init_orchestrators,
    init_store,
)
from academia.api.models import APIResponse
from academia.api.routes import enrollments, events, promotions
from academia.config import Settings
from academia.credentials import CredentialIssuer, PasswordHasher
from academia.enrollment import EnrollmentOrchestrator, GroupFullError
from academia.exceptions import AcademiaError, InvalidRequestError
from academia.prerequisites import PrerequisiteNotMetError
from academia.promotion import EligibilityService, PromotionOrchestrator
from academia.store import DuplicateUserError, NotFoundError, PersistenceError
from academia.structure import NoTeacherAvailableError, StructureResolver, TeacherSelector

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan (startup/shutdown)."""
    settings: Settings = app.state.settings
    store = init_store(settings.db_path)
    event_manager = init_event_manager()

    selector = TeacherSelector(settings.pool_teacher_id)
    enrollment = EnrollmentOrchestrator(
        store,
        event_manager=event_manager,
        resolver=StructureResolver(store, teacher_selector=selector),
        issuer=CredentialIssuer(PasswordHasher(settings.bcrypt_rounds)),
    )
    promotion = PromotionOrchestrator(
        store, event_manager=event_manager, teacher_selector=selector
    )
    init_orchestrators(enrollment, promotion, EligibilityService(store))
    app.state.store = store
    logger.info("Academia API started (db=%s)", settings.db_path)

    yield
    # Shutdown
    close_orchestrators()
    close_store()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=message).model_dump(),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Academia API",
        description="REST API for Academia - Enrollment and Pricing",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings or Settings.from_env()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(
        _request: Request, exc: InvalidRequestError
    ) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(_request: Request, exc: ValueError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(DuplicateUserError)
    async def duplicate_user_handler(_request: Request, exc: DuplicateUserError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(GroupFullError)
    async def group_full_handler(_request: Request, exc: GroupFullError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(PrerequisiteNotMetError)
    async def prerequisite_handler(
        _request: Request, exc: PrerequisiteNotMetError
    ) -> JSONResponse:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    @app.exception_handler(NoTeacherAvailableError)
    async def no_teacher_handler(_request: Request, exc: NoTeacherAvailableError) -> JSONResponse:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    @app.exception_handler(PersistenceError)
    async def persistence_handler(_request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Persistence failure: %s", exc.__cause__.__class__.__name__)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(AcademiaError)
    async def academia_error_handler(_request: Request, exc: AcademiaError) -> JSONResponse:
        logger.error("Unhandled domain error: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    # Include routers
    app.include_router(enrollments.router, prefix="/api/v1")
    app.include_router(promotions.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")

    return app
