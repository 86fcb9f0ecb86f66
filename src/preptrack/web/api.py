"""FastAPI application factory.

Main entry point for the PrepTrack web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from preptrack import __version__
from preptrack.config.app_config import load_app_config
from preptrack.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    PrepTrackError,
    ValidationError,
)
from preptrack.core.syllabus import is_seeded, seed_default_syllabus
from preptrack.core.timetable import TimetableGenerationError
from preptrack.db.database import init_db
from preptrack.web.deps import reject_spectate_writes
from preptrack.web.routes import (
    admin_router,
    analytics_router,
    auth_router,
    contact_router,
    countdown_router,
    goals_router,
    groups_router,
    health_router,
    me_router,
    mistakes_router,
    premium_router,
    progress_router,
    revisions_router,
    social_router,
    syllabus_router,
    unban_router,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS: dict[type[PrepTrackError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    TimetableGenerationError: status.HTTP_502_BAD_GATEWAY,
}


def status_for(error: PrepTrackError) -> int:
    """HTTP status for a domain error (400 for unmapped subclasses)."""
    for error_type, code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: PrepTrackError) -> JSONResponse:
    """Render a domain error as JSON."""
    code = status_for(exc)
    logger.info("api.domain_error", path=request.url.path, status=code, error=exc.code)
    return JSONResponse(status_code=code, content=exc.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    config = load_app_config()
    init_db(config.db_path)
    seeded = 0
    if not is_seeded():
        seeded = seed_default_syllabus()
    logger.info("api_startup", db_path=str(config.db_path), syllabus_rows_seeded=seeded)
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="PrepTrack API",
        description="NEET/JEE preparation tracker: syllabus progress, goals, groups and admin console",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        dependencies=[Depends(reject_spectate_writes)],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(PrepTrackError, domain_error_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(me_router)
    app.include_router(syllabus_router)
    app.include_router(progress_router)
    app.include_router(analytics_router)
    app.include_router(goals_router)
    app.include_router(mistakes_router)
    app.include_router(groups_router)
    app.include_router(social_router)
    app.include_router(premium_router)
    app.include_router(unban_router)
    app.include_router(contact_router)
    app.include_router(revisions_router)
    app.include_router(countdown_router)
    app.include_router(admin_router)

    return app


# Default app instance for uvicorn
app = create_app()
