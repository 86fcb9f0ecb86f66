"""Health check endpoint."""

from fastapi import APIRouter

from preptrack import __version__
from preptrack.core.syllabus import is_seeded
from preptrack.db.database import get_db_path
from preptrack.utils import clock
from preptrack.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Report version, database file and whether the syllabus is loaded."""
    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=clock.now_iso(),
        database=str(get_db_path()),
        syllabus_seeded=is_seeded(),
    )
