"""Route handlers for the web API."""

from preptrack.web.routes.admin import router as admin_router
from preptrack.web.routes.analytics import router as analytics_router
from preptrack.web.routes.auth import router as auth_router
from preptrack.web.routes.contact import router as contact_router
from preptrack.web.routes.countdown import router as countdown_router
from preptrack.web.routes.goals import router as goals_router
from preptrack.web.routes.groups import router as groups_router
from preptrack.web.routes.health import router as health_router
from preptrack.web.routes.me import router as me_router
from preptrack.web.routes.mistakes import router as mistakes_router
from preptrack.web.routes.premium import router as premium_router
from preptrack.web.routes.progress import router as progress_router
from preptrack.web.routes.revisions import router as revisions_router
from preptrack.web.routes.social import router as social_router
from preptrack.web.routes.syllabus import router as syllabus_router
from preptrack.web.routes.unban import router as unban_router

__all__ = [
    "admin_router",
    "analytics_router",
    "auth_router",
    "contact_router",
    "countdown_router",
    "goals_router",
    "groups_router",
    "health_router",
    "me_router",
    "mistakes_router",
    "premium_router",
    "progress_router",
    "revisions_router",
    "social_router",
    "syllabus_router",
    "unban_router",
]
