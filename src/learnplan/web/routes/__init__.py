"""Route handlers for the Web API."""

from learnplan.web.routes.consultations import router as consultations_router
from learnplan.web.routes.health import router as health_router
from learnplan.web.routes.plans import router as plans_router
from learnplan.web.routes.profiles import router as profiles_router
from learnplan.web.routes.resources import router as resources_router

__all__ = [
    "consultations_router",
    "health_router",
    "plans_router",
    "profiles_router",
    "resources_router",
]
