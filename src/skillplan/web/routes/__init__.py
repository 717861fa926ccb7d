"""Web routes for skillplan."""

from skillplan.web.routes.queue import router as queue_router
from skillplan.web.routes.skills import router as skills_router

__all__ = ["queue_router", "skills_router"]
