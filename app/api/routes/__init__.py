from __future__ import annotations

from app.api.routes.contact import router as contact_router
from app.api.routes.content import router as content_router
from app.api.routes.health import router as health_router

__all__ = ["contact_router", "content_router", "health_router"]
