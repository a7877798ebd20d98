"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import contact_router, content_router, health_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import block_probe_middleware, request_id_middleware
from app.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Portfolio Site API",
        description=(
            "Backend for a personal portfolio and CV website: markdown content "
            "for policy pages and a contact form protected by a honeypot, "
            "Cloudflare Turnstile and a per-client rate limit."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    # Probe blocking is registered first so it runs innermost: blocked
    # requests still get a request id.
    app.middleware("http")(block_probe_middleware)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(content_router, prefix="/api")
    app.include_router(contact_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
