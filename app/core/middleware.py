"""HTTP middleware for request correlation and bot-probe blocking.

- ``request_id_middleware`` accepts an incoming X-Request-ID header or
  generates a UUID, exposes it to logs via contextvars and echoes it back
  together with the request duration.
- ``block_probe_middleware`` short-circuits requests for paths that only
  vulnerability scanners ask for (WordPress, dotfiles, admin panels).

Usage:
    app.middleware("http")(block_probe_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

SUSPICIOUS_PATH_PREFIXES: tuple[str, ...] = (
    "/wp-login.php",
    "/wp-admin",
    "/xmlrpc.php",
    "/wp-content",
    "/wp-includes",
    "/.env",
    "/.git",
    "/admin",
    "/phpmyadmin",
    "/administrator",
    "/user/login",
    "/sites/default",
    "/config.php",
    "/typo3",
    "/cgi-bin",
)


def is_suspicious_path(path: str) -> bool:
    """Return True when ``path`` matches a known bot probe prefix."""

    return path.startswith(SUSPICIOUS_PATH_PREFIXES)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Generate or propagate the request correlation id.

    The id is stored in contextvars for the duration of the request so every
    log line emitted while handling it carries the same ``request_id``. It is
    returned in the response under the configured header, next to an
    ``X-Request-Duration-ms`` timing header.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def block_probe_middleware(request: Request, call_next) -> Response:
    """Answer bot probe paths with an empty 404 without routing them."""

    path = request.url.path
    if is_suspicious_path(path):
        logger.info(
            "request.blocked_probe",
            extra={"request_path": path, "request_method": request.method},
        )
        return Response(status_code=404)

    return await call_next(request)
