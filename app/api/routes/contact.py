import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.core.client_ip import resolve_client_ip
from app.core.config import settings
from app.core.errors import AppError
from app.core.exception_handlers import status_code_for
from app.core.logging import log_error
from app.core.rate_limit import enforce_rate_limit
from app.schemas.contact import (
    DEFAULT_VALIDATION_MESSAGE,
    ContactAccepted,
    ContactErrorResponse,
    ContactSubmission,
    first_validation_message,
)
from app.services.contact_service import ContactService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contact"])

UNEXPECTED_ERROR_MESSAGE = "Unexpected error. Please try again in a moment."


def get_contact_service() -> ContactService:
    return ContactService(settings.contact)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/contact",
    response_model=ContactAccepted,
    responses={
        400: {"model": ContactErrorResponse},
        500: {"model": ContactErrorResponse},
        502: {"model": ContactErrorResponse},
    },
    dependencies=[Depends(enforce_rate_limit)],
)
async def submit_contact(
    request: Request,
    service: ContactService = Depends(get_contact_service),
) -> ContactAccepted | JSONResponse:
    """Verify a contact form submission and forward it to Formspree.

    Honeypot submissions are acknowledged with ``{"ok": true}`` but never
    forwarded. All failures answer ``{"error": <message>}``.
    """
    try:
        service.ensure_configured()

        try:
            payload = await request.json()
            submission = ContactSubmission.model_validate(payload)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error(400, DEFAULT_VALIDATION_MESSAGE)
        except ValidationError as exc:
            logger.info(
                "contact.invalid_input",
                extra={"error_count": exc.error_count()},
            )
            return _error(400, first_validation_message(exc))

        await service.submit(submission, client_ip=resolve_client_ip(request))
        return ContactAccepted()
    except AppError as exc:
        return _error(status_code_for(exc), exc.message)
    except Exception as exc:
        log_error(exc, component="contact", action="submit")
        return _error(500, UNEXPECTED_ERROR_MESSAGE)
