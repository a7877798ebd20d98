"""Contact form pipeline.

A submission goes through, in order: configuration check, honeypot,
origin domain check, Cloudflare Turnstile verification, and finally is
forwarded to Formspree. Each rejection is raised as an ``AppError`` so the
route can translate it into the response the website expects.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.config import ContactSettings
from app.core.errors import ConfigurationAppError, UpstreamAppError, ValidationAppError
from app.schemas.contact import ContactSubmission

logger = logging.getLogger(__name__)

FORWARD_FAILED_MESSAGE = "Failed to submit contact form. Please try again."


class ContactService:
    """Verify and forward contact form submissions.

    Attributes:
        config: Contact integration settings.
        transport: Optional httpx transport, used to stub outbound calls.
    """

    def __init__(
        self,
        config: ContactSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport

    def ensure_configured(self) -> None:
        """Fail fast when an outbound integration is missing.

        Raises:
            ConfigurationAppError: If the Turnstile secret or the Formspree
                endpoint is not set.
        """
        if not self.config.turnstile_secret_key:
            logger.error("contact.turnstile_not_configured")
            raise ConfigurationAppError(
                code="turnstile_not_configured",
                message="Verification service is not configured.",
            )
        if not self.config.formspree_endpoint:
            logger.error("contact.formspree_not_configured")
            raise ConfigurationAppError(
                code="formspree_not_configured",
                message="Contact service is not configured.",
            )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self.transport,
        )

    async def submit(self, submission: ContactSubmission, *, client_ip: str | None = None) -> bool:
        """Run a validated submission through the pipeline.

        Args:
            submission: Validated form payload.
            client_ip: Originating client IP, passed on to Turnstile.

        Returns:
            True if the submission was forwarded, False if it was silently
            dropped by the honeypot.

        Raises:
            ConfigurationAppError: Integrations are not configured.
            ValidationAppError: Origin domain mismatch or failed verification.
            UpstreamAppError: Formspree rejected the submission.
        """
        self.ensure_configured()

        if submission.honeypot:
            logger.info("contact.honeypot_triggered")
            return False

        if submission.domain and submission.domain != self.config.allowed_domain:
            logger.warning(
                "contact.invalid_origin",
                extra={"domain": submission.domain, "allowed_domain": self.config.allowed_domain},
            )
            raise ValidationAppError(
                code="invalid_origin",
                message="Invalid submission origin.",
                details={"field": "domain"},
            )

        async with self._client() as client:
            await self._verify_turnstile(client, submission.turnstile_token, client_ip)
            await self._forward(client, submission)

        logger.info("contact.forwarded")
        return True

    async def _verify_turnstile(
        self,
        client: httpx.AsyncClient,
        token: str,
        client_ip: str | None,
    ) -> None:
        form = {
            "secret": self.config.turnstile_secret_key or "",
            "response": token,
        }
        if client_ip:
            form["remoteip"] = client_ip

        response = await client.post(self.config.turnstile_verify_url, data=form)
        result: dict[str, Any] = response.json()

        if not result.get("success"):
            logger.warning(
                "contact.verification_failed",
                extra={"error_codes": result.get("error-codes", [])},
            )
            raise ValidationAppError(
                code="verification_failed",
                message="Verification failed. Please try again.",
            )

    async def _forward(self, client: httpx.AsyncClient, submission: ContactSubmission) -> None:
        response = await client.post(
            self.config.formspree_endpoint or "",
            json=submission.formspree_payload(),
            headers={"Accept": "application/json"},
        )
        if response.is_success:
            return

        message = FORWARD_FAILED_MESSAGE
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            message = str(body["error"])

        logger.warning(
            "contact.forward_failed",
            extra={"upstream_status": response.status_code},
        )
        raise UpstreamAppError(
            code="formspree_rejected",
            message=message,
            details={"http_status": response.status_code},
        )
