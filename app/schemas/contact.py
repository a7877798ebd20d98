"""Pydantic schemas for contact form submissions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError

# Friendly messages keyed by (field, pydantic error type); the frontend shows
# them verbatim next to the form.
_ERROR_MESSAGES: dict[tuple[str, str], str] = {
    ("email", "missing"): "Please provide a valid email address.",
    ("email", "value_error"): "Please provide a valid email address.",
    ("email", "string_type"): "Please provide a valid email address.",
    ("message", "missing"): "Message cannot be empty.",
    ("message", "string_too_short"): "Message cannot be empty.",
    ("message", "string_too_long"): "Message is a bit too long. Please shorten it.",
    ("turnstileToken", "missing"): "Verification is required.",
    ("turnstileToken", "string_too_short"): "Verification is required.",
    ("phone", "string_too_long"): "Phone number is too long.",
}

DEFAULT_VALIDATION_MESSAGE = "Invalid input."


class ContactSubmission(BaseModel):
    """Contact form payload as posted by the website."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    message: str = Field(..., min_length=1, max_length=2000)
    domain: str | None = Field(None, min_length=1)
    turnstile_token: str = Field(..., alias="turnstileToken", min_length=1)
    honeypot: str | None = None

    def formspree_payload(self) -> dict[str, str]:
        """Fields forwarded to Formspree (never the verification token)."""
        return self.model_dump(
            exclude={"turnstile_token"},
            exclude_none=True,
            mode="json",
        )


class ContactAccepted(BaseModel):
    ok: bool = True


class ContactErrorResponse(BaseModel):
    error: str


def first_validation_message(exc: ValidationError) -> str:
    """Return the user-facing message for the first validation issue."""

    errors = exc.errors()
    if not errors:
        return DEFAULT_VALIDATION_MESSAGE

    first = errors[0]
    loc = first.get("loc") or ()
    field = str(loc[0]) if loc else ""
    return _ERROR_MESSAGES.get((field, first.get("type", "")), DEFAULT_VALIDATION_MESSAGE)
