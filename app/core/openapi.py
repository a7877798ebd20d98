"""OpenAPI customization.

Adds tag descriptions and documents the 429 response that every
rate-limited operation can return, keeping documentation concerns out of the
app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "Content",
        "description": "Markdown documents (policies, tech stack) rendered by the site.",
    },
    {
        "name": "Contact",
        "description": "Contact form submission, verified with Cloudflare Turnstile.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]

RATE_LIMITED_PATHS = ("/api/contact",)


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with tags and rate limit docs."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path not in RATE_LIMITED_PATHS:
                continue
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                responses = method_obj.setdefault("responses", {})
                responses["429"] = {
                    "description": "Too many requests; retry after the Retry-After header.",
                    "headers": {
                        "Retry-After": {
                            "description": "Seconds to wait before retrying.",
                            "schema": {"type": "integer", "minimum": 1},
                        }
                    },
                }

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
