"""Pydantic schemas for the content API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ContentDocument(BaseModel):
    """A markdown document exposed through the content API."""

    title: str = Field(
        ...,
        description="Front matter title, falling back to its name, then the slug.",
    )
    body: str = Field(
        ..., description="Raw markdown body with the front matter stripped."
    )


class ContentErrorResponse(BaseModel):
    error: str = Field(..., examples=["Not found"])
