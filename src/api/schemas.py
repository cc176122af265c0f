"""Pydantic response schemas for the hosuto API.

Image responses are raw streamed bytes and 404s are plain text, so only the
operator endpoints and the error body need a schema.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UpdateResponse(BaseModel):
    """Result of a forced cache refresh (``GET /.update``)."""

    updated: str = Field(description="ISO-8601 time the cache was rewritten")
    size: str = Field(description='Serialized directory size, e.g. "0.42 MiB"')


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
