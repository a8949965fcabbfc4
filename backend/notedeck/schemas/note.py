"""
NoteDeck Backend — Pydantic Request/Response Schemas
=====================================================

What:  The API contract between the frontend and the backend.
How:   FastAPI validates and serializes through these models and builds the
       OpenAPI document from them.

Schemas stay separate from the SQLAlchemy models so the wire format can
evolve independently of the hosted table.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Note Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """A single note as rendered on a card: title, description, delete by id."""
    id: uuid.UUID = Field(description="Store-assigned note identifier (UUID)")
    title: str = Field(description="Note title")
    description: str = Field(description="Note description (may be empty)")
    created_at: datetime = Field(description="When the note was created (UTC ISO 8601)")

    model_config = {"from_attributes": True}


class NoteListResponse(BaseModel):
    """
    The full notes collection.

    No pagination: the listing returns every note the store holds, in the
    store's default order.
    """
    notes: List[NoteResponse] = Field(description="Every note currently stored")
    total_count: int = Field(description="Number of notes returned")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "unauthorized",
            "message": "You need to sign in to view this page",
            "details": {"login_url": "/auth/login"},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    identity: str = Field(description="Identity provider: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
