# =============================================================================
# core/models/event.py - Event Schemas
# =============================================================================
# These models define the API contract for event operations:
# - EventCreate: Input for creating a new event
# - EventResponse: Output when returning an event to clients
# - EventList: Output for the public event list
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 120


class EventCreate(BaseModel):
    """
    Schema for creating a new event.

    The title is trimmed before validation and must fit on a single line.

    Example:
        {
            "title": "Bike repair night"
        }
    """

    title: str = Field(
        ...,
        description="Event title (1-120 characters, single line)",
        examples=["Bike repair night"],
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        if len(value) > TITLE_MAX_LENGTH:
            raise ValueError("Title is too long")
        if any(ch in value for ch in "\r\n\t"):
            raise ValueError("Title must be a single line")
        return value


class EventResponse(BaseModel):
    """
    Schema for returning event data to clients.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "title": "Bike repair night",
            "created_by_id": "660e8400-e29b-41d4-a716-446655440001",
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": null
        }
    """

    id: str = Field(..., description="Unique event identifier")
    title: str = Field(..., description="Event title")
    created_by_id: str | None = Field(default=None, description="User who created the event")
    created_at: datetime = Field(..., description="Timestamp when the event was created")
    updated_at: datetime | None = Field(default=None, description="Timestamp of the last update")

    model_config = ConfigDict(from_attributes=True)


class EventList(BaseModel):
    """Schema for the public event list."""

    events: list[EventResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
