"""Pydantic schemas for station records."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CreateStationRequest(BaseModel):
    """Request to create a station record."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique station name")


class StationResponse(BaseModel):
    """Response schema for a station."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
