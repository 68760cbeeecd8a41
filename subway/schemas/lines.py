"""Pydantic schemas for line management."""

from datetime import time
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from subway.models.line import Line, Section
from subway.schemas.stations import StationResponse

# Longest travel time accepted for a single section (one day)
MAX_SECTION_MINUTES = 24 * 60

# ==================== Request Schemas ====================


class CreateLineRequest(BaseModel):
    """Request to create a new line."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique line name (e.g., '2호선')")
    start_time: time = Field(default=time.min, description="First departure of the day")
    end_time: time = Field(default=time.max, description="Last departure of the day (time.max stands for 24:00)")
    interval: int = Field(..., ge=1, description="Minutes between departures")

    @model_validator(mode="after")
    def validate_time_range(self) -> "CreateLineRequest":
        """
        Validate that the line does not close before it opens.

        Raises:
            ValueError: If end_time is before start_time
        """
        if self.end_time < self.start_time:
            msg = "end_time must not be before start_time"
            raise ValueError(msg)
        return self


class AddStationRequest(BaseModel):
    """Request to register an existing station on a line."""

    station_id: UUID = Field(..., description="ID of the station record")


class CreateSectionRequest(BaseModel):
    """
    Request to connect two stations of a line.

    Positivity of duration and distance is checked by the line itself so
    that every rejected section is reported the same way (400). The bounds
    here only keep values within what the sections table can store.
    """

    upstream_station_id: UUID
    downstream_station_id: UUID
    duration_minutes: float = Field(
        ...,
        ge=0,
        le=MAX_SECTION_MINUTES,
        description="Travel time from upstream to downstream, in minutes",
    )
    distance: Decimal = Field(
        ...,
        max_digits=12,
        decimal_places=3,
        description="Travel distance from upstream to downstream, in kilometres (metre precision)",
    )


# ==================== Response Schemas ====================


class SectionResponse(BaseModel):
    """Response schema for a section."""

    id: UUID
    upstream_station_id: UUID
    downstream_station_id: UUID
    duration_minutes: float
    distance: float

    @classmethod
    def from_section(cls, section: Section) -> "SectionResponse":
        """Build the response from a section model."""
        return cls(
            id=section.id,
            upstream_station_id=section.upstream_station_id,
            downstream_station_id=section.downstream_station_id,
            duration_minutes=section.duration.minutes,
            distance=float(section.distance),
        )


class LineResponse(BaseModel):
    """Full response schema for a line with its derived station order."""

    id: UUID
    name: str
    start_time: time
    end_time: time
    interval: int
    stations: list[StationResponse] = Field(..., description="Stations in travel order")
    unconnected_stations: list[StationResponse] = Field(
        ..., description="Participating stations not yet referenced by any section"
    )
    sections: list[SectionResponse] = Field(..., description="Sections in travel order")
    total_duration_minutes: float
    total_distance: float

    @classmethod
    def from_line(cls, line: Line) -> "LineResponse":
        """Build the response from a line, deriving its station order."""
        ordered = line.get_ordered_stations()
        ordered_ids = {station.id for station in ordered}
        return cls(
            id=line.id,
            name=line.name,
            start_time=line.start_time,
            end_time=line.end_time,
            interval=line.interval,
            stations=[StationResponse.model_validate(station) for station in ordered],
            unconnected_stations=[
                StationResponse.model_validate(station)
                for station in sorted(line.stations, key=lambda s: s.name)
                if station.id not in ordered_ids
            ],
            sections=[SectionResponse.from_section(section) for section in line.get_sections_in_order()],
            total_duration_minutes=line.total_duration().minutes,
            total_distance=float(line.total_distance()),
        )


class LineListItemResponse(BaseModel):
    """Simplified response schema for line listings."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    start_time: time
    end_time: time
    interval: int
    station_count: int = Field(..., description="Number of participating stations")
    section_count: int = Field(..., description="Number of sections")
