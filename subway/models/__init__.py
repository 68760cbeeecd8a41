"""Database models for the subway line service."""

# Import all models to register them with SQLAlchemy metadata
from subway.models.base import Base, BaseModel
from subway.models.line import Line, Section, line_stations
from subway.models.station import Station
from subway.models.values import Distance, Duration, TimeTable

__all__ = [
    # Base
    "Base",
    "BaseModel",
    # Line aggregate
    "Line",
    "Section",
    "line_stations",
    # Stations
    "Station",
    # Value types
    "Distance",
    "Duration",
    "TimeTable",
]
