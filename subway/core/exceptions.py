"""Domain exceptions for line and station management.

All errors are raised synchronously by the core before any mutation is
applied. The API layer translates them into HTTP responses (see
``subway.api.errors``).
"""

import uuid


class SubwayError(Exception):
    """Base exception for line and station management errors."""

    pass


class NotFoundError(SubwayError):
    """Raised when a line or station record does not exist."""

    def __init__(self, entity: str, entity_id: uuid.UUID) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found.")


class DuplicateNameError(SubwayError):
    """Raised when a name uniqueness constraint is violated in storage."""

    def __init__(self, entity: str, name: str) -> None:
        self.entity = entity
        self.name = name
        super().__init__(f"{entity} named '{name}' already exists.")


class DuplicateStationError(SubwayError):
    """Raised when a station is already a participant of the line."""

    def __init__(self, station_id: uuid.UUID) -> None:
        self.station_id = station_id
        super().__init__(f"Station '{station_id}' is already registered on this line.")


class StationNotFoundError(SubwayError):
    """Raised when a station is not a participant of the line."""

    def __init__(self, station_id: uuid.UUID) -> None:
        self.station_id = station_id
        super().__init__(f"Station '{station_id}' is not registered on this line.")


class InvalidSectionError(SubwayError):
    """
    Raised when a section cannot be added.

    Covers self-loops, non-positive duration or distance, sections that
    would branch, merge, close a cycle or start a disconnected path, and
    splits whose remainder would be non-positive.
    """

    pass


class InvalidGraphStateError(SubwayError):
    """Raised when the stored sections do not form a single simple path."""

    pass
