"""Line management service.

Loads and persists ``Line`` aggregates. All graph rules live on the
aggregate itself; this service only resolves records, applies one mutation
per call and commits it. A domain error raised by the aggregate leaves the
session untouched, so nothing is committed.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.exceptions import DuplicateNameError, NotFoundError, SubwayError
from subway.core.telemetry import service_span
from subway.models.line import Line
from subway.models.values import Distance, Duration, TimeTable
from subway.schemas.lines import CreateLineRequest, CreateSectionRequest
from subway.services.station_service import StationService

logger = structlog.get_logger(__name__)


class LineService:
    """Service for managing lines, their stations and their sections."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the line service.

        Args:
            db: Database session
        """
        self.db = db
        self.station_service = StationService(db)

    async def create_line(self, request: CreateLineRequest) -> Line:
        """
        Create a new line without stations.

        Args:
            request: Line creation request

        Returns:
            Created line

        Raises:
            DuplicateNameError: If a line with the same name already exists
        """
        line = Line.create(request.name, TimeTable(request.start_time, request.end_time), request.interval)
        self.db.add(line)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("line_create_rejected", name=line.name, reason="integrity_error")
            raise DuplicateNameError("Line", line.name) from e

        logger.info("line_created", line_id=str(line.id), name=line.name, interval=line.interval)
        return line

    async def get_line_by_id(self, line_id: uuid.UUID) -> Line:
        """
        Get a line by ID with its stations and sections.

        Raises:
            NotFoundError: If the line does not exist
        """
        result = await self.db.execute(select(Line).where(Line.id == line_id))
        if not (line := result.scalar_one_or_none()):
            raise NotFoundError("Line", line_id)
        return line

    async def list_lines(self) -> list[Line]:
        """List all lines ordered by name."""
        result = await self.db.execute(select(Line).order_by(Line.name))
        return list(result.scalars().all())

    async def delete_line(self, line_id: uuid.UUID) -> None:
        """
        Delete a line together with its sections and station links.

        Station records themselves are kept.

        Raises:
            NotFoundError: If the line does not exist
        """
        line = await self.get_line_by_id(line_id)
        line.clear_stations()
        await self.db.delete(line)
        await self.db.commit()
        logger.info("line_deleted", line_id=str(line_id))

    async def add_station_to_line(self, line_id: uuid.UUID, station_id: uuid.UUID) -> Line:
        """
        Register an existing station on a line.

        Raises:
            NotFoundError: If the line or the station record does not exist
            DuplicateStationError: If the station is already on the line
        """
        line = await self.get_line_by_id(line_id)
        station = await self.station_service.get_station_by_id(station_id)

        with service_span("line.add_station", "line-service", line_id=str(line_id), station_id=str(station_id)):
            line.add_station(station)
            await self.db.commit()

        logger.info("line_station_added", line_id=str(line_id), station_id=str(station_id))
        return line

    async def add_section(self, line_id: uuid.UUID, request: CreateSectionRequest) -> Line:
        """
        Add a section to a line, splicing it into an existing section when needed.

        Raises:
            NotFoundError: If the line does not exist
            StationNotFoundError: If either station is not on the line
            InvalidSectionError: If the section would break the line's single path
        """
        line = await self.get_line_by_id(line_id)

        with service_span(
            "line.add_section",
            "line-service",
            line_id=str(line_id),
            upstream_station_id=str(request.upstream_station_id),
            downstream_station_id=str(request.downstream_station_id),
        ) as span:
            try:
                line.add_section(
                    request.upstream_station_id,
                    request.downstream_station_id,
                    Duration.of_minutes(request.duration_minutes),
                    Distance(request.distance),
                )
            except SubwayError as e:
                logger.warning("line_section_rejected", line_id=str(line_id), error=str(e))
                raise
            await self.db.commit()
            span.set_attribute("line.section_count", len(line.sections))

        logger.info(
            "line_section_added",
            line_id=str(line_id),
            upstream_station_id=str(request.upstream_station_id),
            downstream_station_id=str(request.downstream_station_id),
            section_count=len(line.sections),
        )
        return line

    async def remove_station(self, line_id: uuid.UUID, station_id: uuid.UUID) -> Line:
        """
        Remove a station from a line, merging its neighbouring sections.

        Raises:
            NotFoundError: If the line does not exist
            StationNotFoundError: If the station is not on the line
            InvalidSectionError: If merging the neighbouring sections would exceed the distance limit
        """
        line = await self.get_line_by_id(line_id)

        with service_span("line.remove_station", "line-service", line_id=str(line_id), station_id=str(station_id)):
            line.delete_station(station_id)
            await self.db.commit()

        logger.info(
            "line_station_removed",
            line_id=str(line_id),
            station_id=str(station_id),
            section_count=len(line.sections),
        )
        return line
