"""Station record management service."""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.exceptions import DuplicateNameError, NotFoundError
from subway.models.station import Station

logger = structlog.get_logger(__name__)


class StationService:
    """Service for creating and looking up station records."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the station service.

        Args:
            db: Database session
        """
        self.db = db

    async def create_station(self, name: str) -> Station:
        """
        Create a station record.

        Args:
            name: Unique station name

        Returns:
            Created station

        Raises:
            ValueError: If the name is blank
            DuplicateNameError: If the storage layer rejects the name as a duplicate
        """
        station = Station.create(name)
        self.db.add(station)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("station_create_rejected", name=station.name, reason="integrity_error")
            raise DuplicateNameError("Station", station.name) from e

        logger.info("station_created", station_id=str(station.id), name=station.name)
        return station

    async def get_station_by_id(self, station_id: uuid.UUID) -> Station:
        """
        Get a station by ID.

        Raises:
            NotFoundError: If the station does not exist
        """
        result = await self.db.execute(select(Station).where(Station.id == station_id))
        if not (station := result.scalar_one_or_none()):
            raise NotFoundError("Station", station_id)
        return station

    async def list_stations(self) -> list[Station]:
        """List all stations ordered by name."""
        result = await self.db.execute(select(Station).order_by(Station.name))
        return list(result.scalars().all())
