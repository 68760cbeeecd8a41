"""Stations API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.database import get_db
from subway.models.station import Station
from subway.schemas.stations import CreateStationRequest, StationResponse
from subway.services.station_service import StationService

router = APIRouter(prefix="/stations", tags=["stations"])


@router.get("", response_model=list[StationResponse])
async def list_stations(db: AsyncSession = Depends(get_db)) -> list[Station]:
    """List all stations ordered by name."""
    service = StationService(db)
    return await service.list_stations()


@router.post("", response_model=StationResponse, status_code=status.HTTP_201_CREATED)
async def create_station(
    request: CreateStationRequest,
    db: AsyncSession = Depends(get_db),
) -> Station:
    """
    Create a station record.

    Raises:
        DuplicateNameError: 409 if a station with the same name exists
    """
    service = StationService(db)
    return await service.create_station(request.name)


@router.get("/{station_id}", response_model=StationResponse)
async def get_station(
    station_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> Station:
    """
    Get a station by ID.

    Raises:
        NotFoundError: 404 if the station does not exist
    """
    service = StationService(db)
    return await service.get_station_by_id(station_id)
