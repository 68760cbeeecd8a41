"""Lines API endpoints for managing lines, their stations and sections."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.database import get_db
from subway.schemas.lines import (
    AddStationRequest,
    CreateLineRequest,
    CreateSectionRequest,
    LineListItemResponse,
    LineResponse,
)
from subway.services.line_service import LineService

router = APIRouter(prefix="/lines", tags=["lines"])


# ==================== Line Endpoints ====================


@router.get("", response_model=list[LineListItemResponse])
async def list_lines(db: AsyncSession = Depends(get_db)) -> list[LineListItemResponse]:
    """
    List all lines with station and section counts.

    Args:
        db: Database session

    Returns:
        List of lines ordered by name
    """
    service = LineService(db)
    lines = await service.list_lines()

    return [
        LineListItemResponse(
            id=line.id,
            name=line.name,
            start_time=line.start_time,
            end_time=line.end_time,
            interval=line.interval,
            station_count=len(line.stations),
            section_count=len(line.sections),
        )
        for line in lines
    ]


@router.post("", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
async def create_line(
    request: CreateLineRequest,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Create a new line.

    The line starts with no stations. Register stations and connect them
    with sections afterwards.

    Args:
        request: Line creation request
        db: Database session

    Returns:
        Created line

    Raises:
        DuplicateNameError: 409 if a line with the same name exists
    """
    service = LineService(db)
    line = await service.create_line(request)
    return LineResponse.from_line(line)


@router.get("/{line_id}", response_model=LineResponse)
async def get_line(
    line_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Get a line with its stations in travel order.

    Args:
        line_id: Line UUID
        db: Database session

    Returns:
        Line with derived station order and ordered sections

    Raises:
        NotFoundError: 404 if the line does not exist
    """
    service = LineService(db)
    line = await service.get_line_by_id(line_id)
    return LineResponse.from_line(line)


@router.delete("/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_line(
    line_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a line and its sections. Station records are kept.

    Args:
        line_id: Line UUID
        db: Database session

    Raises:
        NotFoundError: 404 if the line does not exist
    """
    service = LineService(db)
    await service.delete_line(line_id)


# ==================== Station Endpoints ====================


@router.post("/{line_id}/stations", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
async def add_station_to_line(
    line_id: UUID,
    request: AddStationRequest,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Register an existing station on a line without connecting it.

    Args:
        line_id: Line UUID
        request: Station to register
        db: Database session

    Returns:
        Updated line

    Raises:
        NotFoundError: 404 if the line or station does not exist
        DuplicateStationError: 409 if the station is already on the line
    """
    service = LineService(db)
    line = await service.add_station_to_line(line_id, request.station_id)
    return LineResponse.from_line(line)


@router.delete("/{line_id}/stations/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_station(
    line_id: UUID,
    station_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Remove a station from a line, joining the sections on either side of it.

    Args:
        line_id: Line UUID
        station_id: Station UUID
        db: Database session

    Raises:
        NotFoundError: 404 if the line does not exist
        StationNotFoundError: 404 if the station is not on the line
        InvalidSectionError: 400 if the merged section would be too long to store
    """
    service = LineService(db)
    await service.remove_station(line_id, station_id)


# ==================== Section Endpoints ====================


@router.post("/{line_id}/sections", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
async def add_section(
    line_id: UUID,
    request: CreateSectionRequest,
    db: AsyncSession = Depends(get_db),
) -> LineResponse:
    """
    Connect two stations of a line.

    When the new section falls inside an existing one, the existing
    section is split and the remainder keeps the difference in duration
    and distance.

    Args:
        line_id: Line UUID
        request: Section to add
        db: Database session

    Returns:
        Updated line

    Raises:
        NotFoundError: 404 if the line does not exist
        StationNotFoundError: 404 if either station is not on the line
        InvalidSectionError: 400 if the section cannot be added
    """
    service = LineService(db)
    line = await service.add_section(line_id, request)
    return LineResponse.from_line(line)
