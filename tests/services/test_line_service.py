"""Tests for LineService and StationService against the test database."""

import uuid
from datetime import time
from decimal import Decimal
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from subway.core.exceptions import (
    DuplicateNameError,
    DuplicateStationError,
    InvalidSectionError,
    NotFoundError,
    StationNotFoundError,
)
from subway.models import Line, Section, Station
from subway.models.values import Distance, Duration
from subway.schemas.lines import CreateLineRequest, CreateSectionRequest
from subway.services.line_service import LineService
from subway.services.station_service import StationService

if TYPE_CHECKING:
    from conftest import TestDatabaseContext


def section_request(up: Station, down: Station, minutes: float, distance: str) -> CreateSectionRequest:
    """Build a section request between two stations."""
    return CreateSectionRequest(
        upstream_station_id=up.id,
        downstream_station_id=down.id,
        duration_minutes=minutes,
        distance=Decimal(distance),
    )


@pytest.fixture
async def seeded(db_session: AsyncSession) -> tuple[Line, dict[str, Station]]:
    """Persisted line '2호선' with stations A to D registered and A -> B connected."""
    station_service = StationService(db_session)
    stations = {name: await station_service.create_station(name) for name in "ABCD"}

    service = LineService(db_session)
    line = await service.create_line(CreateLineRequest(name="2호선", interval=6))
    for station in stations.values():
        await service.add_station_to_line(line.id, station.id)
    line = await service.add_section(line.id, section_request(stations["A"], stations["B"], 10, "2.0"))
    return line, stations


class TestStationService:
    """Tests for StationService."""

    @pytest.mark.asyncio
    async def test_create_station(self, db_session: AsyncSession) -> None:
        """Station records are persisted with a generated id."""
        station = await StationService(db_session).create_station("강남")

        fetched = await StationService(db_session).get_station_by_id(station.id)

        assert fetched.name == "강남"

    @pytest.mark.asyncio
    async def test_duplicate_name_rejected(self, db_session: AsyncSession) -> None:
        """Station names are unique."""
        service = StationService(db_session)
        await service.create_station("강남")

        with pytest.raises(DuplicateNameError, match="already exists"):
            await service.create_station("강남")

        assert len(await service.list_stations()) == 1

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, db_session: AsyncSession) -> None:
        """A station needs a name."""
        with pytest.raises(ValueError, match="must not be empty"):
            await StationService(db_session).create_station("  ")

    @pytest.mark.asyncio
    async def test_get_missing_station(self, db_session: AsyncSession) -> None:
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            await StationService(db_session).get_station_by_id(uuid.uuid4())

        assert exc_info.value.entity == "Station"

    @pytest.mark.asyncio
    async def test_list_stations_ordered_by_name(self, db_session: AsyncSession) -> None:
        """Stations are listed alphabetically."""
        service = StationService(db_session)
        for name in ["C", "A", "B"]:
            await service.create_station(name)

        assert [s.name for s in await service.list_stations()] == ["A", "B", "C"]


class TestLineServiceCreate:
    """Tests for line creation and lookup."""

    @pytest.mark.asyncio
    async def test_create_line(self, db_session: AsyncSession) -> None:
        """A new line is persisted with its time table and interval."""
        request = CreateLineRequest(name="2호선", start_time=time(5, 30), end_time=time(23, 0), interval=6)

        line = await LineService(db_session).create_line(request)

        assert line.id is not None
        assert line.start_time == time(5, 30)
        assert line.end_time == time(23, 0)
        assert line.interval == 6

    @pytest.mark.asyncio
    async def test_duplicate_line_name_rejected(self, db_session: AsyncSession) -> None:
        """Creating '2호선' twice fails and leaves exactly one line."""
        service = LineService(db_session)
        await service.create_line(CreateLineRequest(name="2호선", interval=6))

        with pytest.raises(DuplicateNameError) as exc_info:
            await service.create_line(CreateLineRequest(name="2호선", interval=3))

        assert exc_info.value.entity == "Line"
        lines = await service.list_lines()
        assert len(lines) == 1
        assert lines[0].interval == 6

    @pytest.mark.asyncio
    async def test_get_missing_line(self, db_session: AsyncSession) -> None:
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError, match="Line"):
            await LineService(db_session).get_line_by_id(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_lines_ordered_by_name(self, db_session: AsyncSession) -> None:
        """Lines are listed by name."""
        service = LineService(db_session)
        await service.create_line(CreateLineRequest(name="B", interval=5))
        await service.create_line(CreateLineRequest(name="A", interval=5))

        assert [line.name for line in await service.list_lines()] == ["A", "B"]


class TestLineServiceStations:
    """Tests for station registration and removal."""

    @pytest.mark.asyncio
    async def test_add_station_twice_rejected(
        self, db_session: AsyncSession, seeded: tuple[Line, dict[str, Station]]
    ) -> None:
        """A station cannot be registered twice on the same line."""
        line, stations = seeded

        with pytest.raises(DuplicateStationError):
            await LineService(db_session).add_station_to_line(line.id, stations["A"].id)

    @pytest.mark.asyncio
    async def test_add_unknown_station_rejected(
        self, db_session: AsyncSession, seeded: tuple[Line, dict[str, Station]]
    ) -> None:
        """Only existing station records can join a line."""
        line, _ = seeded

        with pytest.raises(NotFoundError, match="Station"):
            await LineService(db_session).add_station_to_line(line.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_remove_station_merges_sections(
        self,
        db_engine: "TestDatabaseContext",
        db_session: AsyncSession,
        seeded: tuple[Line, dict[str, Station]],
    ) -> None:
        """Removing the middle station persists a single merged section."""
        line, stations = seeded
        service = LineService(db_session)
        await service.add_section(line.id, section_request(stations["B"], stations["C"], 5, "1.5"))

        await service.remove_station(line.id, stations["B"].id)

        async with db_engine.session_factory() as session:
            reloaded = await LineService(session).get_line_by_id(line.id)
            assert [s.name for s in reloaded.get_ordered_stations()] == ["A", "C"]
            (merged,) = reloaded.sections
            assert merged.duration == Duration.of_minutes(15)
            assert merged.distance == Distance("3.5")
            assert not reloaded.has_station(stations["B"].id)

    @pytest.mark.asyncio
    async def test_remove_non_participant_rejected(
        self, db_session: AsyncSession, seeded: tuple[Line, dict[str, Station]]
    ) -> None:
        """Removing a station that is not on the line raises StationNotFoundError."""
        line, _ = seeded
        outsider = await StationService(db_session).create_station("Z")

        with pytest.raises(StationNotFoundError):
            await LineService(db_session).remove_station(line.id, outsider.id)


class TestLineServiceSections:
    """Tests for persisted section mutations."""

    @pytest.mark.asyncio
    async def test_splice_persists(
        self,
        db_engine: "TestDatabaseContext",
        db_session: AsyncSession,
        seeded: tuple[Line, dict[str, Station]],
    ) -> None:
        """A splice is visible from a fresh session with the remainder on the second part."""
        line, stations = seeded

        await LineService(db_session).add_section(line.id, section_request(stations["A"], stations["C"], 4, "0.8"))

        async with db_engine.session_factory() as session:
            reloaded = await LineService(session).get_line_by_id(line.id)
            assert [s.name for s in reloaded.get_ordered_stations()] == ["A", "C", "B"]
            first, second = reloaded.get_sections_in_order()
            assert (first.duration, first.distance) == (Duration.of_minutes(4), Distance("0.8"))
            assert (second.duration, second.distance) == (Duration.of_minutes(6), Distance("1.2"))

    @pytest.mark.asyncio
    async def test_smallest_splice_remainder_persists(
        self,
        db_engine: "TestDatabaseContext",
        db_session: AsyncSession,
        seeded: tuple[Line, dict[str, Station]],
    ) -> None:
        """A one metre remainder is stored exactly and stays positive after reload."""
        line, stations = seeded

        await LineService(db_session).add_section(line.id, section_request(stations["A"], stations["C"], 4, "1.999"))

        async with db_engine.session_factory() as session:
            reloaded = await LineService(session).get_line_by_id(line.id)
            first, second = reloaded.get_sections_in_order()
            assert first.distance == Distance("1.999")
            assert second.distance == Distance("0.001")
            assert second.distance.is_positive()
            assert reloaded.total_distance() == Distance(2)

    @pytest.mark.asyncio
    async def test_sub_metre_distance_rejected(self, seeded: tuple[Line, dict[str, Station]]) -> None:
        """A distance finer than the stored precision never reaches the line."""
        _, stations = seeded

        with pytest.raises(ValueError, match="decimal places"):
            section_request(stations["A"], stations["C"], 4, "1.9996")

    @pytest.mark.asyncio
    async def test_oversized_merge_rejected(
        self,
        db_engine: "TestDatabaseContext",
        db_session: AsyncSession,
        seeded: tuple[Line, dict[str, Station]],
    ) -> None:
        """Removing a station whose merged section would not fit in storage is refused."""
        line, stations = seeded
        service = LineService(db_session)
        await service.add_section(line.id, section_request(stations["B"], stations["C"], 10, "999999999.000"))

        with pytest.raises(InvalidSectionError, match="would exceed"):
            await service.remove_station(line.id, stations["B"].id)

        async with db_engine.session_factory() as session:
            reloaded = await LineService(session).get_line_by_id(line.id)
            assert [s.name for s in reloaded.get_ordered_stations()] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_rejected_section_not_persisted(
        self,
        db_engine: "TestDatabaseContext",
        db_session: AsyncSession,
        seeded: tuple[Line, dict[str, Station]],
    ) -> None:
        """A splice that is too long raises and the stored sections are unchanged."""
        line, stations = seeded

        with pytest.raises(InvalidSectionError):
            await LineService(db_session).add_section(
                line.id, section_request(stations["A"], stations["C"], 4, "2.0")
            )

        async with db_engine.session_factory() as session:
            reloaded = await LineService(session).get_line_by_id(line.id)
            (only,) = reloaded.sections
            assert only.distance == Distance(2)

    @pytest.mark.asyncio
    async def test_rejected_section_logged(
        self, db_session: AsyncSession, seeded: tuple[Line, dict[str, Station]]
    ) -> None:
        """Rejected sections are logged as warnings."""
        line, stations = seeded

        with (
            patch("subway.services.line_service.logger") as mock_logger,
            pytest.raises(InvalidSectionError),
        ):
            await LineService(db_session).add_section(
                line.id, section_request(stations["C"], stations["D"], 4, "1.0")
            )

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args[0][0] == "line_section_rejected"

    @pytest.mark.asyncio
    async def test_section_to_unregistered_station_rejected(self, db_session: AsyncSession) -> None:
        """Stations must be registered on the line before they are connected."""
        station_service = StationService(db_session)
        a = await station_service.create_station("A")
        b = await station_service.create_station("B")
        service = LineService(db_session)
        line = await service.create_line(CreateLineRequest(name="1호선", interval=5))
        await service.add_station_to_line(line.id, a.id)

        with pytest.raises(StationNotFoundError):
            await service.add_section(line.id, section_request(a, b, 5, "1.0"))


class TestLineServiceDelete:
    """Tests for deleting lines."""

    @pytest.mark.asyncio
    async def test_delete_line_keeps_stations(
        self, db_session: AsyncSession, seeded: tuple[Line, dict[str, Station]]
    ) -> None:
        """Deleting a line removes its sections and links, never the station records."""
        line, _ = seeded

        await LineService(db_session).delete_line(line.id)

        with pytest.raises(NotFoundError):
            await LineService(db_session).get_line_by_id(line.id)
        assert await db_session.scalar(select(func.count()).select_from(Section)) == 0
        assert len(await StationService(db_session).list_stations()) == 4

    @pytest.mark.asyncio
    async def test_delete_missing_line(self, db_session: AsyncSession) -> None:
        """Deleting an unknown line raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await LineService(db_session).delete_line(uuid.uuid4())
