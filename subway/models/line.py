"""Line aggregate: participating stations and the sections between them."""

import uuid
from datetime import time, timedelta
from decimal import Decimal
from typing import Self

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Interval,
    Numeric,
    String,
    Table,
    Time,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from subway.core.exceptions import DuplicateStationError, InvalidGraphStateError, StationNotFoundError
from subway.helpers.section_graph import (
    SectionChange,
    SectionSpec,
    order_sections,
    plan_add_section,
    plan_delete_station,
)
from subway.models.base import Base, BaseModel
from subway.models.station import Station
from subway.models.values import Distance, Duration, TimeTable

# Participant stations of a line; a station joins a line before any section references it
line_stations = Table(
    "line_stations",
    Base.metadata,
    Column("line_id", Uuid(as_uuid=True), ForeignKey("lines.id", ondelete="CASCADE"), primary_key=True),
    Column("station_id", Uuid(as_uuid=True), ForeignKey("stations.id", ondelete="RESTRICT"), primary_key=True),
)


class Section(BaseModel):
    """Directed, weighted edge between two stations of a line."""

    __tablename__ = "sections"

    line_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("lines.id", ondelete="CASCADE"),
        nullable=False,
    )
    upstream_station_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("stations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    downstream_station_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("stations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    duration_value: Mapped[timedelta] = mapped_column(
        Interval,
        nullable=False,
    )
    distance_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 3),
        nullable=False,
    )

    # Relationships
    line: Mapped["Line"] = relationship(back_populates="sections")

    __table_args__ = (
        CheckConstraint("upstream_station_id <> downstream_station_id", name="distinct_endpoints"),
        Index("ix_sections_line", "line_id"),
    )

    @classmethod
    def from_spec(cls, spec: SectionSpec) -> Self:
        """Build a section from a planned section."""
        return cls(
            upstream_station_id=spec.upstream_station_id,
            downstream_station_id=spec.downstream_station_id,
            duration_value=spec.duration.value,
            distance_value=spec.distance.value,
        )

    @property
    def duration(self) -> Duration:
        """Travel time of the section."""
        return Duration(self.duration_value)

    @property
    def distance(self) -> Distance:
        """Travel distance of the section."""
        return Distance(self.distance_value)

    def __repr__(self) -> str:
        """String representation of the section."""
        return (
            f"<Section(id={self.id}, up={self.upstream_station_id}, down={self.downstream_station_id}, "
            f"duration={self.duration_value}, distance={self.distance_value})>"
        )


class Line(BaseModel):
    """
    A line: operating hours, departure interval, participants and sections.

    The station order is never stored. It is derived on every read from the
    sections, which always form a single simple path (see
    ``subway.helpers.section_graph``). Every mutation validates first and
    only then touches ``sections``/``stations``, so a raised error leaves
    the line unchanged.
    """

    __tablename__ = "lines"

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    start_time: Mapped[time] = mapped_column(
        Time,
        nullable=False,
    )
    end_time: Mapped[time] = mapped_column(
        Time,
        nullable=False,
    )
    interval: Mapped[int] = mapped_column(
        "interval_minutes",
        Integer,
        nullable=False,
        comment="Minutes between departures",
    )

    # Relationships
    stations: Mapped[list[Station]] = relationship(
        secondary=line_stations,
        lazy="selectin",
    )
    sections: Mapped[list[Section]] = relationship(
        back_populates="line",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (CheckConstraint("interval_minutes > 0", name="positive_interval"),)

    @classmethod
    def create(cls, name: str, time_table: TimeTable, interval: int) -> Self:
        """
        Create a line with no stations.

        Raises:
            ValueError: If the name is blank or the interval is not a positive integer
        """
        if not name or not name.strip():
            msg = "Line name must not be empty"
            raise ValueError(msg)
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            msg = f"Line interval must be a positive integer, got {interval!r}"
            raise ValueError(msg)
        return cls(
            name=name.strip(),
            start_time=time_table.start,
            end_time=time_table.end,
            interval=interval,
            stations=[],
            sections=[],
        )

    @property
    def time_table(self) -> TimeTable:
        """Operating hours of the line."""
        return TimeTable(self.start_time, self.end_time)

    @time_table.setter
    def time_table(self, value: TimeTable) -> None:
        self.start_time = value.start
        self.end_time = value.end

    # ==================== Participants ====================

    def has_station(self, station_id: uuid.UUID) -> bool:
        """Check whether a station participates in the line."""
        return any(station.id == station_id for station in self.stations)

    def _get_participant(self, station_id: uuid.UUID) -> Station:
        for station in self.stations:
            if station.id == station_id:
                return station
        raise StationNotFoundError(station_id)

    def add_station(self, station: Station) -> None:
        """
        Register a station on the line without connecting it.

        Raises:
            DuplicateStationError: If the station already participates
        """
        if self.has_station(station.id):
            raise DuplicateStationError(station.id)
        self.stations.append(station)

    def clear_stations(self) -> None:
        """Drop every section and participant (used before deleting the line)."""
        self.sections.clear()
        self.stations.clear()

    # ==================== Sections ====================

    def add_section(
        self,
        upstream_station_id: uuid.UUID,
        downstream_station_id: uuid.UUID,
        duration: Duration,
        distance: Distance | Decimal | float | int,
    ) -> None:
        """
        Connect two participating stations with a directed section.

        The section either starts a new path, extends the path at one end,
        or is spliced into the existing section it falls inside.

        Raises:
            StationNotFoundError: If either station is not a participant
            InvalidSectionError: If the section breaks the single path invariants
        """
        self._get_participant(upstream_station_id)
        self._get_participant(downstream_station_id)
        if not isinstance(distance, Distance):
            distance = Distance(distance)

        change = plan_add_section(self.sections, upstream_station_id, downstream_station_id, duration, distance)
        self._apply(change)

    def delete_station(self, station_id: uuid.UUID) -> None:
        """
        Remove a station from the line, joining its neighbours if it sat between two.

        Raises:
            StationNotFoundError: If the station is not a participant
            InvalidSectionError: If the merged section would be too long to store
        """
        station = self._get_participant(station_id)
        change = plan_delete_station(self.sections, station_id)
        self._apply(change)
        self.stations.remove(station)

    def _apply(self, change: SectionChange[Section]) -> None:
        for section in change.removed:
            self.sections.remove(section)
        self.sections.extend(Section.from_spec(spec) for spec in change.added)

    # ==================== Derived views ====================

    def get_sections_in_order(self) -> list[Section]:
        """Sections from the start station to the end station."""
        return order_sections(self.sections)

    def get_ordered_stations(self) -> list[Station]:
        """
        Stations from the start of the line to its end, derived from the sections.

        Returns an empty list while the line has no sections.

        Raises:
            InvalidGraphStateError: If the sections do not form a single path
        """
        ordered = self.get_sections_in_order()
        if not ordered:
            return []
        station_ids = [ordered[0].upstream_station_id, *(section.downstream_station_id for section in ordered)]
        try:
            return [self._get_participant(station_id) for station_id in station_ids]
        except StationNotFoundError as e:
            msg = f"Section references station '{e.station_id}' which is not on the line"
            raise InvalidGraphStateError(msg) from e

    def get_start_station(self) -> Station | None:
        """First station of the line, or None if the line has no sections."""
        ordered = self.get_ordered_stations()
        return ordered[0] if ordered else None

    def total_duration(self) -> Duration:
        """End-to-end travel time."""
        return sum((section.duration for section in self.sections), Duration(timedelta(0)))

    def total_distance(self) -> Distance:
        """End-to-end travel distance."""
        return sum((section.distance for section in self.sections), Distance(0))

    def __repr__(self) -> str:
        """String representation of the line."""
        return f"<Line(id={self.id}, name={self.name}, interval={self.interval})>"
