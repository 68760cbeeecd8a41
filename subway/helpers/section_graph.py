"""
Section graph helpers.

Pure functions over a line's section collection. A line never stores its
station order; the order is derived from the sections, which must form a
single simple directed path (every station has at most one incoming and at
most one outgoing section, no cycles, one connected component).

Mutations are expressed as a ``SectionChange`` plan computed from the
current sections. Planning validates everything up front, so a caller that
applies the plan only after it was returned never leaves the graph half
edited.

These helpers work on anything shaped like a section (the ORM ``Section``
model, or ``SectionSpec`` in tests) and do not touch the database.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar

from subway.core.exceptions import InvalidGraphStateError, InvalidSectionError

if TYPE_CHECKING:
    from subway.models.values import Distance, Duration


class SectionLike(Protocol):
    """Structural type for a directed, weighted section."""

    @property
    def upstream_station_id(self) -> uuid.UUID: ...

    @property
    def downstream_station_id(self) -> uuid.UUID: ...

    @property
    def duration(self) -> Duration: ...

    @property
    def distance(self) -> Distance: ...


S = TypeVar("S", bound=SectionLike)

# Largest distance the sections table can hold (NUMERIC(12, 3))
MAX_SECTION_DISTANCE = Decimal("999999999.999")


@dataclass(frozen=True)
class SectionSpec:
    """A section that a plan asks to create."""

    upstream_station_id: uuid.UUID
    downstream_station_id: uuid.UUID
    duration: Duration
    distance: Distance


@dataclass(frozen=True)
class SectionChange(Generic[S]):
    """Sections to remove and sections to create, applied together."""

    removed: tuple[S, ...] = field(default_factory=tuple)
    added: tuple[SectionSpec, ...] = field(default_factory=tuple)


def index_by_upstream(sections: Iterable[S]) -> dict[uuid.UUID, S]:
    """
    Map each upstream station id to its outgoing section.

    Raises:
        InvalidGraphStateError: If a station has more than one outgoing section
    """
    index: dict[uuid.UUID, S] = {}
    for section in sections:
        if section.upstream_station_id in index:
            msg = f"Station '{section.upstream_station_id}' has more than one outgoing section"
            raise InvalidGraphStateError(msg)
        index[section.upstream_station_id] = section
    return index


def index_by_downstream(sections: Iterable[S]) -> dict[uuid.UUID, S]:
    """
    Map each downstream station id to its incoming section.

    Raises:
        InvalidGraphStateError: If a station has more than one incoming section
    """
    index: dict[uuid.UUID, S] = {}
    for section in sections:
        if section.downstream_station_id in index:
            msg = f"Station '{section.downstream_station_id}' has more than one incoming section"
            raise InvalidGraphStateError(msg)
        index[section.downstream_station_id] = section
    return index


def order_sections(sections: Sequence[S]) -> list[S]:
    """
    Return the sections in travel order, from the path start to the path end.

    The result is recomputed from scratch on every call.

    Examples:
        >>> order_sections([])
        []
        >>> # sections B->C, A->B
        >>> [(s.upstream_station_id, s.downstream_station_id) for s in order_sections([bc, ab])]
        [(A, B), (B, C)]

    Raises:
        InvalidGraphStateError: If there is no unique start station, the path
            loops back on itself, or some section is not reachable from the start
    """
    if not sections:
        return []

    by_upstream = index_by_upstream(sections)
    by_downstream = index_by_downstream(sections)

    starts = [station_id for station_id in by_upstream if station_id not in by_downstream]
    if len(starts) != 1:
        msg = f"Sections must have exactly one start station, found {len(starts)}"
        raise InvalidGraphStateError(msg)

    ordered: list[S] = []
    visited = {starts[0]}
    current = starts[0]
    while (section := by_upstream.get(current)) is not None:
        current = section.downstream_station_id
        if current in visited:
            msg = f"Cycle detected at station '{current}'"
            raise InvalidGraphStateError(msg)
        visited.add(current)
        ordered.append(section)

    if len(ordered) != len(sections):
        msg = f"{len(sections) - len(ordered)} section(s) are not reachable from the start station"
        raise InvalidGraphStateError(msg)

    return ordered


def order_station_ids(sections: Sequence[SectionLike]) -> list[uuid.UUID]:
    """
    Return station ids in travel order.

    Examples:
        >>> order_station_ids([])
        []
        >>> # sections B->C, A->B
        >>> order_station_ids([bc, ab])
        [A, B, C]
    """
    ordered = order_sections(sections)
    if not ordered:
        return []
    return [ordered[0].upstream_station_id, *(section.downstream_station_id for section in ordered)]


def _split_remainder(
    original: SectionLike,
    duration: Duration,
    distance: Distance,
) -> tuple[Duration, Distance]:
    """
    Compute what is left of ``original`` once a part of it is carved out.

    Raises:
        InvalidSectionError: If the carved part is not strictly shorter than
            the original in both duration and distance
    """
    if duration >= original.duration:
        msg = (
            f"Section duration {duration.value} must be shorter than the section being split "
            f"({original.duration.value})"
        )
        raise InvalidSectionError(msg)
    if distance >= original.distance:
        msg = (
            f"Section distance {distance.value} must be shorter than the section being split "
            f"({original.distance.value})"
        )
        raise InvalidSectionError(msg)
    return original.duration - duration, original.distance - distance


def plan_add_section(
    sections: Sequence[S],
    upstream_station_id: uuid.UUID,
    downstream_station_id: uuid.UUID,
    duration: Duration,
    distance: Distance,
) -> SectionChange[S]:
    """
    Plan the insertion of a directed section into the path.

    Four structural cases are supported:
    - empty path: the section becomes the whole path
    - extend end: upstream is the current end station, downstream is new
    - extend start: downstream is the current start station, upstream is new
    - splice: the new station lands inside an existing section, which is
      replaced by two sections; the part not covered by the new section
      receives the original duration/distance minus the new one

    Raises:
        InvalidSectionError: For self loops, non-positive duration or distance,
            sections touching the path at both ends (cycle, branch or
            duplicate), sections not touching a non-empty path, and splits
            that are not strictly shorter than the section they split
        InvalidGraphStateError: If ``sections`` already violates the path invariants
    """
    if upstream_station_id == downstream_station_id:
        msg = "Section upstream and downstream stations must differ"
        raise InvalidSectionError(msg)
    if not distance.is_positive():
        msg = f"Section distance must be positive, got {distance.value}"
        raise InvalidSectionError(msg)
    if not duration.is_positive():
        msg = f"Section duration must be positive, got {duration.value}"
        raise InvalidSectionError(msg)
    if distance.value > MAX_SECTION_DISTANCE:
        msg = f"Section distance must not exceed {MAX_SECTION_DISTANCE}, got {distance.value}"
        raise InvalidSectionError(msg)

    new_section = SectionSpec(upstream_station_id, downstream_station_id, duration, distance)

    if not sections:
        return SectionChange(added=(new_section,))

    by_upstream = index_by_upstream(sections)
    by_downstream = index_by_downstream(sections)

    def on_path(station_id: uuid.UUID) -> bool:
        return station_id in by_upstream or station_id in by_downstream

    upstream_on_path = on_path(upstream_station_id)
    downstream_on_path = on_path(downstream_station_id)

    if upstream_on_path and downstream_on_path:
        msg = "Both stations are already connected on this line"
        raise InvalidSectionError(msg)
    if not upstream_on_path and not downstream_on_path:
        msg = "Section must connect to an existing station on this line"
        raise InvalidSectionError(msg)

    if upstream_on_path:
        # upstream -> X becomes upstream -> downstream -> X
        if (outgoing := by_upstream.get(upstream_station_id)) is None:
            return SectionChange(added=(new_section,))
        rest_duration, rest_distance = _split_remainder(outgoing, duration, distance)
        return SectionChange(
            removed=(outgoing,),
            added=(
                new_section,
                SectionSpec(downstream_station_id, outgoing.downstream_station_id, rest_duration, rest_distance),
            ),
        )

    # Y -> downstream becomes Y -> upstream -> downstream
    if (incoming := by_downstream.get(downstream_station_id)) is None:
        return SectionChange(added=(new_section,))
    rest_duration, rest_distance = _split_remainder(incoming, duration, distance)
    return SectionChange(
        removed=(incoming,),
        added=(
            SectionSpec(incoming.upstream_station_id, upstream_station_id, rest_duration, rest_distance),
            new_section,
        ),
    )


def plan_delete_station(sections: Sequence[S], station_id: uuid.UUID) -> SectionChange[S]:
    """
    Plan the removal of a station from the path.

    A station in the middle of the path has its incoming and outgoing
    sections merged into one, summing duration and distance. An end
    station only loses its single section. A station with no section
    yields an empty plan.

    Raises:
        InvalidSectionError: If the merged section would be longer than
            MAX_SECTION_DISTANCE
    """
    incoming = index_by_downstream(sections).get(station_id)
    outgoing = index_by_upstream(sections).get(station_id)

    if incoming is not None and outgoing is not None:
        if (incoming.distance + outgoing.distance).value > MAX_SECTION_DISTANCE:
            msg = f"Merged section distance would exceed {MAX_SECTION_DISTANCE}"
            raise InvalidSectionError(msg)
        merged = SectionSpec(
            incoming.upstream_station_id,
            outgoing.downstream_station_id,
            incoming.duration + outgoing.duration,
            incoming.distance + outgoing.distance,
        )
        return SectionChange(removed=(incoming, outgoing), added=(merged,))

    removed = tuple(section for section in (incoming, outgoing) if section is not None)
    return SectionChange(removed=removed)
