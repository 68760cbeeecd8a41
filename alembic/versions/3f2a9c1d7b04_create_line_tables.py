"""create_line_tables

Revision ID: 3f2a9c1d7b04
Revises:
Create Date: 2026-10-18 09:12:44.381205

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b04"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "stations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_stations"),
    )
    op.create_index("ix_stations_name", "stations", ["name"], unique=True)

    op.create_table(
        "lines",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("interval_minutes", sa.Integer(), nullable=False, comment="Minutes between departures"),
        *_timestamps(),
        sa.CheckConstraint("interval_minutes > 0", name="ck_lines_positive_interval"),
        sa.PrimaryKeyConstraint("id", name="pk_lines"),
    )
    op.create_index("ix_lines_name", "lines", ["name"], unique=True)

    # Participants: a station can be on a line before any section references it
    op.create_table(
        "line_stations",
        sa.Column("line_id", sa.Uuid(), nullable=False),
        sa.Column("station_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["line_id"], ["lines.id"], name="fk_line_stations_line_id_lines", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["station_id"], ["stations.id"], name="fk_line_stations_station_id_stations", ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("line_id", "station_id", name="pk_line_stations"),
    )

    # No order column: station order is derived from the sections
    op.create_table(
        "sections",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("line_id", sa.Uuid(), nullable=False),
        sa.Column("upstream_station_id", sa.Uuid(), nullable=False),
        sa.Column("downstream_station_id", sa.Uuid(), nullable=False),
        sa.Column("duration_value", sa.Interval(), nullable=False),
        sa.Column("distance_value", sa.Numeric(precision=12, scale=3), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "upstream_station_id <> downstream_station_id", name="ck_sections_distinct_endpoints"
        ),
        sa.ForeignKeyConstraint(["line_id"], ["lines.id"], name="fk_sections_line_id_lines", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["upstream_station_id"],
            ["stations.id"],
            name="fk_sections_upstream_station_id_stations",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["downstream_station_id"],
            ["stations.id"],
            name="fk_sections_downstream_station_id_stations",
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_sections"),
    )
    op.create_index("ix_sections_line", "sections", ["line_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_sections_line", table_name="sections")
    op.drop_table("sections")
    op.drop_table("line_stations")
    op.drop_index("ix_lines_name", table_name="lines")
    op.drop_table("lines")
    op.drop_index("ix_stations_name", table_name="stations")
    op.drop_table("stations")
