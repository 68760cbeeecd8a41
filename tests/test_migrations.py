"""Tests for the Alembic migration chain."""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect
from subway.main import _check_alembic_migrations


@pytest.fixture
def alembic_config(tmp_path: Path) -> Config:
    """Alembic config pointed at a throwaway SQLite file."""
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", f"sqlite:///{tmp_path / 'migrations.db'}")
    config.set_main_option("configure_logger", "false")
    return config


def test_upgrade_creates_line_tables(alembic_config: Config) -> None:
    """Test that upgrading to head creates every table and stamps the head revision."""
    command.upgrade(alembic_config, "head")

    engine = create_engine(alembic_config.get_main_option("sqlalchemy.url"))
    try:
        assert {"stations", "lines", "line_stations", "sections"} <= set(inspect(engine).get_table_names())
        with engine.connect() as conn:
            assert _check_alembic_migrations(conn) is not None
    finally:
        engine.dispose()


def test_downgrade_drops_line_tables(alembic_config: Config) -> None:
    """Test that downgrading to base removes the tables again."""
    command.upgrade(alembic_config, "head")
    command.downgrade(alembic_config, "base")

    engine = create_engine(alembic_config.get_main_option("sqlalchemy.url"))
    try:
        assert "sections" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
