"""Tests for main API endpoints and startup checks."""

from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient
from subway import __version__
from subway.main import _check_alembic_migrations, app, lifespan


def test_root_endpoint(client: TestClient) -> None:
    """Test root endpoint returns correct response."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Subway Lines API"
    assert data["version"] == __version__


def test_health_check(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_readiness_check(async_client: AsyncClient) -> None:
    """Test readiness check endpoint."""
    response = await async_client.get("/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_openapi_lists_line_routes() -> None:
    """Test the generated OpenAPI schema exposes the line and station routes."""
    paths = app.openapi()["paths"]

    assert "/api/v1/lines/{line_id}/sections" in paths
    assert "/api/v1/lines/{line_id}/stations/{station_id}" in paths
    assert "/api/v1/stations" in paths


# Tests for _check_alembic_migrations


def test_check_alembic_migrations_no_ini_file() -> None:
    """Test migration check when alembic.ini doesn't exist."""
    mock_context = Mock()
    mock_context.get_current_revision.return_value = "abc123"

    with (
        patch("subway.main.migration.MigrationContext.configure", return_value=mock_context),
        patch("subway.main.Path") as mock_path,
        patch("subway.main.settings") as mock_settings,
    ):
        mock_settings.ALEMBIC_INI_PATH = "alembic.ini"
        mock_path.return_value.exists.return_value = False

        result = _check_alembic_migrations(Mock())

        assert result == "abc123"


def test_check_alembic_migrations_db_not_initialized() -> None:
    """Test migration check when database hasn't been initialized."""
    mock_context = Mock()
    mock_context.get_current_revision.return_value = None

    with (
        patch("subway.main.migration.MigrationContext.configure", return_value=mock_context),
        patch("subway.main.Path") as mock_path,
        patch("subway.main.Config"),
        patch("subway.main.script.ScriptDirectory.from_config"),
        patch("subway.main.settings") as mock_settings,
    ):
        mock_settings.ALEMBIC_INI_PATH = "alembic.ini"
        mock_path.return_value.exists.return_value = True

        with pytest.raises(RuntimeError, match="Database has not been initialized"):
            _check_alembic_migrations(Mock())


def test_check_alembic_migrations_needs_migration() -> None:
    """Test migration check when migrations are needed."""
    mock_context = Mock()
    mock_context.get_current_revision.return_value = "old_revision"
    mock_script_dir = Mock()
    mock_script_dir.get_current_head.return_value = "new_revision"

    with (
        patch("subway.main.migration.MigrationContext.configure", return_value=mock_context),
        patch("subway.main.Path") as mock_path,
        patch("subway.main.Config"),
        patch("subway.main.script.ScriptDirectory.from_config", return_value=mock_script_dir),
        patch("subway.main.settings") as mock_settings,
    ):
        mock_settings.ALEMBIC_INI_PATH = "alembic.ini"
        mock_path.return_value.exists.return_value = True

        with pytest.raises(RuntimeError, match="Database migration required"):
            _check_alembic_migrations(Mock())


# Tests for lifespan


@pytest.mark.asyncio
async def test_lifespan_debug_mode() -> None:
    """Test lifespan skips validation in DEBUG mode."""
    with (
        patch("subway.main.settings") as mock_settings,
        patch("subway.main.get_engine") as mock_get_engine,
    ):
        mock_settings.DEBUG = True

        async with lifespan(Mock()):
            pass

        mock_get_engine.assert_not_called()


@pytest.mark.asyncio
async def test_lifespan_production_success() -> None:
    """Test lifespan validates the database and completes startup and shutdown."""
    with (
        patch("subway.main.settings") as mock_settings,
        patch("subway.main._check_alembic_migrations", return_value="test_revision") as mock_check,
    ):
        mock_settings.DEBUG = False

        async with lifespan(Mock()):
            pass

        mock_check.assert_called_once()


@pytest.mark.asyncio
async def test_lifespan_production_runtime_error() -> None:
    """Test lifespan propagates a failed migration check."""
    with (
        patch("subway.main.settings") as mock_settings,
        patch("subway.main._check_alembic_migrations", side_effect=RuntimeError("Migration failed")),
    ):
        mock_settings.DEBUG = False

        with pytest.raises(RuntimeError, match="Migration failed"):
            async with lifespan(Mock()):
                pass
