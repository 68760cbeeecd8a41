"""Core utility functions."""

from sqlalchemy.engine import make_url

# Async driver -> sync driver used by Alembic
_SYNC_DRIVERS = {
    "postgresql+asyncpg": "postgresql+psycopg",
    "sqlite+aiosqlite": "sqlite",
}


def convert_async_db_url_to_sync(database_url: str) -> str:
    """
    Convert an async database URL to a sync database URL.

    Converts postgresql+asyncpg:// to postgresql+psycopg:// and
    sqlite+aiosqlite:// to sqlite:// for use with synchronous drivers
    (Alembic migrations). Other URLs are returned unchanged.

    Args:
        database_url: The async database URL (e.g., postgresql+asyncpg://...)

    Returns:
        The sync database URL (e.g., postgresql+psycopg://...)
    """
    url = make_url(database_url)
    if (sync_driver := _SYNC_DRIVERS.get(url.drivername)) is None:
        return database_url
    return url.set(drivername=sync_driver).render_as_string(hide_password=False)
