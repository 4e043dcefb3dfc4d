"""Alembic environment for the trip tables.

Offline runs render SQL against the synchronous form of the configured URL;
online runs reuse the application's async engine.
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection

from grouptrips.core.config import get_settings
from grouptrips.db import models  # noqa: F401
from grouptrips.infrastructure.database import Base, dispose_engine, get_engine

SYNC_DRIVERS = {"sqlite+aiosqlite": "sqlite", "postgresql+asyncpg": "postgresql"}

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _offline_url() -> str:
    url = get_settings().database_url
    for async_driver, sync_driver in SYNC_DRIVERS.items():
        if url.startswith(async_driver):
            return sync_driver + url[len(async_driver):]
    return url


def _migrate_offline() -> None:
    context.configure(
        url=_offline_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    # sqlite cannot alter columns in place
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    try:
        async with get_engine().connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await dispose_engine()


if context.is_offline_mode():
    _migrate_offline()
else:
    asyncio.run(_migrate_online())
