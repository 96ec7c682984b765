"""Alembic environment: runs migrations against the configured database.

The URL comes from application settings rather than alembic.ini, and
online migrations run on the async engine the service itself uses.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from djcafe.core.config import get_settings
from djcafe.core.database import Base

# Register every table on Base.metadata
from djcafe.features.campaigns import models as _campaign_models  # noqa: F401
from djcafe.features.catalog import models as _catalog_models  # noqa: F401
from djcafe.features.jobs import models as _job_models  # noqa: F401
from djcafe.features.pricing import models as _pricing_models  # noqa: F401
from djcafe.features.tables import models as _table_models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL without a database connection."""
    context.configure(
        url=get_settings().database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations on an async engine connection."""
    engine = create_async_engine(get_settings().database_url, poolclass=pool.NullPool)

    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
