"""
alembic/env.py

Alembic environment configuration for database migrations.
- Supports both offline and asynchronous online migration contexts.
- Loads SQLAlchemy engine and metadata from project base.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection

# --- Load SQLAlchemy base metadata and engine ---
from app.database.session import engine as async_engine
from app.database.base import Base

# --- Import models to ensure they are registered with SQLAlchemy and visible to Alembic ---
from app.database import models  # noqa: F401
from app.property_type import models as property_type_models  # noqa: F401
from app.category import models as category_models  # noqa: F401
from app.question import models as question_models  # noqa: F401
from app.evaluation import models as evaluation_models  # noqa: F401
from app.team import models as team_models  # noqa: F401
from app.custom_field import models as custom_field_models  # noqa: F401
from app.campaign import models as campaign_models  # noqa: F401


# --- Alembic config and logger ---
config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode (no DB connection needed).
    """
    context.configure(
        url=async_engine.url.render_as_string(hide_password=False),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode using async engine.
    """
    async with async_engine.connect() as conn:
        await conn.run_sync(do_run_migrations)
    await async_engine.dispose()


# --- Entry point ---
if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
