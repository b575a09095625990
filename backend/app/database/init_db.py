"""
init_db.py

Initializes the database by creating all tables defined in the SQLAlchemy models.
Used for setting up the initial schema in the connected database.

Usage:
    python -m app.database.init_db
"""

import asyncio

from app.database import models  # noqa: F401
from app.database.base import Base
from app.database.session import engine


async def init_db() -> None:
    """
    Creates all database tables based on SQLAlchemy models.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_db())
