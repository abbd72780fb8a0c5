#!/usr/bin/env python
"""
Script to create database tables for the CivicVoice API
"""

# Standard library imports
import asyncio
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Third-party imports
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

# Local application imports
from civicvoice.core.db import build_async_engine
from civicvoice.core.monitoring import get_logger

# Import all models to register them with Base
from civicvoice.models import Base
from civicvoice.settings import get_settings

logger = get_logger("civicvoice.scripts.create_tables")


async def create_tables() -> None:
    """Create all tables in the database"""
    engine = build_async_engine(get_settings())
    logger.info("Creating database tables...")

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

        logger.info("All tables created successfully")
        for table in sorted(tables):
            logger.info(f"  - {table}")
    except SQLAlchemyError:
        logger.exception("Error creating tables")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_tables())
