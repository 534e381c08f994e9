import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from core.config import settings
# Importing the package registers every model on Base.metadata
from models import Base

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def init_database(engine: AsyncEngine, drop_existing: bool = False):
    async with engine.begin() as conn:
        if drop_existing:
            logger.info("Dropping tables...")
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Creating tables...")
        # Create all tables defined in models
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables created successfully.")


async def main():
    logger.info("Connecting to database...")
    engine = create_async_engine(settings.DATABASE_URL, echo=True)
    try:
        await init_database(engine)
    finally:
        await engine.dispose()

if __name__ == "__main__":
    asyncio.run(main())
