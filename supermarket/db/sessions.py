import logging
from supermarket.core.config import settings
from supermarket.db.base import Base
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine)

# Initialize the logger for async database events
logger = logging.getLogger(__name__)

# --- DATABASE URL CONFIGURATION ---

db_url = settings.database_url

if not db_url:
    raise RuntimeError("DATABASE_URL is not set")


# --- ASYNC ENGINE CONFIG

async_engine = create_async_engine(
    db_url,
    echo=False,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_= AsyncSession,
    expire_on_commit= False,
)


async def init_models(engine: AsyncEngine = async_engine) -> None:
    """
    Create the four collection tables if they do not exist yet.
    """
    # Register every collection model on the metadata
    import supermarket.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database: collection tables ready.")


# --- FASTAPI DEPENDENCY
def get_session_factory() -> async_sessionmaker:
    """
    FastAPI Dependency that provides the session factory the stores open
    their short-lived sessions from.
    """
    return AsyncSessionLocal
