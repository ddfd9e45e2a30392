import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.helpers.getters import isDebugMode

logger = logging.getLogger(__name__)

if isDebugMode():
    logger.info("Using database URL in debug mode")
    engine_internal = create_async_engine(
        settings.DATABASE_URL, future=True, echo=settings.LOG_LEVEL.upper() == "DEBUG"
    )
else:
    logger.info("Using database URL for production mode")
    engine_internal = create_async_engine(settings.DATABASE_URL, future=True, echo=False, pool_pre_ping=True)

SessionAsync = async_sessionmaker(engine_internal, class_=AsyncSession, expire_on_commit=False)
