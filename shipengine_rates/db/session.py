from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from shipengine_rates.core.config import settings
import shipengine_rates.models

engine = create_async_engine(settings.database_url, echo=settings.debug)
AsyncSessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

async def init_db(bind=None):
    from shipengine_rates.models.base import Base
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
