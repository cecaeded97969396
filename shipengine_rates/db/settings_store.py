import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shipengine_rates.models.adapter_setting import AdapterSetting
from shipengine_rates.schemas.settings import AdapterSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Loads and saves adapter settings, one row per adapter id."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def load(self, adapter_id: str) -> Optional[AdapterSettings]:
        async with self.session_factory() as session:
            row = await session.get(AdapterSetting, adapter_id)
            if row is None:
                return None
            return AdapterSettings.model_validate(row.data)

    async def save(self, adapter_id: str, adapter_settings: AdapterSettings) -> None:
        async with self.session_factory() as session:
            row = await session.get(AdapterSetting, adapter_id)
            data = adapter_settings.model_dump(mode="json")
            if row is None:
                session.add(AdapterSetting(adapter_id=adapter_id, data=data))
            else:
                row.data = data
            await session.commit()
        logger.info("Saved settings for adapter %s", adapter_id)
