from fastapi import APIRouter, Depends
from shipengine_rates.api.deps import get_adapter, get_adapter_settings, get_settings_store
from shipengine_rates.core.config import settings
from shipengine_rates.core.exceptions import ConfigurationException
from shipengine_rates.db.settings_store import SettingsStore
from shipengine_rates.schemas.settings import AdapterSettings
from shipengine_rates.services.adapter import ShipEngineAdapter
import logging

logger = logging.getLogger("settings")

router = APIRouter()

@router.get("/", response_model=AdapterSettings)
async def get_settings(adapter_settings: AdapterSettings = Depends(get_adapter_settings)):
    return adapter_settings.masked()

@router.put("/", response_model=AdapterSettings)
async def update_settings(
    data: AdapterSettings,
    current: AdapterSettings = Depends(get_adapter_settings),
    adapter: ShipEngineAdapter = Depends(get_adapter),
    settings_store: SettingsStore = Depends(get_settings_store),
):
    # GET returns masked keys, a client may send them back unchanged
    data = data.with_stored_keys(current)

    errors = await adapter.validate_settings(data)
    if errors:
        logger.warning("Rejected adapter settings: %s", errors)
        raise ConfigurationException(errors)

    await settings_store.save(settings.adapter_id, data)
    return data.masked()
