from functools import lru_cache
from fastapi import Depends
from shipengine_rates.core.config import settings
from shipengine_rates.db.session import AsyncSessionLocal
from shipengine_rates.db.settings_store import SettingsStore
from shipengine_rates.db.store import SqlAlchemyStore
from shipengine_rates.external.shipengine import ShipEngineClient
from shipengine_rates.schemas.settings import AdapterSettings
from shipengine_rates.services.adapter import ShipEngineAdapter

@lru_cache()
def get_store() -> SqlAlchemyStore:
    return SqlAlchemyStore(AsyncSessionLocal)

@lru_cache()
def get_settings_store() -> SettingsStore:
    return SettingsStore(AsyncSessionLocal)

@lru_cache()
def get_shipengine_client() -> ShipEngineClient:
    """Create and cache ShipEngine API client instance."""
    return ShipEngineClient()

def default_adapter_settings() -> AdapterSettings:
    return AdapterSettings(
        sandbox=settings.shipengine_sandbox,
        test_api_key=settings.shipengine_test_api_key or None,
        production_api_key=settings.shipengine_production_api_key or None,
    )

async def get_adapter_settings(settings_store: SettingsStore = Depends(get_settings_store)) -> AdapterSettings:
    stored = await settings_store.load(settings.adapter_id)
    return stored or default_adapter_settings()

async def get_adapter(
    adapter_settings: AdapterSettings = Depends(get_adapter_settings),
    store: SqlAlchemyStore = Depends(get_store),
    client: ShipEngineClient = Depends(get_shipengine_client),
) -> ShipEngineAdapter:
    return ShipEngineAdapter(adapter_settings, store=store, client=client, adapter_id=settings.adapter_id)
