"""Cache keys and expiration policy for the ShipEngine adapter.

Three kinds of values are cached through the key-value store:

- rate quotes, for ``cache_expiration_in_secs``
- address validation results, until deleted
- the carrier catalog, until deleted; a short lived empty placeholder is
  stored while the first fetch runs

Every key includes the active API key so sandbox and production responses
never mix.
"""
import hashlib
import json
import logging
from typing import Any, Dict, Optional

from shipengine_rates.schemas.rates import CarrierCatalog, RatesResult, ValidationResult

logger = logging.getLogger(__name__)

# request fields that pick a service out of the quote, not what is quoted
RATES_KEY_EXCLUDED_FIELDS = ("service", "carrier_id", "service_code", "function")

# lease on the catalog placeholder; a crashed fetch frees it after this
CATALOG_LOCK_TTL = 60
CATALOG_PLACEHOLDER: Dict[str, Any] = {}


def fingerprint(params: Dict[str, Any], api_key: Optional[str]) -> str:
    serialized = json.dumps(params, sort_keys=True, default=str)
    return hashlib.md5(f"{serialized}_{api_key or ''}".encode()).hexdigest()


def rates_cache_key(params: Dict[str, Any], validate_address: bool, api_key: Optional[str]) -> str:
    key_params = {k: v for k, v in params.items() if k not in RATES_KEY_EXCLUDED_FIELDS}
    # validation errors are attached to cached rates, so the setting is part of the key
    key_params["validate_address"] = validate_address
    return f"{fingerprint(key_params, api_key)}_rates"


def address_cache_key(params: Dict[str, Any], api_key: Optional[str]) -> str:
    return f"{fingerprint(params, api_key)}_address"


def carriers_cache_key(adapter_id: str, api_key: Optional[str]) -> str:
    credential = hashlib.md5((api_key or "").encode()).hexdigest()
    return f"{adapter_id}_{credential}_carriers"


def legacy_carriers_cache_key(adapter_id: str) -> str:
    return f"{adapter_id}_init_carriers"


class CacheLayer:
    def __init__(self, store, adapter_id: str, api_key: Optional[str]):
        self.store = store
        self.adapter_id = adapter_id
        self.api_key = api_key

    async def get_rates(self, key: str) -> Optional[RatesResult]:
        value = await self.store.get(key)
        if not value:
            return None
        return RatesResult.model_validate(value)

    async def set_rates(self, key: str, result: RatesResult, ttl: int) -> None:
        await self.store.set(key, result.model_dump(mode="json"), ttl)

    async def get_validation(self, key: str) -> Optional[ValidationResult]:
        value = await self.store.get(key)
        if not value:
            return None
        return ValidationResult.model_validate(value)

    async def set_validation(self, key: str, result: ValidationResult) -> None:
        # addresses validate the same way every time, no expiration
        await self.store.set(key, result.model_dump(mode="json"))

    @property
    def carriers_key(self) -> str:
        return carriers_cache_key(self.adapter_id, self.api_key)

    async def get_catalog(self) -> Optional[Dict[str, Any]]:
        """Raw stored catalog, ``CATALOG_PLACEHOLDER`` while another fetch runs, or None."""
        value = await self.store.get(self.carriers_key)
        if not isinstance(value, dict):
            return None
        return value

    async def lock_catalog(self) -> None:
        await self.store.set(self.carriers_key, CATALOG_PLACEHOLDER, CATALOG_LOCK_TTL)

    async def set_catalog(self, catalog: CarrierCatalog) -> None:
        await self.store.set(self.carriers_key, catalog.model_dump(mode="json"))

    async def delete_catalog(self) -> None:
        await self.store.delete(self.carriers_key)

    async def pop_legacy_catalog(self) -> Optional[CarrierCatalog]:
        """Catalog cached by older releases under the instance-only key."""
        key = legacy_carriers_cache_key(self.adapter_id)
        value = await self.store.get(key)
        if not value or not isinstance(value, dict):
            return None

        await self.store.delete(key)
        logger.debug("Found legacy carrier catalog, migrating it")
        return CarrierCatalog.model_validate(value)
