import logging
from typing import Any, Dict, List, Optional

from shipengine_rates.core.exceptions import (
    NO_CARRIER_ACCOUNTS_MESSAGE,
    ExternalServiceException,
    NoCarrierAccountsException,
)
from shipengine_rates.external.shipengine import ShipEngineClient
from shipengine_rates.schemas.address import Address
from shipengine_rates.schemas.rates import (
    CarrierCatalog,
    CarrierCatalogResult,
    ErrorInfo,
    RatesResult,
    ValidationResult,
)
from shipengine_rates.schemas.settings import AdapterSettings
from shipengine_rates.schemas.shipment import ShipmentRequest
from shipengine_rates.services.address import prepare_address
from shipengine_rates.services.cache import CacheLayer, address_cache_key, rates_cache_key
from shipengine_rates.services.normalizer import normalize_carriers, normalize_rates, normalize_validation
from shipengine_rates.services.rate_request import DEFAULT_PACKAGE_TYPES, RateRequestBuilder
from shipengine_rates.utils.async_cache import AsyncCache

logger = logging.getLogger(__name__)

RATES_ROUTE = "v1/rates"
VALIDATE_ADDRESS_ROUTE = "v1/addresses/validate"
CARRIERS_ROUTE = "v1/carriers"

API_KEY_TITLES = {
    "test_api_key": "Test API Key",
    "production_api_key": "Production API Key",
}


class ShipEngineAdapter:
    """Quotes shipping rates through ShipEngine for a store checkout.

    Public operations never raise: upstream and configuration problems are
    returned in the ``error`` field of the result.

    The carrier catalog is loaded lazily on the first rate lookup. It is
    shared through the key-value store, so every adapter instance using the
    same store and API key reuses one fetch.
    """

    def __init__(
        self,
        settings: AdapterSettings,
        store=None,
        client: Optional[ShipEngineClient] = None,
        adapter_id: str = "shipengine",
        clock=None,
    ):
        self.settings = settings
        self.store = store if store is not None else AsyncCache()
        self.client = client or ShipEngineClient()
        self.adapter_id = adapter_id
        self.clock = clock
        self._catalog = CarrierCatalog()
        self._ready = False

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.active_api_key

    @property
    def cache(self) -> CacheLayer:
        return CacheLayer(self.store, self.adapter_id, self.api_key)

    @property
    def catalog(self) -> CarrierCatalog:
        return self._catalog

    @property
    def package_types(self) -> Dict[str, str]:
        return {**DEFAULT_PACKAGE_TYPES, **self._catalog.package_types}

    def get_services(self) -> Dict[str, str]:
        return dict(self._catalog.services)

    def set_settings(self, settings: AdapterSettings) -> None:
        self.settings = settings
        self._catalog = CarrierCatalog()
        self._ready = False

    async def validate_settings(self, settings: AdapterSettings) -> List[str]:
        """
        Check that settings can be activated.

        The stored carrier catalog of the new credential is dropped and
        fetched again, so saving settings is also how a merchant picks up
        carrier accounts added on ShipEngine.

        Returns:
            list: Error messages, empty when the settings work.
        """
        if not settings.active_api_key:
            title = API_KEY_TITLES[settings.active_api_key_field]
            return [f"{title}: is required for the integration to work"]

        self.set_settings(settings)
        await self.invalidate_carriers()

        error_message = await self.initialize()
        if error_message:
            return [error_message]
        if not self._catalog.carrier_accounts:
            return [NO_CARRIER_ACCOUNTS_MESSAGE]
        return []

    async def invalidate_carriers(self) -> None:
        await self.cache.delete_catalog()
        self._catalog = CarrierCatalog()
        self._ready = False

    async def initialize(self) -> str:
        """
        Load the carrier catalog from the store or from ShipEngine.

        Returns:
            str: The fetch error message, empty on success.
        """
        if self._ready:
            return ""

        if not self.api_key:
            logger.debug("No API key configured, carrier catalog not loaded")
            return ""

        cache = self.cache
        stored = await cache.get_catalog()

        if stored is None:
            # best effort hint for other instances, not a real lock
            await cache.lock_catalog()

            catalog = await cache.pop_legacy_catalog()
            if catalog is None:
                result = await self.fetch_carriers()
                if result.error is not None:
                    logger.warning("Unable to fetch carriers: %s", result.error.message)
                    await cache.delete_catalog()
                    return result.error.message
                catalog = result.catalog

            await cache.set_catalog(catalog)
        elif not stored:
            logger.debug("Carrier catalog is being fetched by another instance")
            return ""
        else:
            catalog = CarrierCatalog.model_validate(stored)

        self._catalog = catalog
        self._ready = True
        logger.debug("Carrier catalog loaded with %d carrier accounts", len(catalog.carrier_accounts))
        return ""

    async def fetch_carriers(self) -> CarrierCatalogResult:
        logger.debug("fetch_carriers")
        response = await self._send_request(CARRIERS_ROUTE, "GET")
        return normalize_carriers(response)

    def _require_carrier_accounts(self) -> List[str]:
        if not self._catalog.carrier_accounts:
            raise NoCarrierAccountsException()
        return list(self._catalog.carrier_accounts.values())

    def _builder(self, carrier_ids: List[str]) -> RateRequestBuilder:
        return RateRequestBuilder(
            self.settings,
            carrier_ids=carrier_ids,
            package_types=self.package_types,
            clock=self.clock,
        )

    async def get_rates(self, request: ShipmentRequest) -> RatesResult:
        logger.debug("get_rates")
        await self.initialize()

        try:
            carrier_ids = self._require_carrier_accounts()
        except NoCarrierAccountsException as e:
            logger.debug("No carrier accounts have been found")
            return RatesResult(error=ErrorInfo(message=e.detail))

        builder = self._builder(carrier_ids)
        resolved = builder.resolve(request)
        cache = self.cache
        cache_key = rates_cache_key(
            resolved.model_dump(mode="json", exclude_none=True),
            self.settings.validate_address,
            self.api_key,
        )

        result = await cache.get_rates(cache_key)
        if result is None:
            params = builder.build(resolved)
            response = await self._send_request(RATES_ROUTE, "POST", params)
            result = normalize_rates(response, self._catalog.services)
            result.params = params

            if result.shipment is not None and result.error is None:
                logger.debug("Cache shipment for the future")
                await cache.set_rates(cache_key, result, self.settings.cache_expiration_in_secs)
        else:
            logger.debug("Found previously returned rates. Cache Key: %s", cache_key)

        destination = request.destination
        if (
            result.shipment is not None
            and self.settings.validate_address
            and destination is not None
            and destination.model_dump(exclude_none=True)
        ):
            validation = await self.validate_address(destination)
            if validation.errors:
                result.validation_errors = {"destination": validation.errors}

        return result

    async def validate_address(self, address: Address) -> ValidationResult:
        logger.debug("validate_address")

        cache = self.cache
        cache_key = address_cache_key(address.model_dump(mode="json", exclude_none=True), self.api_key)
        result = await cache.get_validation(cache_key)
        if result is not None:
            return result

        response = await self._send_request(VALIDATE_ADDRESS_ROUTE, "POST", [prepare_address(address)])
        result = normalize_validation(response)
        if result.error is None:
            await cache.set_validation(cache_key, result)

        return result

    async def _send_request(self, route: str, method: str, params: Optional[Any] = None) -> Any:
        try:
            return await self.client.send(method, route, self.api_key, params)
        except ExternalServiceException as e:
            # reported like an upstream error so callers see one shape
            return {"errors": [{"message": e.detail}]}
