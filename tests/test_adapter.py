import logging
from datetime import datetime

import pytest

from shipengine_rates.core.exceptions import ExternalServiceServerError
from shipengine_rates.schemas.rates import CarrierCatalog
from shipengine_rates.schemas.shipment import ShipmentRequest
from shipengine_rates.services.adapter import ShipEngineAdapter
from shipengine_rates.services.cache import CATALOG_LOCK_TTL, CacheLayer, legacy_carriers_cache_key


@pytest.fixture
def responses(carriers_response, rates_response) -> dict:
    return {
        "v1/carriers": carriers_response,
        "v1/rates": rates_response,
        "v1/addresses/validate": [
            {"status": "error", "messages": [{"message": "Invalid Postal Code"}]},
        ],
    }


@pytest.fixture
def client(make_client, responses):
    return make_client(responses)


@pytest.fixture
def adapter(adapter_settings, store, client) -> ShipEngineAdapter:
    return ShipEngineAdapter(
        adapter_settings,
        store=store,
        client=client,
        clock=lambda: datetime(2024, 9, 18, 11, 0),
    )


@pytest.fixture
def shipment(destination_address) -> ShipmentRequest:
    return ShipmentRequest(destination=destination_address, weight=2.5, length=10, width=5, height=2)


@pytest.mark.anyio
async def test_get_rates_without_carrier_accounts_skips_upstream(adapter, store, client, shipment):
    await CacheLayer(store, "shipengine", "TEST_key").set_catalog(CarrierCatalog())

    result = await adapter.get_rates(shipment)

    assert result.model_dump(exclude_none=True) == {
        "error": {"message": "No carrier accounts have been found."}
    }
    assert client.calls == []


@pytest.mark.anyio
async def test_get_rates_without_api_key(adapter_settings, store, client, shipment):
    adapter = ShipEngineAdapter(adapter_settings.model_copy(update={"test_api_key": None}), store=store, client=client)

    result = await adapter.get_rates(shipment)

    assert result.error.message == "No carrier accounts have been found."
    assert client.calls == []


@pytest.mark.anyio
async def test_get_rates_loads_catalog_and_quotes(adapter, client, shipment):
    result = await adapter.get_rates(shipment)

    assert result.error is None
    assert client.routes() == ["v1/carriers", "v1/rates"]
    assert client.calls[1]["headers"]["API-Key"] == "TEST_key"

    params = client.calls[1]["data"]
    assert params["rate_options"]["carrier_ids"] == ["se-123", "se-456"]
    assert params["shipment"]["ship_date"] == "2024-09-18"
    assert params["shipment"]["packages"][0]["weight"] == {"value": 2.5, "unit": "kilogram"}
    assert result.params == params

    assert [rate.cost for rate in result.shipment.rates] == [8.0, 12.5]
    assert result.shipment.rates[1].postage_description == "USPS Priority Mail"
    assert adapter.get_services()["se-456|ups_ground"] == "UPS Ground"
    assert adapter.package_types == {"package": "Package", "flat_rate_envelope": "Flat Rate Envelope"}


@pytest.mark.anyio
async def test_get_rates_uses_rate_cache(adapter, client, shipment, caplog):
    caplog.set_level(logging.DEBUG)
    first = await adapter.get_rates(shipment)

    selected = shipment.model_copy(update={"service": "se-456|ups_ground", "carrier_id": "se-456", "service_code": "ups_ground"})
    second = await adapter.get_rates(selected)

    assert client.routes() == ["v1/carriers", "v1/rates"]
    assert second.shipment == first.shipment
    assert any("Found previously returned rates" in record.message for record in caplog.records)

    await adapter.get_rates(shipment.model_copy(update={"weight": 4}))
    assert client.routes() == ["v1/carriers", "v1/rates", "v1/rates"]


@pytest.mark.anyio
async def test_catalog_is_shared_through_store(adapter, adapter_settings, store, client, make_client, responses, shipment):
    await adapter.get_rates(shipment)

    other_client = make_client(responses)
    other = ShipEngineAdapter(adapter_settings, store=store, client=other_client)
    await other.initialize()

    assert other_client.calls == []
    assert other.catalog == adapter.catalog


@pytest.mark.anyio
async def test_ready_adapter_does_not_reread_store(adapter, store, shipment):
    await adapter.initialize()
    await store.clear()

    assert await adapter.initialize() == ""
    assert adapter.catalog.carrier_accounts


@pytest.mark.anyio
async def test_catalog_placeholder_blocks_duplicate_fetch(adapter, store, client, shipment):
    await CacheLayer(store, "shipengine", "TEST_key").lock_catalog()

    result = await adapter.get_rates(shipment)

    assert result.error.message == "No carrier accounts have been found."
    assert client.calls == []


@pytest.mark.anyio
async def test_catalog_fetch_writes_placeholder_first(adapter, store, client, monkeypatch):
    seen = []
    original_set = store.set

    async def recording_set(key, value, ttl=None):
        seen.append((key, value, ttl))
        await original_set(key, value, ttl)

    monkeypatch.setattr(store, "set", recording_set)

    await adapter.initialize()

    assert seen[0][1:] == ({}, CATALOG_LOCK_TTL)
    assert seen[-1][1]["carrier_accounts"] == {"stamps_com|se-123": "se-123", "ups|se-456": "se-456"}
    assert seen[-1][2] is None


@pytest.mark.anyio
async def test_catalog_fetch_failure_is_reported_and_retried_later(adapter, store, client, responses, shipment):
    responses["v1/carriers"] = {"errors": [{"message": "Invalid API key"}]}

    assert await adapter.initialize() == "Invalid API key"
    assert await CacheLayer(store, "shipengine", "TEST_key").get_catalog() is None

    result = await adapter.get_rates(shipment)
    assert result.error.message == "No carrier accounts have been found."
    assert client.routes() == ["v1/carriers", "v1/carriers"]


@pytest.mark.anyio
async def test_legacy_catalog_is_migrated(adapter, store, client):
    legacy = CarrierCatalog(carriers={"ups": "UPS"}, carrier_accounts={"ups|se-456": "se-456"})
    await store.set(legacy_carriers_cache_key("shipengine"), legacy.model_dump())

    assert await adapter.initialize() == ""

    assert client.calls == []
    assert adapter.catalog == legacy
    assert await store.get(legacy_carriers_cache_key("shipengine")) is None
    assert await CacheLayer(store, "shipengine", "TEST_key").get_catalog() == legacy.model_dump()


@pytest.mark.anyio
async def test_get_rates_attaches_destination_validation_errors(adapter, adapter_settings, client, shipment):
    adapter.set_settings(adapter_settings.model_copy(update={"validate_address": True}))

    result = await adapter.get_rates(shipment)

    assert result.validation_errors == {"destination": ["Invalid Postal Code"]}
    assert client.routes() == ["v1/carriers", "v1/rates", "v1/addresses/validate"]
    assert client.calls[2]["data"][0]["postal_code"] == "V8V 0G9"

    cached = await adapter.get_rates(shipment)
    assert cached.validation_errors == {"destination": ["Invalid Postal Code"]}
    # both the rates and the validation come from the cache
    assert client.routes() == ["v1/carriers", "v1/rates", "v1/addresses/validate"]


@pytest.mark.anyio
async def test_get_rates_skips_validation_without_destination(adapter, adapter_settings, client):
    adapter.set_settings(adapter_settings.model_copy(update={"validate_address": True}))

    result = await adapter.get_rates(ShipmentRequest(weight=1))

    assert result.validation_errors is None
    assert "v1/addresses/validate" not in client.routes()


@pytest.mark.anyio
async def test_get_rates_skips_validation_for_empty_destination(adapter, adapter_settings, client):
    adapter.set_settings(adapter_settings.model_copy(update={"validate_address": True}))

    result = await adapter.get_rates(ShipmentRequest(weight=1, destination={}))

    assert result.shipment is not None
    assert result.validation_errors is None
    assert "v1/addresses/validate" not in client.routes()


@pytest.mark.anyio
async def test_upstream_errors_are_returned_and_not_cached(adapter, client, responses, shipment):
    responses["v1/rates"] = {"errors": [{"message": "ship_to.postal_code is invalid"}]}

    first = await adapter.get_rates(shipment)
    second = await adapter.get_rates(shipment)

    assert first.error.message == "ship_to.postal_code is invalid"
    assert first.shipment is None
    assert first.response == responses["v1/rates"]
    assert second.error.message == first.error.message
    assert client.routes() == ["v1/carriers", "v1/rates", "v1/rates"]


@pytest.mark.anyio
async def test_transport_failure_becomes_error_result(adapter, client, responses, shipment):
    await adapter.initialize()
    responses["v1/rates"] = ExternalServiceServerError("Server error: 503")

    result = await adapter.get_rates(shipment)

    assert result.error.message == "Server error: 503"
    assert result.shipment is None


@pytest.mark.anyio
async def test_validate_address_verified(adapter, client, responses, destination_address):
    responses["v1/addresses/validate"] = [{"status": "verified", "messages": []}]

    result = await adapter.validate_address(destination_address)
    again = await adapter.validate_address(destination_address)

    assert result.errors == []
    assert again == result
    assert client.routes() == ["v1/addresses/validate"]


@pytest.mark.anyio
async def test_validate_settings_requires_active_api_key(adapter, adapter_settings, client):
    errors = await adapter.validate_settings(adapter_settings.model_copy(update={"test_api_key": ""}))
    assert errors == ["Test API Key: is required for the integration to work"]

    errors = await adapter.validate_settings(
        adapter_settings.model_copy(update={"sandbox": False, "production_api_key": None})
    )
    assert errors == ["Production API Key: is required for the integration to work"]
    assert client.calls == []


@pytest.mark.anyio
async def test_validate_settings_refetches_catalog(adapter, adapter_settings, store, client):
    await adapter.initialize()

    assert await adapter.validate_settings(adapter_settings) == []
    assert client.routes() == ["v1/carriers", "v1/carriers"]


@pytest.mark.anyio
async def test_validate_settings_reports_fetch_error_and_empty_catalog(adapter, adapter_settings, responses):
    responses["v1/carriers"] = {"errors": [{"message": "Unauthorized"}]}
    assert await adapter.validate_settings(adapter_settings) == ["Unauthorized"]

    responses["v1/carriers"] = {"carriers": []}
    assert await adapter.validate_settings(adapter_settings) == ["No carrier accounts have been found."]
