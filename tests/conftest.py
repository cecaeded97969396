import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shipengine_rates.external.shipengine import ShipEngineClient
from shipengine_rates.schemas.address import Address
from shipengine_rates.schemas.settings import AdapterSettings
from shipengine_rates.utils.async_cache import AsyncCache


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def origin_address() -> Address:
    return Address(
        name="Sender One",
        company="Sender LLC",
        phone="5125550101",
        country="us",
        state="TX",
        postcode="73301",
        city="Austin",
        address="123 Sender St",
        address_2="Suite 100",
    )


@pytest.fixture
def destination_address() -> Address:
    return Address(
        name="Receiver Two",
        country="CA",
        state="BC",
        postcode="V8V 0G9",
        city="Victoria",
        address="1097 View St",
    )


@pytest.fixture
def adapter_settings(origin_address) -> AdapterSettings:
    return AdapterSettings(
        sandbox=True,
        test_api_key="TEST_key",
        production_api_key="PROD_key",
        origin=origin_address,
        weight_unit="kg",
        dimension_unit="cm",
        default_tariff="9999.99",
        cache_expiration_in_secs=3600,
    )


@pytest.fixture
def store() -> AsyncCache:
    return AsyncCache()


@pytest.fixture
def carriers_response() -> dict:
    return {
        "carriers": [
            {
                "carrier_id": "se-123",
                "carrier_code": "stamps_com",
                "friendly_name": "Stamps.com",
                "services": [
                    {"service_code": "usps_priority_mail", "name": "USPS Priority Mail"},
                    {"service_code": "usps_first_class_mail", "name": "USPS First Class Mail"},
                ],
                "packages": [
                    {"package_code": "flat_rate_envelope", "name": "Flat Rate Envelope"},
                ],
            },
            {
                "carrier_id": "se-456",
                "carrier_code": "ups",
                "friendly_name": "UPS",
                "services": [
                    {"service_code": "ups_ground", "name": "UPS Ground"},
                ],
                "packages": [],
            },
        ]
    }


@pytest.fixture
def rates_response() -> dict:
    return {
        "rate_response": {
            "rates": [
                {
                    "rate_id": "se-r1",
                    "carrier_id": "se-123",
                    "carrier_code": "stamps_com",
                    "service_code": "usps_priority_mail",
                    "service_type": "USPS Priority Mail (raw)",
                    "shipping_amount": {"currency": "usd", "amount": 10.0},
                    "insurance_amount": {"currency": "usd", "amount": 1.5},
                    "confirmation_amount": {"currency": "usd", "amount": 1.0},
                    "other_amount": {"currency": "usd", "amount": 0.0},
                    "delivery_days": 2,
                },
                {
                    "rate_id": "se-r2",
                    "carrier_id": "se-456",
                    "carrier_code": "ups",
                    "service_code": "ups_ground",
                    "service_type": "UPS Ground",
                    "shipping_amount": {"currency": "usd", "amount": 8.0},
                    "delivery_days": None,
                },
            ],
            "invalid_rates": [],
        }
    }


class RecordingClient(ShipEngineClient):
    """ShipEngine client answering from canned responses by route."""

    def __init__(self, responses: dict):
        super().__init__(base_url="https://api.shipengine.test/")
        self.responses = responses
        self.calls = []

    async def _make_request(self, method, route, data, headers):
        self.calls.append({"method": method, "route": route, "data": data, "headers": headers})
        response = self.responses[route]
        if isinstance(response, Exception):
            raise response
        return response

    def routes(self) -> list:
        return [call["route"] for call in self.calls]


@pytest.fixture
def make_client():
    return RecordingClient
