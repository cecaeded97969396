# shipengine_rates/services/rate_request.py
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from shipengine_rates.schemas.settings import AdapterSettings
from shipengine_rates.schemas.shipment import ShipmentRequest
from shipengine_rates.services.address import prepare_address
from shipengine_rates.services.customs import CustomsMapper
from shipengine_rates.utils.units import convert_dimensions, convert_weight

logger = logging.getLogger(__name__)

CURRENCIES = {
    "usd": "USD",
    "cad": "CAD",
    "aud": "AUD",
    "gbp": "GBP",
    "eur": "EUR",
    "nzd": "NZD",
}
DEFAULT_CURRENCY = "usd"

DEFAULT_PACKAGE_TYPES = {"package": "Package"}

# parcels handed over after the cut-off ship the next business day
CUTOFF_HOUR = 16
WEEKEND = (5, 6)


def _next_weekday(day: date) -> date:
    day += timedelta(days=1)
    while day.weekday() in WEEKEND:
        day += timedelta(days=1)
    return day


def get_ship_date(now: Optional[datetime] = None) -> str:
    """
    Ship date for a rate quote in YYYY-MM-DD.

    On weekends or from 17:00 on the parcel ships the next weekday at noon,
    before 09:00 it ships today at noon, otherwise today. The 16 o'clock hour
    still ships today.
    """
    if now is None:
        now = datetime.now()

    if now.weekday() in WEEKEND or now.hour > CUTOFF_HOUR:
        ship_time = datetime.combine(_next_weekday(now.date()), time(12, 0))
    elif now.hour < 9:
        ship_time = datetime.combine(now.date(), time(12, 0))
    else:
        ship_time = now

    return ship_time.strftime("%Y-%m-%d")


def prepare_currency(currency: Optional[str]) -> str:
    if currency:
        possible = currency.lower()
        if possible in CURRENCIES:
            return possible
    return DEFAULT_CURRENCY


class RateRequestBuilder:
    """Builds the body of ``POST v1/rates`` from a shipment request."""

    def __init__(
        self,
        settings: AdapterSettings,
        carrier_ids: List[str],
        package_types: Optional[Dict[str, str]] = None,
        clock=None,
    ):
        self.settings = settings
        self.carrier_ids = carrier_ids
        self.package_types = package_types if package_types is not None else dict(DEFAULT_PACKAGE_TYPES)
        self.clock = clock or datetime.now
        self.customs_mapper = CustomsMapper(default_tariff=settings.default_tariff)

    def resolve(self, request: ShipmentRequest) -> ShipmentRequest:
        """Fill in what the request leaves to the adapter settings."""
        updates: Dict[str, Any] = {}
        if request.origin is None:
            updates["origin"] = self.settings.origin
        if request.insurance is None:
            updates["insurance"] = self.settings.insurance
        if request.signature is None:
            updates["signature"] = self.settings.signature
        if request.weight_unit is None:
            updates["weight_unit"] = self.settings.weight_unit
        if request.dimension_unit is None:
            updates["dimension_unit"] = self.settings.dimension_unit
        return request.model_copy(update=updates)

    def build(self, request: ShipmentRequest) -> Dict[str, Any]:
        request = self.resolve(request)
        currency = prepare_currency(request.currency)

        shipment: Dict[str, Any] = {
            "validate_address": "no_validation",
            "ship_date": get_ship_date(self.clock()),
            "ship_from": prepare_address(request.origin),
            "ship_to": prepare_address(request.destination),
            "confirmation": "signature" if request.signature else "none",
            "customs": self.customs_mapper.prepare_customs(request, currency),
            "packages": [self.prepare_package(request, currency)],
        }

        if request.insurance and request.value:
            shipment["insurance_provider"] = "carrier"

        params = {
            "rate_options": {
                "carrier_ids": list(self.carrier_ids),
                "preferred_currency": currency,
            },
            "shipment": shipment,
        }
        logger.debug("Rate request params: %s", params)
        return params

    def prepare_package(self, request: ShipmentRequest, currency: str) -> Dict[str, Any]:
        package: Dict[str, Any] = {}

        if request.type and request.type in self.package_types:
            package["package_code"] = request.type

        package["weight"] = convert_weight(request.weight, request.weight_unit)
        package["dimensions"] = convert_dimensions(
            request.length, request.width, request.height, request.dimension_unit
        )

        if request.insurance and request.value:
            package["insured_value"] = {
                "currency": currency,
                "amount": request.value,
            }

        return package
