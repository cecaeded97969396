import logging
import math
from typing import Any, Dict, List, Optional

from shipengine_rates.schemas.rates import (
    CarrierCatalog,
    CarrierCatalogResult,
    ErrorInfo,
    Rate,
    RatesResult,
    ShipmentRates,
    ValidationResult,
)

logger = logging.getLogger(__name__)

COST_COMPONENTS = ("shipping_amount", "insurance_amount", "confirmation_amount", "other_amount")


def get_service_id(carrier: str, service: str) -> str:
    """Stable lookup key for a carrier scoped identifier."""
    return f"{carrier}|{service}"


def get_error_messages(errors: Any) -> List[str]:
    messages = []
    if errors and isinstance(errors, list):
        for error in errors:
            if isinstance(error, dict) and error.get("message"):
                messages.append(str(error["message"]))
            elif isinstance(error, str) and error:
                messages.append(error)
    return messages


def get_error(response: Any) -> Optional[ErrorInfo]:
    """Top level ``errors`` of any ShipEngine response as one message."""
    if not isinstance(response, dict) or not response.get("errors"):
        return None

    message = "\n".join(get_error_messages(response["errors"])).strip()
    if not message:
        return None

    logger.debug("ShipEngine error message: %s", message)
    return ErrorInfo(message=message)


def normalize_validation(response: Any) -> ValidationResult:
    result = ValidationResult(error=get_error(response), response=response)

    if not isinstance(response, list) or not response or not isinstance(response[0], dict):
        return result

    status = response[0].get("status")
    if status is not None and status != "verified":
        result.errors = get_error_messages(response[0].get("messages"))

    return result


def normalize_carriers(response: Any) -> CarrierCatalogResult:
    result = CarrierCatalogResult(error=get_error(response), response=response)

    if not isinstance(response, dict) or not response.get("carriers"):
        return result

    catalog = CarrierCatalog()
    for carrier in response["carriers"]:
        carrier_code = carrier.get("carrier_code")
        carrier_id = carrier.get("carrier_id")
        if not carrier_code or not carrier_id:
            logger.debug("Carrier without code or id, skipping it: %s", carrier)
            continue

        catalog.carriers[carrier_code] = carrier.get("friendly_name") or carrier_code
        catalog.carrier_accounts[get_service_id(carrier_code, carrier_id)] = carrier_id

        for service in carrier.get("services") or []:
            service_code = service.get("service_code")
            if service_code:
                catalog.services[get_service_id(carrier_id, service_code)] = service.get("name") or service_code

        for package in carrier.get("packages") or []:
            package_code = package.get("package_code")
            if package_code:
                catalog.package_types[package_code] = package.get("name") or package_code

    result.catalog = catalog
    return result


def _amount(rate: Dict[str, Any], component: str) -> float:
    value = rate.get(component)
    if not isinstance(value, dict) or not value.get("amount"):
        return 0.0
    return float(value["amount"])


def _delivery_days(value: Any) -> Optional[float]:
    if not value or isinstance(value, bool):
        return None
    try:
        days = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(days):
        return None
    return days


def normalize_rate(rate: Dict[str, Any], services: Dict[str, str]) -> Rate:
    service_id = get_service_id(rate.get("carrier_id"), rate.get("service_code"))

    delivery_time_description = ""
    delivery_days = _delivery_days(rate.get("delivery_days"))
    if delivery_days:
        delivery_time_description = "Estimated delivery in %d days" % delivery_days

    data = dict(rate)
    data.update(
        service=service_id,
        postage_description=services.get(service_id) or rate.get("service_type") or service_id,
        cost=sum(_amount(rate, component) for component in COST_COMPONENTS),
        tracking_type_description="",
        delivery_time_description=delivery_time_description,
    )
    return Rate.model_validate(data)


def sort_rates(rates: List[Rate]) -> List[Rate]:
    # sorted() is stable, equal costs keep the upstream order
    return sorted(rates, key=lambda rate: rate.cost)


def normalize_rates(response: Any, services: Dict[str, str]) -> RatesResult:
    result = RatesResult(error=get_error(response), response=response)

    if not isinstance(response, dict) or not isinstance(response.get("rate_response"), dict):
        return result

    rate_response = response["rate_response"]
    # invalid rates are kept so unavailable services can still be shown
    their_rates = rate_response.get("rates") or rate_response.get("invalid_rates") or []

    rates: Dict[str, Rate] = {}
    for rate in their_rates:
        normalized = normalize_rate(rate, services)
        rates[normalized.service] = normalized

    result.shipment = ShipmentRates(rates=sort_rates(list(rates.values())))
    return result
