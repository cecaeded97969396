from typing import Any, Dict, Optional

from shipengine_rates.schemas.address import Address

DEFAULT_NAME = "Resident"
# ShipEngine rejects addresses without a phone number
DEFAULT_PHONE = "10000000000"


def prepare_address(address: Optional[Address]) -> Dict[str, Any]:
    """
    Map a store address to a ShipEngine address.

    Addresses with a company are sent as commercial, everything else as
    residential. Only the fields that were given are sent for the location
    part of the address.
    """
    if address is None:
        address = Address()

    prepared: Dict[str, Any] = {"address_residential_indicator": "yes"}
    prepared["name"] = address.name or DEFAULT_NAME

    if address.company:
        prepared["company_name"] = address.company
        prepared["address_residential_indicator"] = "no"
        if not address.name:
            prepared["name"] = address.company

    phone = address.phone
    if isinstance(phone, list):
        phone = phone[0] if phone else None
    prepared["phone"] = phone or DEFAULT_PHONE

    if address.country is not None:
        prepared["country_code"] = address.country.upper()
    if address.state is not None:
        prepared["state_province"] = address.state
    if address.postcode is not None:
        prepared["postal_code"] = address.postcode
    if address.city is not None:
        prepared["city_locality"] = address.city
    if address.address:
        prepared["address_line1"] = address.address
    if address.address_2 is not None:
        prepared["address_line2"] = address.address_2

    return prepared
