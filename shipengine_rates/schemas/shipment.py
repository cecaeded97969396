# shipengine_rates/schemas/shipment.py
from pydantic import BaseModel
from typing import List, Optional

from shipengine_rates.schemas.address import Address


class ShipmentItem(BaseModel):
    """An order line as sent by the checkout.

    Every field is optional here; incomplete items are dropped when the
    customs declaration is built instead of failing the whole request.
    """
    name: Optional[str] = None
    quantity: Optional[int] = None
    value: Optional[float] = None
    tariff: Optional[str] = None
    country: Optional[str] = None


class ShipmentRequest(BaseModel):
    origin: Optional[Address] = None
    destination: Optional[Address] = None

    weight: Optional[float] = None
    weight_unit: Optional[str] = None
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    dimension_unit: Optional[str] = None
    type: Optional[str] = None

    items: Optional[List[ShipmentItem]] = None
    currency: Optional[str] = None
    insurance: Optional[bool] = None
    value: Optional[float] = None
    signature: Optional[bool] = None
    contents: Optional[str] = None

    # selected service, these don't change the quoted rates
    service: Optional[str] = None
    carrier_id: Optional[str] = None
    service_code: Optional[str] = None
