# shipengine_rates/schemas/rates.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class ErrorInfo(BaseModel):
    message: str


class MonetaryValue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    currency: Optional[str] = None
    amount: Optional[float] = None


class Rate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # upstream identifiers
    rate_id: Optional[str] = None
    carrier_id: Optional[str] = None
    carrier_code: Optional[str] = None
    carrier_friendly_name: Optional[str] = None
    service_code: Optional[str] = None
    service_type: Optional[str] = None
    package_type: Optional[str] = None

    shipping_amount: Optional[MonetaryValue] = None
    insurance_amount: Optional[MonetaryValue] = None
    confirmation_amount: Optional[MonetaryValue] = None
    other_amount: Optional[MonetaryValue] = None

    delivery_days: Optional[Any] = None
    carrier_delivery_days: Optional[Any] = None
    estimated_delivery_date: Optional[Any] = None
    error_messages: Optional[List[Any]] = None

    # derived
    service: str
    postage_description: str
    cost: float = 0.0
    tracking_type_description: str = ""
    delivery_time_description: str = ""


class ShipmentRates(BaseModel):
    rates: List[Rate] = Field(default_factory=list)


class CarrierCatalog(BaseModel):
    """Carrier accounts, services and package types of one ShipEngine account.

    carriers:         carrier_code -> friendly name
    carrier_accounts: "carrier_code|carrier_id" -> carrier_id
    services:         "carrier_id|service_code" -> service name
    package_types:    package_code -> package name
    """
    carriers: Dict[str, str] = Field(default_factory=dict)
    carrier_accounts: Dict[str, str] = Field(default_factory=dict)
    services: Dict[str, str] = Field(default_factory=dict)
    package_types: Dict[str, str] = Field(default_factory=dict)


class RatesResult(BaseModel):
    error: Optional[ErrorInfo] = None
    shipment: Optional[ShipmentRates] = None
    validation_errors: Optional[Dict[str, List[str]]] = None
    response: Optional[Any] = None
    params: Optional[Dict[str, Any]] = None


class ValidationResult(BaseModel):
    error: Optional[ErrorInfo] = None
    errors: List[str] = Field(default_factory=list)
    response: Optional[Any] = None


class CarrierCatalogResult(BaseModel):
    error: Optional[ErrorInfo] = None
    catalog: CarrierCatalog = Field(default_factory=CarrierCatalog)
    response: Optional[Any] = None
