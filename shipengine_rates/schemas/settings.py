from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from shipengine_rates.schemas.address import Address


class AdapterSettings(BaseModel):
    """Every option the ShipEngine adapter understands.

    Unknown keys are rejected so a typo in a stored settings blob shows up
    as a validation error instead of being silently ignored.
    """
    model_config = ConfigDict(extra="forbid")

    sandbox: bool = False
    test_api_key: Optional[str] = None
    production_api_key: Optional[str] = None

    origin: Address = Field(default_factory=Address)
    insurance: bool = False
    signature: bool = False
    validate_address: bool = False

    weight_unit: str = "lbs"
    dimension_unit: str = "in"
    default_tariff: Optional[str] = None
    cache_expiration_in_secs: int = Field(default=86400, ge=0)

    @property
    def active_api_key(self) -> Optional[str]:
        return self.test_api_key if self.sandbox else self.production_api_key

    @property
    def active_api_key_field(self) -> str:
        return "test_api_key" if self.sandbox else "production_api_key"

    def masked(self) -> "AdapterSettings":
        """Copy safe to return over the API."""
        return self.model_copy(update={
            "test_api_key": _mask(self.test_api_key),
            "production_api_key": _mask(self.production_api_key),
        })

    def with_stored_keys(self, stored: "AdapterSettings") -> "AdapterSettings":
        """Swap masked API keys sent back by a client for the stored ones."""
        updates = {}
        for field in ("test_api_key", "production_api_key"):
            value = getattr(self, field)
            stored_value = getattr(stored, field)
            if value and stored_value and value == _mask(stored_value):
                updates[field] = stored_value
        return self.model_copy(update=updates)


def _mask(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    return "*" * max(len(value) - 4, 0) + value[-4:]
