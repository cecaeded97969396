from fastapi import APIRouter, Depends
from shipengine_rates.api.deps import get_adapter
from shipengine_rates.schemas.address import Address
from shipengine_rates.schemas.rates import CarrierCatalogResult, ErrorInfo, RatesResult, ValidationResult
from shipengine_rates.schemas.shipment import ShipmentRequest
from shipengine_rates.services.adapter import ShipEngineAdapter

router = APIRouter()

@router.post("/rates", response_model=RatesResult)
async def get_rates(data: ShipmentRequest, adapter: ShipEngineAdapter = Depends(get_adapter)):
    return await adapter.get_rates(data)

@router.post("/addresses/validate", response_model=ValidationResult)
async def validate_address(data: Address, adapter: ShipEngineAdapter = Depends(get_adapter)):
    return await adapter.validate_address(data)

@router.get("/carriers", response_model=CarrierCatalogResult)
async def get_carriers(adapter: ShipEngineAdapter = Depends(get_adapter)):
    error_message = await adapter.initialize()
    result = CarrierCatalogResult(catalog=adapter.catalog)
    if error_message:
        result.error = ErrorInfo(message=error_message)
    return result
