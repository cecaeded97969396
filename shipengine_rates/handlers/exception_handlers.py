from fastapi import Request, FastAPI
from fastapi.responses import JSONResponse
from shipengine_rates.core.exceptions import BusinessLogicException, ConfigurationException, ExternalServiceException

async def business_logic_exception_handler(request: Request, exc: BusinessLogicException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)}
    )

async def configuration_exception_handler(request: Request, exc: ConfigurationException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.errors}
    )

async def external_service_exception_handler(request: Request, exc: ExternalServiceException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)}
    )

def init_exception_handlers(app: FastAPI):
    app.add_exception_handler(BusinessLogicException, business_logic_exception_handler)
    app.add_exception_handler(ConfigurationException, configuration_exception_handler)
    app.add_exception_handler(ExternalServiceException, external_service_exception_handler)
