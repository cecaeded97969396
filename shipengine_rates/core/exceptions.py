# exceptions.py
from typing import List

NO_CARRIER_ACCOUNTS_MESSAGE = "No carrier accounts have been found."


class BusinessLogicException(Exception):
    """Base class for business-related exceptions."""
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.detail)


class ConfigurationException(BusinessLogicException):
    """Adapter settings can't be activated, e.g. the active API key is missing."""
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(status_code=400, detail="\n".join(errors))


class NoCarrierAccountsException(BusinessLogicException):
    def __init__(self):
        super().__init__(status_code=400, detail=NO_CARRIER_ACCOUNTS_MESSAGE)


class ExternalServiceException(Exception):
    """Base class for external service-related exceptions."""
    def __init__(self, detail: str, status_code: int = 500):
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.detail)


class ExternalServiceClientError(ExternalServiceException):
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)


class ExternalServiceServerError(ExternalServiceException):
    """Exception raised when there is an issue connecting to the external service."""
    def __init__(self, message: str):
        super().__init__(status_code=502, detail=message)
