from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./shipengine_rates.db"
    debug: bool = False

    shipengine_base_url: str = "https://api.shipengine.com/"
    request_timeout: float = 30.0

    # identifies this adapter instance in persisted cache keys
    adapter_id: str = "shipengine"

    # bootstrap values used until settings are saved through the API
    shipengine_sandbox: bool = False
    shipengine_test_api_key: str = ""
    shipengine_production_api_key: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

settings = Settings()
