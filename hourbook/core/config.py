from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    INSTANCE_SLUG: str = "cps-software"

    # Server-side document store: "json" (one file per key) or "memory"
    STORE_PROVIDER: str = "json"
    DATA_DIR: str = "./data/kv"

    # Client side: talk to the HTTP API, or keep everything on this device
    USE_API: bool = False
    API_BASE_URL: str = "http://127.0.0.1:8000"
    API_TIMEOUT_SECONDS: float = 10.0
    LOCAL_BOOKINGS_PATH: str = "./data/local/bookings.json"
    POLL_INTERVAL_SECONDS: float = 7.0

    CURRENT_USER: str = "Jack"


settings = Settings()
