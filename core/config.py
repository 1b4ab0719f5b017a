from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./storefront.db"
    # Shared secret of the hosted auth backend, used only to verify its tokens
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Local fallback ledger
    LOCAL_LEDGER_PATH: str = "data/local_orders.json"
    LEDGER_WRITE_FALLBACK: bool = False

    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 1000
    LOW_STOCK_THRESHOLD: int = 10
    DEFAULT_PHONE_REGION: str = "BD"

    # Courier (Steadfast)
    COURIER_BASE_URL: str = "https://portal.steadfast.com.bd/api/v1"
    COURIER_API_KEY: str = ""
    COURIER_SECRET_KEY: str = ""
    COURIER_TIMEOUT: float = 10.0
    COURIER_NOTE: str = "Order from Friends Gallery"

    PIXEL_ID: str = ""


settings = Settings()
