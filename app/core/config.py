import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv


class Settings:
    """Simple settings loaded from environment.

    Loads `.env` if present and falls back to sensible defaults.
    """

    def __init__(self) -> None:
        load_dotenv()

        self.API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:4000/api")
        self.API_KEY: str = os.getenv("API_KEY", "dev-local-key")
        self.REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "10"))
        # Applied to every purchase and sell line; the card form takes GST per line.
        self.GST_PERCENT: Decimal = Decimal(os.getenv("GST_PERCENT", "5"))
        self.CREDENTIALS_PATH: str = os.getenv("CREDENTIALS_PATH", ".tokens/session.json")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FILE: str | None = os.getenv("LOG_FILE")
        self.PORT: int = int(os.getenv("PORT", "8000"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
