import os
import logging
import pytz
from pydantic_settings import BaseSettings
from typing import List

logger = logging.getLogger(__name__)


ENV_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"


class Settings(BaseSettings):

    environment: str = "development"
    server_host: str = "0.0.0.0"
    port: int = 8001


    storage_backend: str = "memory"
    mongodb_uri: str = "mongodb://localhost:27017"
    db_name: str = "pillguard"
    kv_collection: str = "kv_store"


    device_timezone: str = "UTC"


    monitor_interval_seconds: int = 30
    due_window_seconds: int = 5
    adherence_lookback_days: int = 30
    refill_amount: float = 30
    seed_demo_data: bool = True


    firebase_credentials_path: str = "./firebase-credentials.json"
    fcm_device_tokens: str = ""


    groq_api_key: str = ""
    groq_model: str = "llama-3.1-8b-instant"
    http_timeout_seconds: float = 15.0
    drug_search_url: str = "https://clinicaltables.nlm.nih.gov/api/rxterms/v3/search"
    drug_label_url: str = "https://api.fda.gov/drug/label.json"
    drug_cache_size: int = 500


    cors_origins: str = "http://localhost:8081,http://localhost:19006"

    @property
    def cors_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def fcm_tokens(self) -> List[str]:
        return [t.strip() for t in self.fcm_device_tokens.split(",") if t.strip()]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._validate_settings()

    def _validate_settings(self):
        if self.device_timezone not in pytz.all_timezones_set:
            logger.warning(
                f"Unknown DEVICE_TIMEZONE '{self.device_timezone}', falling back to UTC"
            )
            self.device_timezone = "UTC"

        if self.storage_backend not in ("memory", "mongo"):
            raise ValueError(
                f"STORAGE_BACKEND must be 'memory' or 'mongo', got '{self.storage_backend}'"
            )

        if ENV_PRODUCTION:
            if self.storage_backend == "memory":
                logger.warning(
                    "Running in production with the in-memory store. Data will not survive a restart."
                )
            if not self.groq_api_key:
                logger.warning(
                    "GROQ_API_KEY is not set. AI-powered features will be disabled."
                )

    class Config:
        env_file = ".env"


settings = Settings()
