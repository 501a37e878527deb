from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Core
    ENVIRONMENT: str = Field(default="production")
    LOG_LEVEL: str = Field(default="INFO")
    BRAND_NAME: str = Field(default="PrimoBoost")
    CORS_ALLOW_ORIGINS: str = Field(default="*")  # comma-separated

    # Persistence gateway (Firestore + GCS)
    FIRESTORE_PROJECT_ID: str = Field(default="")
    GCS_SUBMISSIONS_BUCKET: str = Field(default="submissions")

    # Local fallback cache (survives restarts)
    LOCAL_CACHE_PATH: str = Field(default=".primoboost/local_store.json")

    # Admin gate
    ADMIN_PASSCODE: str = Field(default="")

    # Catalog
    PRODUCTS_LOAD_TIMEOUT_SEC: float = Field(default=10.0)

    # Registrations
    REFERENCE_ID_PREFIX: str = Field(default="PJ")
    REFERENCE_ID_MAX_ATTEMPTS: int = Field(default=5)

    # Built-in settings floor
    DEFAULT_UPI_ID: str = Field(default="primojobs@upi")
    DEFAULT_QR_CODE_URL: str = Field(
        default="https://img.sanishtech.com/u/6629801cde5d6b03f4704e221bd65bbc.jpg"
    )
    DEFAULT_WHATSAPP_NUMBER: str = Field(default="+919876543210")


settings = Settings()
