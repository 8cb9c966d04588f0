from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Tax Road API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "GST billing, receipts ledger and GSTR-3B reporting API"

    # Document store
    STORE_BACKEND: str = "mongo"  # "mongo" or "memory"
    MONGODB_URI: str = "mongodb://localhost:27017/?replicaSet=rs0"
    MONGODB_DB: str = "taxroad"
    TRANSACTION_MAX_ATTEMPTS: int = 5

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # JWT
    JWT_SECRET: str = "change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60 * 24

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
