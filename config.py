from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # MongoDB Configuration
    mongo_url: str = "mongodb://localhost:27017"
    db_name: str = "tradeledger"

    # OCR / Vision LLM (OpenAI-compatible endpoint)
    llm_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    ocr_model: str = "gpt-4o"
    ocr_timeout_seconds: float = 60.0

    # Application Configuration
    environment: str = "development"
    cors_origins: List[str] = ["*"]

    # Commerce defaults
    default_country: str = "AE"
    default_invoice_prefix: str = "INV-"
    product_markup: float = 1.3  # selling price estimate for bill-created products
    signup_token_ttl_minutes: int = 10

    # JWT Configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 60 * 24 * 7  # 7 days

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings():
    return Settings()
