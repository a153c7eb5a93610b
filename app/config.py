"""
Application settings for the fuel receipt service.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Company / store catalog
    DATABASE_URL: str = "sqlite:///./data/pos.db"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # File output
    DATA_DIR: str = "./data"
    RECEIPTS_DIR: str = "./data/receipts"

    # Tax
    PREVIEW_TAX_RATE: str = "0.08"
    INCLUDED_TAX_RATE: str = "0.13"

    # Request defaults for card tenders
    DEFAULT_CARD_LAST4: str = "3948"
    DEFAULT_ENTRY_METHOD: str = "INSERT"
    DEFAULT_COPY_TYPE: str = "Original"

    # Synthetic authorization; set for reproducible documents
    AUTH_SEED: Optional[int] = None

    @property
    def strict_rules(self) -> bool:
        """Rule conflicts raise everywhere except production."""
        return self.ENVIRONMENT.lower() != "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
