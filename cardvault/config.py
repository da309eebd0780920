"""
Configuration loader for CardVault.
Loads environment variables from .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv


# Load .env from the project root
PROJECT_ROOT = Path(__file__).parent.parent
ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(ENV_PATH)


class Config:
    """Application configuration."""
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017/cardvault")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "cardvault")

    # TCGdex catalog
    TCGDEX_BASE_URL: str = os.getenv("TCGDEX_BASE_URL", "https://api.tcgdex.net/v2")
    TCGDEX_LANGUAGE: str = os.getenv("TCGDEX_LANGUAGE", "en")  # English has the most complete data
    TCGDEX_TIMEOUT: int = int(os.getenv("TCGDEX_TIMEOUT", "30"))
    TCGDEX_MAX_RETRIES: int = int(os.getenv("TCGDEX_MAX_RETRIES", "3"))
    TCGDEX_RETRY_DELAY: float = float(os.getenv("TCGDEX_RETRY_DELAY", "2.0"))
    DETAIL_BATCH_SIZE: int = int(os.getenv("DETAIL_BATCH_SIZE", "10"))
    DETAIL_BATCH_DELAY: float = float(os.getenv("DETAIL_BATCH_DELAY", "0.5"))

    # Hydration
    DEDUP_BATCH_SIZE: int = int(os.getenv("DEDUP_BATCH_SIZE", "500"))
    RECORD_PROGRESS_INTERVAL: int = int(os.getenv("RECORD_PROGRESS_INTERVAL", "10"))
    NAME_PROGRESS_INTERVAL: int = int(os.getenv("NAME_PROGRESS_INTERVAL", "5"))


# Singleton instance
config = Config()
