"""Application configuration.

Environment variables override all defaults. A `backend/.env` file is loaded
for local development without overriding variables already set.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Database Configuration (key-value store for the three collections)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./texops.db")

    # Groq API Key (Must be set via .env, never in code)
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    GROQ_VISION_MODEL: str = os.getenv(
        "GROQ_VISION_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct"
    )
    EXTRACTION_TIMEOUT_SECONDS: float = float(os.getenv("EXTRACTION_TIMEOUT_SECONDS", "30"))
    EXTRACTION_MAX_RETRIES: int = int(os.getenv("EXTRACTION_MAX_RETRIES", "2"))
    # 10 MB; phone photos of invoices are well under this
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # Stock rules
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "50"))
    # "skip" ignores requirements whose item was deleted, "full_shortage" counts them as missing
    UNRESOLVED_REQUIREMENT_POLICY: str = os.getenv("UNRESOLVED_REQUIREMENT_POLICY", "skip")
    ENFORCE_SUFFICIENCY_ON_SAVE: bool = _env_bool("ENFORCE_SUFFICIENCY_ON_SAVE", True)
    ENFORCE_SUFFICIENCY_ON_COMPLETE: bool = _env_bool("ENFORCE_SUFFICIENCY_ON_COMPLETE", True)

    # Backup files
    BACKUP_VERSION: str = "1.0"
    STRICT_BACKUP_VERSION: bool = _env_bool("STRICT_BACKUP_VERSION", False)

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"


settings = Settings()
