# File: cv_assistant/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    PROJECT_NAME: str = "CV Assistant API"
    PROJECT_VERSION: str = "0.1.0"

    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./cv_assistant.db")

    # LLM settings
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_PRO_MODEL: str = os.getenv("GEMINI_PRO_MODEL", "gemini-2.5-pro")
    GEMINI_LITE_MODEL: str = os.getenv("GEMINI_LITE_MODEL", "gemini-2.5-flash-lite")
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "120"))
    LLM_JSON_RETRIES: int = int(os.getenv("LLM_JSON_RETRIES", "2"))

    # Security settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "insecure-default-secret-key-for-dev-only")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")

    # Resume rendering
    MAX_SELECTED_ENTRIES: int = int(os.getenv("MAX_SELECTED_ENTRIES", "7"))
    MIN_PDF_BYTES: int = int(os.getenv("MIN_PDF_BYTES", "1000"))

    # CORS settings
    CORS_ORIGINS: list = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")


settings = Settings()
