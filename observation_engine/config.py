"""
Observation Engine Configuration

Central settings loaded from environment variables.
Rule points and patterns are NOT configurable here; they live in the
immutable registry.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    VERSION: str = "1.0.0"
    API_VERSION: str = "1"

    # --- Input limits (API layer only; the engine itself accepts anything) ---
    MAX_SUBMISSION_CHARS: int = int(
        os.getenv("OBSERVATION_MAX_SUBMISSION_CHARS", "20000")
    )

    # --- Server ---
    HOST: str = os.getenv("OBSERVATION_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("OBSERVATION_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("OBSERVATION_CORS_ORIGINS", "*")


settings = Settings()
