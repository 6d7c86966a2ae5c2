"""Configuration management for Pantry Chef.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Gemini API Key: optional, recipes degrade to the built-in fallback when missing
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Default: gemini-2.5-flash (fast, cost-effective, large enough output window)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Temperature: Controls randomness (0.0 = deterministic, 2.0 = max randomness)
        # For recipe generation: 0.7 keeps suggestions varied but still realistic
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # Max Output Tokens: must hold 3-5 complete recipes as a JSON array
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "4000"))
        # Upstream generation timeout in seconds (per request, no retries)
        self.REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))
        # Availability probe timeout in seconds (model listing)
        self.PROBE_TIMEOUT_SECONDS: float = float(os.getenv("PROBE_TIMEOUT_SECONDS", "10"))
        # Number of recipes requested from the model
        self.MIN_RECIPES: int = int(os.getenv("MIN_RECIPES", "3"))
        self.MAX_RECIPES: int = int(os.getenv("MAX_RECIPES", "5"))
        # Server Port
        self.PORT: int = int(os.getenv("PORT", "8080"))
        # Upper bound for the history page size
        self.HISTORY_PAGE_LIMIT: int = int(os.getenv("HISTORY_PAGE_LIMIT", "50"))
        # CORS origins, comma-separated
        self.CORS_ORIGINS: list[str] = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:8080").split(",")
            if origin.strip()
        ]
        # Reply for the /api/ping endpoint
        self.PING_MESSAGE: str = os.getenv("PING_MESSAGE", "ping")

    def validate(self) -> None:
        """Validate configuration values.

        GEMINI_API_KEY is intentionally not required: without it the service
        serves fallback recipes.

        Raises:
            ValueError: If a configured value is out of range.
        """
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_OUTPUT_TOKENS < 2048:
            raise ValueError(
                f"MAX_OUTPUT_TOKENS must be at least 2048, got: {self.MAX_OUTPUT_TOKENS}"
            )
        if self.REQUEST_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"REQUEST_TIMEOUT_SECONDS must be positive, got: {self.REQUEST_TIMEOUT_SECONDS}"
            )
        if self.PROBE_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"PROBE_TIMEOUT_SECONDS must be positive, got: {self.PROBE_TIMEOUT_SECONDS}"
            )
        if self.MIN_RECIPES < 1:
            raise ValueError(
                f"MIN_RECIPES must be at least 1, got: {self.MIN_RECIPES}"
            )
        if self.MAX_RECIPES < self.MIN_RECIPES:
            raise ValueError(
                f"MAX_RECIPES must be >= MIN_RECIPES ({self.MIN_RECIPES}), got: {self.MAX_RECIPES}"
            )
        if self.HISTORY_PAGE_LIMIT < 1:
            raise ValueError(
                f"HISTORY_PAGE_LIMIT must be at least 1, got: {self.HISTORY_PAGE_LIMIT}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()
