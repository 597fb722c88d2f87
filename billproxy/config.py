"""
Configuration module for the Bill Proxy.

This module uses Pydantic Settings to load and validate environment variables
for the telecom billing provider, the HTTP server and logging.

Environment variables are loaded from .env file or system environment.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Shared by the HTTP service and the check_bill command-line client.
    """

    # =========================================================================
    # Provider Configuration
    # =========================================================================

    PROVIDER_BASE_URL: HttpUrl = Field(
        ...,
        description="Billing provider API base URL (e.g., https://api.telco.example/v1)",
    )

    PROVIDER_API_KEY: str = Field(
        ...,
        description="API key sent to the provider as a Bearer token",
        min_length=1,
    )

    PROVIDER_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout for a single provider request in seconds",
        gt=0,
        le=120,
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the HTTP server",
    )

    PORT: int = Field(
        default=3000,
        description="Port to bind the HTTP server",
        ge=1,
        le=65535,
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    ALLOWED_ORIGINS: Optional[str] = Field(
        None,
        description="Comma-separated list of allowed CORS origins (leave empty for no CORS)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def provider_base_url_str(self) -> str:
        """
        Get provider base URL as string (for HTTP client usage).

        Returns:
            Provider URL as string without trailing slash.
        """
        return str(self.PROVIDER_BASE_URL).rstrip("/")

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origin URLs, or empty list if not configured.
        """
        if not self.ALLOWED_ORIGINS:
            return []

        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("PROVIDER_API_KEY")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Reject keys that are only whitespace"""
        v = v.strip()
        if not v:
            raise ValueError("PROVIDER_API_KEY cannot be empty or only whitespace")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate LOG_LEVEL is a standard logging level name.

        Args:
            v: Level name, any case

        Returns:
            Upper-cased level name

        Raises:
            ValueError: If level is not recognised
        """
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        v = v.strip().upper()
        if v not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return v


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    This function is cached so that the settings are loaded only once
    during the application lifecycle.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If required environment variables are missing
                        or invalid.

    Example:
        >>> from billproxy.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.provider_base_url_str)
    """
    return Settings()


def validate_configuration(settings: Settings) -> dict:
    """
    Validate configuration settings and return a status report.

    Returns:
        Dictionary with validation status and any warnings.

    Example:
        >>> status = validate_configuration(get_settings())
        >>> if not status["valid"]:
        ...     print(status["errors"])
    """
    errors = []
    warnings = []

    base_url = settings.provider_base_url_str

    if settings.PROVIDER_BASE_URL.query or settings.PROVIDER_BASE_URL.fragment:
        errors.append("PROVIDER_BASE_URL must not contain a query string or fragment")

    if base_url.startswith("http://"):
        warnings.append("PROVIDER_BASE_URL uses plain HTTP (API key sent unencrypted)")

    if "localhost" in base_url or "127.0.0.1" in base_url:
        warnings.append("PROVIDER_BASE_URL points to localhost (may cause issues in containers)")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


if __name__ == "__main__":
    """
    Validate your .env configuration:
        python -m billproxy.config
    """
    print("=" * 80)
    print("BILL PROXY CONFIGURATION")
    print("=" * 80)

    try:
        config = get_settings()
    except Exception as e:
        print(f"\n✗ Configuration error: {e}")
        print("""
Required variables:
  - PROVIDER_BASE_URL
  - PROVIDER_API_KEY

Optional variables:
  - PORT (default: 3000)
  - HOST (default: 0.0.0.0)
  - PROVIDER_TIMEOUT_SECONDS (default: 10.0)
  - LOG_LEVEL (default: INFO)
  - ALLOWED_ORIGINS
        """)
        raise SystemExit(2)

    print("\n✓ Configuration loaded successfully!\n")

    print("Provider Configuration:")
    print(f"  Base URL:       {config.provider_base_url_str}")
    print(f"  Timeout:        {config.PROVIDER_TIMEOUT_SECONDS} seconds")

    print("\nServer Configuration:")
    print(f"  Host:           {config.HOST}")
    print(f"  Port:           {config.PORT}")
    print(f"  Log level:      {config.LOG_LEVEL}")

    if config.allowed_origins_list:
        print("\nCORS Configuration:")
        print(f"  Allowed Origins: {', '.join(config.allowed_origins_list)}")

    status = validate_configuration(config)

    print()
    if status["valid"]:
        print("✓ All critical checks passed!")
    else:
        print("✗ Configuration errors found:")
        for error in status["errors"]:
            print(f"  - {error}")

    if status["warnings"]:
        print("\n⚠ Warnings:")
        for warning in status["warnings"]:
            print(f"  - {warning}")
