"""
Configuration management for the account authentication service
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """Service configuration loaded from environment variables"""

    # Token signing
    SECRET_KEY: str = "change-this-secret-in-prod-0123456789abcdef"
    ALGORITHM: str = "HS256"
    TOKEN_EXPIRY_SECONDS: int = 86400
    RESET_TOKEN_EXPIRY_SECONDS: int = 3600

    # Password hashing
    PASSWORD_HASH_ROUNDS: int = 29000

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./app.db"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./logs"
    DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("ALGORITHM")
    @classmethod
    def check_algorithm(cls, value: str) -> str:
        # Only symmetric HMAC signing is accepted
        if value not in HMAC_ALGORITHMS:
            raise ValueError(f"ALGORITHM must be one of: {', '.join(HMAC_ALGORITHMS)}")
        return value


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the active settings."""
    return settings
