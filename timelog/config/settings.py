"""
Configuration management for the time logging assistant.
"""

from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimeLogConfig(BaseSettings):
    """Configuration settings for the time logging assistant."""

    # Webhook delivery
    webhook_url: Optional[str] = Field(default=None, alias="WEBHOOK_URL")
    webhook_api_key: Optional[str] = Field(default=None, alias="WEBHOOK_API_KEY")
    webhook_enabled: bool = Field(default=True, alias="WEBHOOK_ENABLED")
    delivery_max_attempts: int = Field(default=3, alias="DELIVERY_MAX_ATTEMPTS")
    retry_base_delay: float = Field(default=1.0, alias="RETRY_BASE_DELAY")
    retry_max_delay: float = Field(default=30.0, alias="RETRY_MAX_DELAY")
    request_timeout: float = Field(default=10.0, alias="REQUEST_TIMEOUT")

    # Option lists shown in prompts (JSON lists in the environment)
    matters: List[str] = Field(
        default=[
            "Client A - Project Alpha",
            "Client B - Project Beta",
            "Client C - Project Gamma",
            "Internal - Marketing",
            "Internal - Operations",
        ],
        alias="MATTERS",
    )
    cost_centres: List[str] = Field(
        default=["Development", "Marketing", "Sales", "Operations", "Administration"],
        alias="COST_CENTRES",
    )
    business_areas: List[str] = Field(
        default=[
            "Software Development",
            "Client Relations",
            "Business Development",
            "Training & Education",
            "Administrative Tasks",
        ],
        alias="BUSINESS_AREAS",
    )
    subcategories: List[str] = Field(
        default=[
            "Meetings",
            "Documentation",
            "Research",
            "Planning",
            "Training",
            "Email Management",
        ],
        alias="SUBCATEGORIES",
    )

    # Text generation (open-ended mode)
    llm_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    llm_model: str = Field(default="gpt-4o-mini", alias="LLM_MODEL")
    llm_base_url: str = Field(default="https://api.openai.com/v1", alias="LLM_BASE_URL")
    llm_temperature: float = Field(default=0.7, alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=1000, alias="LLM_MAX_TOKENS")

    # Session persistence
    session_file: str = Field(default=".timelog/session.json", alias="SESSION_FILE")

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("webhook_url", "webhook_api_key", "llm_api_key")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty strings from .env files as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v):
        """Ensure the webhook URL is an http(s) URL."""
        if v is not None and not v.lower().startswith(("http://", "https://")):
            raise ValueError("Webhook URL must start with http:// or https://")
        return v

    @field_validator("delivery_max_attempts")
    @classmethod
    def validate_attempts(cls, v):
        """At least one delivery attempt is always made."""
        if v < 1:
            raise ValueError("delivery_max_attempts must be at least 1")
        return v

    @field_validator("request_timeout", "retry_max_delay")
    @classmethod
    def validate_positive(cls, v):
        """Timeouts and delay caps must be positive."""
        if v <= 0:
            raise ValueError("Value must be greater than zero")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @property
    def delivery_configured(self) -> bool:
        """Whether entries should be sent to a webhook at all."""
        return self.webhook_enabled and bool(self.webhook_url)


def load_config(env_file: Optional[str] = None) -> TimeLogConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return TimeLogConfig()


# Global configuration instance
_config: Optional[TimeLogConfig] = None


def get_config() -> TimeLogConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> TimeLogConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
