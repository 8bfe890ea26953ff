"""
API configuration settings.

Loads configuration from environment variables (API_ prefix) and .env.
"""

from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List
from functools import lru_cache


class RateLimitRule(BaseModel):
    """Request budget for one client over a window."""
    limit: int = Field(..., gt=0, description="Max requests per window")
    window: int = Field(default=3600, gt=0, description="Window in seconds")


class APISettings(BaseSettings):
    """
    API configuration settings.

    Loaded from environment variables with API_ prefix. Override maps are
    JSON in the environment, e.g.
    API_RATE_LIMIT_ENDPOINT_OVERRIDES='{"/validators/vin/validate": {"limit": 10, "window": 60}}'
    """

    # API Metadata
    API_TITLE: str = "Validator Engine API"
    API_DESCRIPTION: str = "Validation, discovery and token extraction for identifiers, handles and links"
    API_VERSION: str = "1.0.0"
    API_PREFIX: str = Field(default="", description="Mount point for the validator routes")

    # Server Configuration
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    ENVIRONMENT: str = Field(default="development", description="Environment (development, staging, production)")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Log level")

    # CORS Configuration (headers are set on every response)
    ENABLE_CORS: bool = Field(default=True, description="Enable CORS headers")
    CORS_ALLOW_ORIGIN: str = Field(default="*", description="Access-Control-Allow-Origin value")
    CORS_METHODS: List[str] = Field(default=["GET", "POST", "OPTIONS"], description="Allowed HTTP methods")
    CORS_HEADERS: List[str] = Field(default=["Content-Type", "Authorization"], description="Allowed headers")

    # Rate Limiting
    ENABLE_RATE_LIMIT: bool = Field(default=True, description="Enable rate limiting")
    RATE_LIMIT_REQUESTS: int = Field(default=100, description="Max requests per window")
    RATE_LIMIT_WINDOW: int = Field(default=3600, description="Rate limit window in seconds")
    RATE_LIMIT_USER_OVERRIDES: Dict[str, RateLimitRule] = Field(
        default_factory=dict,
        description="Per API key (X-API-Key) budgets"
    )
    RATE_LIMIT_ENDPOINT_OVERRIDES: Dict[str, RateLimitRule] = Field(
        default_factory=dict,
        description="Per request path budgets"
    )
    API_KEY_HEADER: str = Field(default="X-API-Key", description="Header identifying a user")

    # Documentation
    ENABLE_DOCS: bool = Field(default=True, description="Enable API documentation")

    @field_validator('CORS_METHODS', 'CORS_HEADERS', mode='before')
    @classmethod
    def split_string_to_list(cls, value):
        """Convert comma-separated string to list."""
        if isinstance(value, str) and not value.lstrip().startswith("["):
            return [item.strip() for item in value.split(',') if item.strip()]
        return value

    @field_validator('API_PREFIX')
    @classmethod
    def normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value

    def rule_for(self, path: str, api_key: str = None) -> RateLimitRule:
        """
        Budget that applies to a request.

        Endpoint overrides win over user overrides, which win over the
        default budget.
        """
        if path in self.RATE_LIMIT_ENDPOINT_OVERRIDES:
            return self.RATE_LIMIT_ENDPOINT_OVERRIDES[path]
        if api_key and api_key in self.RATE_LIMIT_USER_OVERRIDES:
            return self.RATE_LIMIT_USER_OVERRIDES[api_key]
        return RateLimitRule(limit=self.RATE_LIMIT_REQUESTS, window=self.RATE_LIMIT_WINDOW)

    class Config:
        env_file = ".env"
        env_prefix = "API_"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_api_settings() -> APISettings:
    """
    Get cached API settings instance.

    Returns:
        APISettings instance
    """
    return APISettings()
