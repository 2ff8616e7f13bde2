"""Application configuration using Pydantic Settings with YAML support.

This module provides centralized configuration management with:
- YAML-based configuration files organized by domain
- Environment-specific overrides (test, development, staging, production)
- Environment variable loading for secrets
- Type validation and coercion
- Caching for performance
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator, Field
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


def parse_list(v: str | list[str]) -> list[str]:
    """Parse comma-separated string or list into list of strings."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Pantry Chef Service"
    version: str = "1.0.0"
    debug: bool = False


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 5000
    graceful_shutdown_timeout: int = 10  # seconds before a forced exit


class ApiSettings(BaseModel):
    """API configuration settings."""

    prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:3000"]


class JwtSettings(BaseModel):
    """JWT token settings."""

    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7


class AuthSettings(BaseModel):
    """Authentication configuration settings."""

    jwt: JwtSettings = JwtSettings()
    bcrypt_rounds: int = 12


class DatabaseSettings(BaseModel):
    """PostgreSQL database configuration settings."""

    host: str = "localhost"
    port: int = 5432
    name: str = "pantry_chef"
    user: str | None = None
    min_pool_size: int = 1
    max_pool_size: int = 10
    command_timeout: float = 30.0  # Query timeout in seconds
    connect_timeout: float = 5.0
    ssl: bool = False
    create_schema: bool = True  # Apply idempotent DDL at startup


class RateLimitPolicySettings(BaseModel):
    """A single sliding-window rate limit policy."""

    name: str
    limit: int
    window_seconds: int
    paths: list[str] = []  # Exact request paths
    path_prefixes: list[str] = []
    message: str = "Too many requests from this IP, please try again later."


def _default_rate_limit_policies() -> list[RateLimitPolicySettings]:
    return [
        RateLimitPolicySettings(
            name="api",
            limit=100,
            window_seconds=15 * 60,
            path_prefixes=["/api/"],
            message="Too many API requests. Please slow down.",
        ),
        RateLimitPolicySettings(
            name="auth",
            limit=5,
            window_seconds=15 * 60,
            paths=["/api/auth/register", "/api/auth/login"],
            message="Too many authentication attempts. Please try again later.",
        ),
        RateLimitPolicySettings(
            name="ai",
            limit=10,
            window_seconds=60,
            paths=["/api/recipes/generate"],
            message=(
                "Too many AI generation requests. "
                "Please wait before generating more recipes."
            ),
        ),
    ]


class RateLimitingSettings(BaseModel):
    """Rate limiting configuration."""

    enabled: bool = True
    storage_uri: str = "memory://"
    policies: list[RateLimitPolicySettings] = Field(
        default_factory=_default_rate_limit_policies
    )


class TimeoutSettings(BaseModel):
    """Per-request timeout configuration (milliseconds)."""

    default_ms: int = 30_000
    overrides: dict[str, int] = {"/api/recipes/generate": 60_000}


class RequestSettings(BaseModel):
    """Inbound request limits."""

    max_body_bytes: int = 10 * 1024 * 1024


class RecipeSettings(BaseModel):
    """Recipe domain settings."""

    max_ingredients: int = 20
    default_servings: int = 4


class AzureOpenAISettings(BaseModel):
    """Azure OpenAI chat-completion deployment."""

    endpoint: str | None = None
    api_version: str = "2024-02-15-preview"
    deployment: str = "gpt-35-turbo"
    timeout: float = 50.0
    max_retries: int = 2
    requests_per_minute: float = 60.0
    max_tokens: int = 2000
    temperature: float = 0.7
    top_p: float = 0.95


class LLMSettings(BaseModel):
    """LLM configuration settings."""

    enabled: bool = True
    azure: AzureOpenAISettings = AzureOpenAISettings()


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"
    log_request_body: bool = False


class MetricsSettings(BaseModel):
    """Metrics configuration settings."""

    enabled: bool = True


class ObservabilitySettings(BaseModel):
    """Observability configuration settings."""

    metrics: MetricsSettings = MetricsSettings()


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Configuration is loaded from multiple sources with the following priority
    (highest to lowest):
    1. Environment variables
    2. .env file (secrets only)
    3. Environment-specific YAML files (config/environments/{APP_ENV}/)
    4. Base YAML files (config/base/)
    5. Default values in code

    Environment variables can override any setting using the nested delimiter '__'.
    For example: DATABASE__HOST=prod-db overrides database.host.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    # =========================================================================
    # Environment Selection (from .env)
    # =========================================================================
    APP_ENV: str = "development"

    # =========================================================================
    # Nested Configuration Sections (from YAML)
    # =========================================================================
    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    auth: AuthSettings = AuthSettings()
    database: DatabaseSettings = DatabaseSettings()
    rate_limiting: RateLimitingSettings = RateLimitingSettings()
    timeouts: TimeoutSettings = TimeoutSettings()
    request: RequestSettings = RequestSettings()
    recipes: RecipeSettings = RecipeSettings()
    llm: LLMSettings = LLMSettings()
    logging: LoggingSettings = LoggingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    # =========================================================================
    # Secrets (from .env only - never in YAML)
    # =========================================================================
    JWT_SECRET_KEY: str = "change-me-in-production"  # noqa: S105
    DATABASE_PASSWORD: str = ""
    DATABASE_URL: str | None = None  # Full connection string, wins over parts
    AZURE_OPENAI_API_KEY: str = ""
    FRONTEND_URL: str | None = None

    # Extra CORS origins (comma-separated in .env)
    CORS_ORIGINS: Annotated[list[str], NoDecode, BeforeValidator(parse_list)] = []

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings loading order.

        Priority (highest to lowest):
        1. init_settings - Values passed to Settings()
        2. env_settings - Environment variables
        3. dotenv_settings - .env file (secrets)
        4. yaml_settings - YAML files (base + environment)
        5. file_secret_settings - Docker secrets
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    # =========================================================================
    # Computed Fields
    # =========================================================================

    @property
    def database_url(self) -> str:
        """Build PostgreSQL connection URL.

        ``DATABASE_URL`` is used verbatim when set; otherwise the URL is
        assembled from the ``database`` section and ``DATABASE_PASSWORD``.
        URL format: postgresql://[user:password@]host:port/database
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        auth_part = ""
        if self.database.user and self.DATABASE_PASSWORD:
            auth_part = f"{self.database.user}:{self.DATABASE_PASSWORD}@"
        elif self.database.user:
            auth_part = f"{self.database.user}@"

        return (
            f"postgresql://{auth_part}{self.database.host}:"
            f"{self.database.port}/{self.database.name}"
        )

    @property
    def cors_origins(self) -> list[str]:
        """All allowed CORS origins, including the configured frontend."""
        origins = [*self.api.cors_origins, *self.CORS_ORIGINS]
        if self.FRONTEND_URL:
            origins.append(self.FRONTEND_URL)
        return list(dict.fromkeys(origins))

    @property
    def ai_configured(self) -> bool:
        """Whether the Azure OpenAI deployment has credentials."""
        return bool(
            self.llm.enabled and self.llm.azure.endpoint and self.AZURE_OPENAI_API_KEY
        )

    # =========================================================================
    # Environment Helpers
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Using lru_cache ensures settings are only loaded once,
    improving performance and consistency.
    """
    return Settings()
