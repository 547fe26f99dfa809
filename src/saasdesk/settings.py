"""SaaSDesk configuration.

Values come from the environment (and an optional ``.env`` file). Groups
are nested models, so ``STORE__BACKEND=sql`` or
``BILLING__INVOICE_DUE_DAYS=14`` set a single field of a group.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StoreSettings(BaseModel):
    """Where users, plans, subscriptions and billing records live."""

    backend: str = Field("memory", description="memory or sql")
    database_url: str = Field(
        "sqlite+aiosqlite:///./saasdesk_dev.sqlite",
        description="Async SQLAlchemy URL, used by the sql backend",
    )
    echo: bool = Field(False, description="Log emitted SQL")
    seed_mock_data: bool = Field(True, description="Load the demo users, plans and subscriptions")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in {"memory", "sql"}:
            raise ValueError(f"Unsupported store backend: {v}")
        return v


class EmailSettings(BaseModel):
    enabled: bool = Field(True, description="Send subscription notifications")
    from_address: str = Field("noreply@example.com", description="Sender of notifications")
    outbox_size: int = Field(100, gt=0, description="Deliveries kept by the outbox sender")
    dashboard_url: str = Field(
        "http://localhost:5173/subscriber",
        description="Subscriber portal link placed in notification emails",
    )


class ObservabilitySettings(BaseModel):
    log_level: LogLevel = Field(LogLevel.INFO)
    log_format: str = Field("json", description="json or text")
    enable_correlation_ids: bool = Field(True, description="Add the thread name to log entries")


class BillingSettings(BaseModel):
    """Currency, invoice and period defaults for new subscriptions."""

    default_currency: str = Field("USD")
    locale: str = Field("en_US", description="Babel locale for displayed amounts")
    invoice_number_prefix: str = Field("INV")
    invoice_due_days: int = Field(7, ge=0, description="Days from creation until an invoice is due")
    monthly_period_days: int = Field(30, gt=0)
    yearly_period_days: int = Field(365, gt=0)
    fixed_period_days: int | None = Field(
        None,
        gt=0,
        description="When set, every plan gets this period length whatever its billing period",
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_version: str = Field("1.0.0")
    environment: Environment = Field(Environment.DEVELOPMENT)

    host: str = Field("0.0.0.0", description="Bind address for `saasdesk serve`")  # nosec B104
    port: int = Field(8000)
    api_prefix: str = Field("/api/v1", description="Mount point of every API router")

    store: StoreSettings = Field(default_factory=StoreSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    billing: BillingSettings = Field(default_factory=BillingSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the loaded settings so the next call re-reads the environment."""
    global _settings
    _settings = None
