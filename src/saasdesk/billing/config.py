"""
Billing module configuration
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from saasdesk.billing.exceptions import BillingConfigurationError
from saasdesk.billing.money_utils import money_handler

if TYPE_CHECKING:
    from saasdesk.settings import Settings


class InvoiceConfig(BaseModel):
    """Invoice configuration"""

    model_config = ConfigDict(frozen=True)

    number_prefix: str = Field("INV", description="Invoice number prefix")
    due_days: int = Field(7, ge=0, description="Days until a new invoice is due")


class PeriodConfig(BaseModel):
    """Subscription period configuration"""

    model_config = ConfigDict(frozen=True)

    monthly_days: int = Field(30, gt=0, description="Length of a MONTHLY period in days")
    yearly_days: int = Field(365, gt=0, description="Length of a YEARLY period in days")
    fixed_days: int | None = Field(
        None, gt=0, description="Override every billing period with this length"
    )


class BillingConfig(BaseModel):
    """Main billing configuration"""

    model_config = ConfigDict(frozen=True)

    default_currency: str = Field("USD", description="Default currency code")
    locale: str = Field("en_US", description="Locale used to format amounts")
    invoice: InvoiceConfig = Field(default_factory=InvoiceConfig)
    period: PeriodConfig = Field(default_factory=PeriodConfig)

    @classmethod
    def from_settings(cls, settings: "Settings | None" = None) -> "BillingConfig":
        """Create configuration from the application settings."""
        if settings is None:
            from saasdesk.settings import get_settings

            settings = get_settings()

        billing = settings.billing
        if not money_handler.is_valid_currency(billing.default_currency):
            raise BillingConfigurationError(
                f"Unknown default currency: {billing.default_currency}",
                config_key="BILLING__DEFAULT_CURRENCY",
            )
        return cls(
            default_currency=billing.default_currency,
            locale=billing.locale,
            invoice=InvoiceConfig(
                number_prefix=billing.invoice_number_prefix,
                due_days=billing.invoice_due_days,
            ),
            period=PeriodConfig(
                monthly_days=billing.monthly_period_days,
                yearly_days=billing.yearly_period_days,
                fixed_days=billing.fixed_period_days,
            ),
        )


_billing_config: BillingConfig | None = None


def get_billing_config() -> BillingConfig:
    """Get billing configuration (singleton)."""
    global _billing_config
    if _billing_config is None:
        _billing_config = BillingConfig.from_settings()
    return _billing_config


def reset_billing_config() -> None:
    """Reset configuration (mainly for testing)."""
    global _billing_config
    _billing_config = None
