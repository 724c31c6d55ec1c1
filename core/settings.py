from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

# Load .env file automatically
load_dotenv()

PAYPAL_SANDBOX_BASE = "https://api-m.sandbox.paypal.com"
PAYPAL_LIVE_BASE = "https://api-m.paypal.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # PayPal credentials (required, the process refuses to start without them)
    PAYPAL_CLIENT_ID: str
    PAYPAL_SECRET: str = Field(
        validation_alias=AliasChoices("PAYPAL_CLIENT_SECRET", "PAYPAL_SECRET")
    )

    # Webhook subscription this server accepts events for
    PAYPAL_WEBHOOK_ID: str = ""

    PAYPAL_MODE: Literal["sandbox", "live"] = "sandbox"
    PAYPAL_BASE: Optional[str] = None
    PAYPAL_TIMEOUT_SECONDS: float = 10.0

    # Demo order
    ORDER_AMOUNT: str = "10.00"
    ORDER_CURRENCY: str = "USD"

    # App settings
    APP_NAME: str = "PayPal Webhook Broker"
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    PORT: int = 3000

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("PAYPAL_CLIENT_ID", "PAYPAL_SECRET")
    @classmethod
    def _require_credential(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError(
                "PAYPAL_CLIENT_ID and PAYPAL_CLIENT_SECRET (or PAYPAL_SECRET) must be set; create .env or export the variables"
            )
        return value

    @property
    def paypal_base_url(self) -> str:
        if self.PAYPAL_BASE:
            return self.PAYPAL_BASE.rstrip("/")
        return PAYPAL_LIVE_BASE if self.PAYPAL_MODE == "live" else PAYPAL_SANDBOX_BASE

    @property
    def webhook_configured(self) -> bool:
        return bool(self.PAYPAL_WEBHOOK_ID.strip())
