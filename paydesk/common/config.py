"""Central environment-driven settings for the order server and checkout client.

Each process loads these once at startup. Behavior is controlled by
environment variables (see `.env.example`).
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Typed view of order-server configuration from environment variables."""

    service_name: str = "orders"
    log_level: str = "INFO"
    port: int = 5000
    razorpay_key_id: str = ""
    razorpay_key_secret: SecretStr = SecretStr("")
    receipt_prefix: str = "receipt_order_"
    cors_origins: list[str] = ["*"]
    tracing_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class CheckoutSettings(BaseSettings):
    """Client-side checkout options; read from `CHECKOUT_*` variables."""

    api_base_url: str = "http://localhost:5000"
    script_url: str = "https://checkout.razorpay.com/v1/checkout.js"
    currency: str = "INR"
    merchant_name: str = "Demo Payment"
    description: str = "Test payment"
    theme_color: str = "#3399cc"
    prefill_name: str = "Demo User"
    prefill_email: str = "demo@example.com"
    prefill_contact: str = "9999999999"
    request_timeout_seconds: float = 10.0
    model_config = SettingsConfigDict(env_prefix="CHECKOUT_", env_file=".env", extra="ignore")


settings = ServerSettings()
