"""
Pydantic configuration schema for the Gaming Dashboard backend.

Settings come from environment variables (optionally a .env file) and an
optional YAML file for the non-secret knobs: agent schedule, product
catalog and revenue target. See gaming_dashboard.config.loader.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_PRODUCT_CATALOG = [
    "Gaming Mouse Pro X1",
    "Mechanical Keyboard Elite",
    "Wireless Gaming Headset",
    "RGB Gaming Mousepad",
    "Gaming Chair Supreme",
    "Ultra-wide Gaming Monitor",
]

STOREFRONT_PROVIDER_NAMES = ("shopify", "mock")


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------

class ScheduleConfig(BaseModel):
    """Tick intervals (seconds) for each agent plus the boot delay."""
    content: float = Field(120.0, gt=0)
    marketing: float = Field(300.0, gt=0)
    customer: float = Field(180.0, gt=0)
    analytics: float = Field(60.0, gt=0)
    startup_delay: float = Field(
        5.0, ge=0, description="Delay before the initial run of every agent"
    )

    def interval_for(self, agent_name: str) -> float:
        return float(getattr(self, agent_name))


class OpenAIConfig(BaseModel):
    """Text-generation provider A (OpenAI chat completions)."""
    api_key: str = ""
    model: str = "gpt-4"
    timeout: float = Field(60.0, gt=0)


class ClaudeConfig(BaseModel):
    """Text-generation provider B (Anthropic messages)."""
    api_key: str = ""
    model: str = "claude-3-sonnet-20240229"
    timeout: float = Field(60.0, gt=0)


class ShopifyConfig(BaseModel):
    """Shopify Admin REST API access."""
    shop_name: str = ""
    access_token: str = ""
    api_version: str = "2023-10"
    timeout: float = Field(30.0, gt=0)

    @property
    def base_url(self) -> str:
        return (
            f"https://{self.shop_name}.myshopify.com"
            f"/admin/api/{self.api_version}/"
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.shop_name and self.access_token)


# ---------------------------------------------------------------------------
# Root model
# ---------------------------------------------------------------------------

class DashboardSettings(BaseModel):
    """Complete runtime configuration."""
    env: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    target_revenue: float = Field(
        5000.0, gt=0, description="Monthly revenue goal shown on the dashboard"
    )
    storefront_provider: str = "shopify"
    public_dir: str = ""

    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    claude: ClaudeConfig = Field(default_factory=ClaudeConfig)
    shopify: ShopifyConfig = Field(default_factory=ShopifyConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    product_catalog: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PRODUCT_CATALOG), min_length=1
    )

    @field_validator("storefront_provider")
    @classmethod
    def validate_storefront_provider(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in STOREFRONT_PROVIDER_NAMES:
            raise ValueError(
                f"storefront_provider must be one of {STOREFRONT_PROVIDER_NAMES}, got {v!r}"
            )
        return v

    def redacted(self) -> dict[str, Any]:
        """Dump settings with every credential masked."""
        data = self.model_dump()
        for section, key in (
            ("openai", "api_key"),
            ("claude", "api_key"),
            ("shopify", "access_token"),
        ):
            if data[section][key]:
                data[section][key] = "****" + data[section][key][-4:]
        return data
