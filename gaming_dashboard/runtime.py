"""
Runtime wiring: one place that turns DashboardSettings into live objects.

Both the HTTP server and the CLI's one-off agent runs use build_runtime()
so they see exactly the same agents and clients.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Optional

from gaming_dashboard.agents.base import BaseDashboardAgent
from gaming_dashboard.agents.registry import build_agents
from gaming_dashboard.agents.state import DashboardState
from gaming_dashboard.config.schema import DashboardSettings
from gaming_dashboard.integrations.commerce_client import CommerceClient
from gaming_dashboard.llm.content_providers import (
    ContentProvider,
    build_content_providers,
    random_selector,
)

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Everything a running dashboard process owns."""

    settings: DashboardSettings
    state: DashboardState
    commerce: CommerceClient
    providers: list[ContentProvider]
    agents: dict[str, BaseDashboardAgent] = field(default_factory=dict)

    @property
    def closeables(self) -> list[Any]:
        return [self.commerce, *self.providers]

    async def aclose(self) -> None:
        for resource in self.closeables:
            await resource.aclose()


def build_runtime(
    settings: DashboardSettings,
    *,
    rng: Optional[random.Random] = None,
    commerce: Optional[CommerceClient] = None,
    providers: Optional[list[ContentProvider]] = None,
) -> Runtime:
    """
    Build state, clients and agents from settings.

    `commerce` and `providers` can be passed in to replace the real
    Shopify/OpenAI/Anthropic clients.
    """
    rng = rng or random.Random()
    state = DashboardState(target=settings.target_revenue, rng=rng)
    commerce = commerce or CommerceClient.from_settings(settings)
    providers = providers if providers is not None else build_content_providers(settings)

    agents = build_agents(
        state,
        commerce,
        rng=rng,
        options={
            "content": {
                "content_selector": random_selector(providers, rng),
                "product_catalog": settings.product_catalog,
            },
        },
    )
    logger.info(
        "runtime_built",
        extra={
            "storefront": commerce.provider_name,
            "providers": [p.name for p in providers],
            "target_revenue": settings.target_revenue,
        },
    )
    return Runtime(
        settings=settings,
        state=state,
        commerce=commerce,
        providers=providers,
        agents=agents,
    )
