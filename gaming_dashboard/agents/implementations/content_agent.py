"""
Content Agent: The Copywriter.

Generates one product description and one social post per run through
one of the two text-generation providers (picked by the injected
selector, 50/50 by default). Every fifth product it also drafts a real
product in the Shopify store.

Flow:
    select provider → generate → products/posts += 1 →
    [every 5th product: create draft store product] → mirror into dashboard

A failed generation marks the run as failed and leaves the counters
alone. A failed store product is only logged: the counters already
bumped for this run stay bumped.

Usage:
    agent = ContentAgent(state, commerce, content_selector=selector)
    await agent.run()
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional, Sequence

from gaming_dashboard.agents.base import BaseDashboardAgent
from gaming_dashboard.agents.registry import register_agent
from gaming_dashboard.agents.simulation import pick, random_amount
from gaming_dashboard.agents.state import ContentStats, DashboardState
from gaming_dashboard.config.schema import DEFAULT_PRODUCT_CATALOG
from gaming_dashboard.exceptions import DependencyError
from gaming_dashboard.integrations.commerce_client import build_draft_product
from gaming_dashboard.llm.content_providers import ContentSelector, GeneratedContent

logger = logging.getLogger(__name__)

STORE_PRODUCT_EVERY = 5
MIN_PRICE = 50.0
MAX_PRICE = 250.0


@register_agent("content")
class ContentAgent(BaseDashboardAgent):
    """Generates marketing copy and occasionally drafts store products."""

    def __init__(
        self,
        state: DashboardState,
        commerce: Any = None,
        *,
        rng: Optional[random.Random] = None,
        content_selector: Optional[ContentSelector] = None,
        product_catalog: Optional[Sequence[str]] = None,
    ):
        super().__init__(state, commerce, rng=rng)
        self.content_selector = content_selector
        self.product_catalog = list(product_catalog or DEFAULT_PRODUCT_CATALOG)
        self.last_content: Optional[GeneratedContent] = None

    async def execute(self, stats: ContentStats) -> None:
        if self.content_selector is None:
            raise DependencyError("No content provider configured", service="content")

        provider = self.content_selector()
        content = await provider.generate()
        self.last_content = content

        stats.products += 1
        stats.posts += 1
        logger.info(
            "content_generated",
            extra={
                "provider": content.provider,
                "model": content.model,
                "products": stats.products,
                "posts": stats.posts,
            },
        )

        if stats.products % STORE_PRODUCT_EVERY == 0:
            await self.create_store_product()

        self.state.metrics.content = stats.products

    async def create_store_product(self) -> Optional[dict[str, Any]]:
        """
        Draft a random catalog product in the store.

        Returns the created product, or None when the store call failed.
        """
        if self.commerce is None:
            logger.warning("store_product_skipped: no commerce client")
            return None

        title = pick(self.rng, self.product_catalog)
        price = random_amount(self.rng, MIN_PRICE, MAX_PRICE)
        try:
            product = await self.commerce.create_product(
                build_draft_product(title, price)
            )
        except Exception as e:
            logger.error(
                "store_product_create_failed",
                extra={"title": title, "error": str(e)[:200]},
            )
            return None

        logger.info(
            "store_product_created",
            extra={"title": title, "price": price, "product_id": product.get("id")},
        )
        return product
