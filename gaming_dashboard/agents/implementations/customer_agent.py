"""
Customer Agent: client count from the store plus simulated email activity.

The client count comes from the store's customer list (first 50). When
the store is unreachable the previous count is kept; that is not a run
failure. Email engagement is simulated: 60% chance of one more email,
and 30% of those convert.
"""

from __future__ import annotations

import logging

from gaming_dashboard.agents.base import BaseDashboardAgent
from gaming_dashboard.agents.registry import register_agent
from gaming_dashboard.agents.simulation import chance
from gaming_dashboard.agents.state import CustomerStats

logger = logging.getLogger(__name__)

CUSTOMER_FETCH_LIMIT = 50
EMAIL_THRESHOLD = 0.4
CONVERSION_THRESHOLD = 0.7


@register_agent("customer")
class CustomerAgent(BaseDashboardAgent):

    async def execute(self, stats: CustomerStats) -> None:
        await self._refresh_clients(stats)

        if chance(self.rng, EMAIL_THRESHOLD):
            stats.emails += 1
            if chance(self.rng, CONVERSION_THRESHOLD):
                stats.conversions += 1

        metrics = self.state.metrics
        metrics.clients = stats.clients
        if stats.emails:
            metrics.conversion_rate = round(stats.conversions / stats.emails * 100, 2)

    async def _refresh_clients(self, stats: CustomerStats) -> None:
        if self.commerce is None:
            return
        try:
            customers = await self.commerce.get_customers(limit=CUSTOMER_FETCH_LIMIT)
        except Exception as e:
            logger.info(
                "customer_fetch_fallback: keeping previous client count",
                extra={"error": str(e)[:200], "clients": stats.clients},
            )
            return
        stats.clients = len(customers)
