"""
Analytics Agent: The Accountant.

Derives revenue from real store orders when there are any, otherwise
simulates growth; keeps the 30-day revenue history and raises an alert
each run while revenue sits below 70% of target.

Flow:
    fetch orders (250, any status) → sum totals →
    [> 0: revenue = floor(total) | else: revenue += 50..199] →
    today's history point (overwrite or append, keep 30) →
    alert check → mirror into agent stats + dashboard

Alerts accumulate without decay: every run below the threshold adds one.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from gaming_dashboard.agents.base import BaseDashboardAgent
from gaming_dashboard.agents.registry import register_agent
from gaming_dashboard.agents.simulation import random_int
from gaming_dashboard.agents.state import AnalyticsStats
from gaming_dashboard.integrations.commerce_client import order_total

logger = logging.getLogger(__name__)

ORDER_FETCH_LIMIT = 250
ALERT_THRESHOLD_PCT = 70.0


@register_agent("analytics")
class AnalyticsAgent(BaseDashboardAgent):

    async def execute(self, stats: AnalyticsStats) -> None:
        metrics = self.state.metrics

        real_revenue = await self._fetch_real_revenue()
        if real_revenue is not None and real_revenue > 0:
            metrics.revenue = math.floor(real_revenue)
        else:
            metrics.revenue += random_int(self.rng, 50, 200)

        now = self.state.clock()
        metrics.record_daily_revenue(
            now.date().isoformat(),
            random_int(self.rng, 100, 300),
        )

        percentage = metrics.revenue_percentage
        if percentage < ALERT_THRESHOLD_PCT:
            stats.alerts += 1
            logger.warning(
                "revenue_behind_target",
                extra={"revenue": metrics.revenue, "percentage": round(percentage, 1)},
            )

        stats.revenue = metrics.revenue
        metrics.alerts = stats.alerts
        metrics.last_update = now
        logger.info(
            "analytics_updated",
            extra={
                "revenue": metrics.revenue,
                "percentage": round(percentage, 1),
                "source": "orders" if real_revenue else "simulated",
            },
        )

    async def _fetch_real_revenue(self) -> Optional[float]:
        """Sum of order totals, or None when the store could not be read."""
        if self.commerce is None:
            return None
        try:
            orders = await self.commerce.get_orders(limit=ORDER_FETCH_LIMIT, status="any")
        except Exception as e:
            logger.info(
                "order_fetch_fallback: simulating revenue",
                extra={"error": str(e)[:200]},
            )
            return None
        return sum(order_total(order) for order in orders)
