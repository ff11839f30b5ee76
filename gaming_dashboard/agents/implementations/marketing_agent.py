"""
Marketing Agent: simulated campaign optimisation.

No external calls. Each run has a 70% chance of "optimising" a campaign:
one more campaign, a small ROAS gain and 50-149 more ad spend.
"""

from __future__ import annotations

import logging

from gaming_dashboard.agents.base import BaseDashboardAgent
from gaming_dashboard.agents.registry import register_agent
from gaming_dashboard.agents.simulation import chance, random_int
from gaming_dashboard.agents.state import MarketingStats

logger = logging.getLogger(__name__)

OPTIMISATION_THRESHOLD = 0.3
MAX_ROAS_GAIN = 0.5


@register_agent("marketing")
class MarketingAgent(BaseDashboardAgent):

    async def execute(self, stats: MarketingStats) -> None:
        if chance(self.rng, OPTIMISATION_THRESHOLD):
            stats.campaigns += 1
            stats.roas += self.rng.random() * MAX_ROAS_GAIN
            stats.spend += random_int(self.rng, 50, 150)
            logger.info(
                "campaign_optimised",
                extra={"campaigns": stats.campaigns, "spend": stats.spend},
            )

        self.state.metrics.campaigns = stats.campaigns
