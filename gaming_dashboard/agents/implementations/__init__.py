"""Agent implementations; importing this package registers all of them."""

from gaming_dashboard.agents.implementations.analytics_agent import AnalyticsAgent
from gaming_dashboard.agents.implementations.content_agent import ContentAgent
from gaming_dashboard.agents.implementations.customer_agent import CustomerAgent
from gaming_dashboard.agents.implementations.marketing_agent import MarketingAgent

__all__ = ["AnalyticsAgent", "ContentAgent", "CustomerAgent", "MarketingAgent"]
