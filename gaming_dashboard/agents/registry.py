"""
Agent registry for the Gaming Dashboard backend.

Maps agent names to implementations. New agent = a BaseDashboardAgent
subclass decorated with @register_agent plus a stats record in
DashboardState.

Usage:
    from gaming_dashboard.agents.registry import build_agents

    agents = build_agents(
        state,
        commerce,
        rng=rng,
        options={"content": {"content_selector": selector}},
    )
    await agents["analytics"].run()
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional, Type

from gaming_dashboard.agents.base import BaseDashboardAgent
from gaming_dashboard.agents.state import AGENT_NAMES, DashboardState
from gaming_dashboard.exceptions import AgentNotFoundError

logger = logging.getLogger(__name__)

# Global map: agent name -> implementation class
AGENT_IMPLEMENTATIONS: dict[str, Type[BaseDashboardAgent]] = {}


def register_agent(agent_name: str):
    """
    Decorator to register an agent implementation.

    Usage:
        @register_agent("marketing")
        class MarketingAgent(BaseDashboardAgent):
            ...
    """

    def decorator(cls: Type[BaseDashboardAgent]) -> Type[BaseDashboardAgent]:
        if agent_name in AGENT_IMPLEMENTATIONS:
            logger.warning(f"Overwriting existing agent registration: {agent_name}")
        AGENT_IMPLEMENTATIONS[agent_name] = cls
        cls.agent_name = agent_name
        return cls

    return decorator


def get_registered_agents() -> list[str]:
    """Return all registered agent names."""
    _load_implementations()
    return sorted(AGENT_IMPLEMENTATIONS.keys())


def get_agent_class(agent_name: str) -> Type[BaseDashboardAgent]:
    _load_implementations()
    cls = AGENT_IMPLEMENTATIONS.get(agent_name)
    if cls is None:
        raise AgentNotFoundError(agent_name)
    return cls


def build_agents(
    state: DashboardState,
    commerce: Any = None,
    *,
    rng: Optional[random.Random] = None,
    options: Optional[dict[str, dict[str, Any]]] = None,
) -> dict[str, BaseDashboardAgent]:
    """
    Instantiate one agent per name in AGENT_NAMES.

    Args:
        state: Shared DashboardState.
        commerce: CommerceClient handed to every agent.
        rng: Random source shared by all agents.
        options: Extra constructor kwargs per agent name.
    """
    options = options or {}
    rng = rng or random.Random()

    agents: dict[str, BaseDashboardAgent] = {}
    for name in AGENT_NAMES:
        cls = get_agent_class(name)
        agents[name] = cls(state, commerce, rng=rng, **options.get(name, {}))
        logger.debug(f"Instantiated agent: {agents[name]!r}")
    return agents


def _load_implementations() -> None:
    # Importing the package runs every @register_agent decorator
    import gaming_dashboard.agents.implementations  # noqa: F401
