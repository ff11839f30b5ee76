"""
Custom exception hierarchy for the Gaming Dashboard backend.

Structured error handling with clear categories:
- Configuration errors (caught at startup)
- Unknown agent names (HTTP 404)
- Dependency failures (OpenAI, Anthropic, Shopify down or misconfigured)
- Agent run failures surfaced to manual triggers (HTTP 500)

Usage:
    from gaming_dashboard.exceptions import DependencyError

    try:
        resp = await client.get("orders.json")
    except httpx.HTTPError as e:
        raise DependencyError("Shopify request failed", service="shopify") from e
"""

from __future__ import annotations

from typing import Optional


class DashboardError(Exception):
    """
    Base exception for all dashboard backend errors.

    All custom exceptions inherit from this, so you can catch
    `DashboardError` to handle any platform-specific error.
    """

    def __init__(self, message: str, *, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


# ── Configuration Errors ──────────────────────────────────────────


class ConfigurationError(DashboardError):
    """
    Raised when settings from the environment or YAML file are invalid.

    Examples:
    - TARGET_REVENUE is not a number
    - A schedule interval is zero or negative
    - The config file named by DASHBOARD_CONFIG does not exist
    """

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.config_path = config_path


# ── Agent Errors ──────────────────────────────────────────────────


class AgentNotFoundError(DashboardError):
    """Raised when an agent name is not one of the registered agents."""

    def __init__(
        self,
        agent_name: str,
        *,
        details: Optional[dict] = None,
    ):
        super().__init__(f"Agent not found: {agent_name}", details=details)
        self.agent_name = agent_name


class AgentRunError(DashboardError):
    """
    Raised when a manually triggered agent run fails.

    Scheduled runs never raise this: their failures only flip the
    agent status to ``error`` and get logged.
    """

    def __init__(
        self,
        message: str,
        *,
        agent_name: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.agent_name = agent_name


# ── Dependency Errors ─────────────────────────────────────────────


class DependencyError(DashboardError):
    """
    Raised when an external dependency (OpenAI, Anthropic, Shopify) is
    unavailable or returns an unexpected response.
    """

    def __init__(
        self,
        message: str,
        *,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.service = service
        self.status_code = status_code
