"""
Base agent class for the Gaming Dashboard backend.

All agents inherit from BaseDashboardAgent and implement execute(), which
does the agent-specific work and mutates its own slice of DashboardState.

run() wraps execute() with the shared lifecycle:
1. skip entirely when the agent is inactive (no field is touched)
2. hold the agent's lock for the whole invocation
3. status=running → execute() → status=idle, or status=error on failure
4. lastRun stamped on every attempt
5. failures are logged and swallowed, or re-raised as AgentRunError for
   manual triggers (raise_errors=True)
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

from gaming_dashboard.agents.state import AgentStats, DashboardState, RunStatus
from gaming_dashboard.exceptions import AgentRunError
from gaming_dashboard.observability.logging_config import (
    bind_run_context,
    reset_run_context,
)

logger = logging.getLogger(__name__)


class BaseDashboardAgent(ABC):
    """
    Abstract base class for the four scheduled dashboard agents.

    Args:
        state: The shared DashboardState.
        commerce: CommerceClient (or anything with the same coroutines);
            agents that never call the store ignore it.
        rng: Random source for simulated figures.
    """

    agent_name: str = ""  # Set by the @register_agent decorator

    def __init__(
        self,
        state: DashboardState,
        commerce: Any = None,
        *,
        rng: Optional[random.Random] = None,
    ):
        self.state = state
        self.commerce = commerce
        self.rng = rng or random.Random()

    @property
    def stats(self) -> AgentStats:
        return self.state.get_agent(self.agent_name)

    @abstractmethod
    async def execute(self, stats: Any) -> None:
        """Do one unit of work. Raising marks the run as failed."""
        ...

    async def run(self, *, raise_errors: bool = False) -> bool:
        """
        Run the agent once.

        Returns:
            True when the run completed, False when it was skipped
            (inactive) or failed with raise_errors=False.

        Raises:
            AgentRunError: If execute() failed and raise_errors is True.
        """
        stats = self.stats
        if not stats.active:
            logger.debug("agent_inactive_skip", extra={"agent": self.agent_name})
            return False

        tokens = bind_run_context(self.agent_name, uuid.uuid4().hex[:12])
        try:
            async with stats.lock:
                # May have been toggled off while waiting for a previous run
                if not stats.active:
                    return False
                return await self._run_locked(stats, raise_errors)
        finally:
            reset_run_context(tokens)

    async def _run_locked(self, stats: AgentStats, raise_errors: bool) -> bool:
        stats.status = RunStatus.RUNNING
        start = time.monotonic()
        logger.info("agent_run_started")

        try:
            await self.execute(stats)
        except asyncio.CancelledError:
            stats.status = RunStatus.IDLE if stats.active else RunStatus.STOPPED
            raise
        except Exception as e:
            # A toggle-off during the run wins over the failure
            stats.status = RunStatus.ERROR if stats.active else RunStatus.STOPPED
            stats.last_run = self.state.clock()
            logger.error(
                "agent_run_failed",
                extra={
                    "error": str(e)[:200],
                    "error_type": type(e).__name__,
                    "duration_ms": round((time.monotonic() - start) * 1000, 1),
                },
            )
            if raise_errors:
                raise AgentRunError(str(e), agent_name=self.agent_name) from e
            return False

        stats.last_run = self.state.clock()
        stats.status = RunStatus.IDLE if stats.active else RunStatus.STOPPED
        logger.info(
            "agent_run_finished",
            extra={
                "duration_ms": round((time.monotonic() - start) * 1000, 1),
                **stats.counters(),
            },
        )
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(agent_name={self.agent_name!r})"
