"""
Periodic scheduling for the dashboard agents.

PeriodicTask is a cancellable fixed-rate ticker: every `interval` seconds
it spawns one invocation of its callback as a separate asyncio task, so a
slow invocation never delays the next tick. Invocations of the same agent
still serialise on the agent's lock (see BaseDashboardAgent.run).

AgentScheduler registers one PeriodicTask per agent and, after a short
startup delay, triggers one run of every agent so the dashboard has fresh
data before the first ticks come around.

Usage:
    scheduler = AgentScheduler(agents, settings.schedule)
    scheduler.start()          # inside a running event loop
    ...
    await scheduler.stop()     # cancels loops and in-flight runs
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from gaming_dashboard.config.schema import ScheduleConfig

logger = logging.getLogger(__name__)

# Initial run order after startup
INITIAL_RUN_ORDER = ("analytics", "content", "customer", "marketing")


class PeriodicTask:
    """
    Invoke `callback` every `interval` seconds until stopped.

    Exceptions escaping the callback are logged; they never stop the loop.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: Callable[[], Awaitable[Any]],
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self.callback = callback
        self.tick_count = 0
        self._loop_task: Optional[asyncio.Task] = None
        self._pending: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def start(self) -> None:
        if self.running:
            return
        self._loop_task = asyncio.create_task(
            self._loop(), name=f"periodic:{self.name}"
        )

    def trigger(self) -> asyncio.Task:
        """Spawn one invocation now, outside the regular cadence."""
        task = asyncio.create_task(self._invoke(), name=f"run:{self.name}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            self.tick_count += 1
            self.trigger()
            next_at += self.interval
            # Fell behind by more than a whole period: don't burst to catch up
            if next_at < loop.time():
                next_at = loop.time() + self.interval

    async def _invoke(self) -> None:
        try:
            await self.callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("periodic_task_failed", extra={"task": self.name})

    async def stop(self) -> None:
        """Cancel the ticker and any in-flight invocations, then wait for them."""
        tasks = list(self._pending)
        if self._loop_task is not None:
            tasks.append(self._loop_task)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._loop_task = None
        self._pending.clear()


class AgentScheduler:
    """
    Runs each agent on its own interval, plus one initial run per agent.

    Args:
        agents: Agent name -> object with an async run() method.
        schedule: Intervals per agent and the startup delay.
    """

    def __init__(self, agents: dict[str, Any], schedule: Optional[ScheduleConfig] = None):
        self.agents = agents
        self.schedule = schedule or ScheduleConfig()
        self.tasks: dict[str, PeriodicTask] = {
            name: PeriodicTask(name, self.schedule.interval_for(name), agent.run)
            for name, agent in agents.items()
        }
        self._initial_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return any(task.running for task in self.tasks.values())

    def start(self) -> None:
        """Start every ticker. Must be called from a running event loop."""
        for task in self.tasks.values():
            task.start()
        self._initial_task = asyncio.create_task(
            self._initial_run(), name="initial-agent-run"
        )
        logger.info(
            "scheduler_started",
            extra={
                "intervals": {name: t.interval for name, t in self.tasks.items()},
                "startup_delay": self.schedule.startup_delay,
            },
        )

    async def _initial_run(self) -> None:
        await asyncio.sleep(self.schedule.startup_delay)
        for name in INITIAL_RUN_ORDER:
            if name in self.tasks:
                self.tasks[name].trigger()

    async def stop(self) -> None:
        if self._initial_task is not None:
            self._initial_task.cancel()
            await asyncio.gather(self._initial_task, return_exceptions=True)
            self._initial_task = None
        await asyncio.gather(*(task.stop() for task in self.tasks.values()))
        logger.info("scheduler_stopped")
