"""
Dashboard state for the Gaming Dashboard backend.

Two structures live for the whole process, created once at startup with
seeded defaults and mutated in place by the agents:

- AgentStats: one record per agent (content, marketing, customer,
  analytics) with the run status and the agent's own counters.
- DashboardMetrics: the aggregate view polled by the front-end; several
  agents mirror their counters into it after each run.

DashboardState owns both and is passed explicitly to the agents and the
HTTP handlers. Each AgentStats carries an asyncio.Lock that a run holds
for its whole duration, so two invocations of the same agent never
interleave their counter updates.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Optional

from gaming_dashboard.exceptions import AgentNotFoundError

logger = logging.getLogger(__name__)

AGENT_NAMES = ("content", "marketing", "customer", "analytics")

REVENUE_HISTORY_DAYS = 30

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# ── Enums ────────────────────────────────────────────────────


class RunStatus(str, Enum):
    """Lifecycle of an agent as shown on the dashboard."""
    RUNNING = "running"
    IDLE = "idle"
    ERROR = "error"
    STOPPED = "stopped"


# ── Agent Stats ──────────────────────────────────────────────


@dataclass
class AgentStats:
    """Status fields shared by every agent."""

    active: bool = True
    status: RunStatus = RunStatus.IDLE
    last_run: datetime = field(default_factory=utcnow)
    lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, repr=False, compare=False
    )

    def counters(self) -> dict[str, Any]:
        return {}

    def toggle(self) -> None:
        """Flip ``active``; a reactivated agent comes back as idle."""
        self.active = not self.active
        self.status = RunStatus.IDLE if self.active else RunStatus.STOPPED

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": self.active,
            **self.counters(),
            "lastRun": isoformat(self.last_run),
            "status": self.status.value,
        }


@dataclass
class ContentStats(AgentStats):
    products: int = 0
    posts: int = 0
    articles: int = 0

    def counters(self) -> dict[str, Any]:
        return {
            "products": self.products,
            "posts": self.posts,
            "articles": self.articles,
        }


@dataclass
class MarketingStats(AgentStats):
    campaigns: int = 0
    roas: float = 0.0
    spend: int = 0

    def counters(self) -> dict[str, Any]:
        return {
            "campaigns": self.campaigns,
            "roas": self.roas,
            "spend": self.spend,
        }


@dataclass
class CustomerStats(AgentStats):
    clients: int = 0
    emails: int = 0
    conversions: int = 0

    def counters(self) -> dict[str, Any]:
        return {
            "clients": self.clients,
            "emails": self.emails,
            "conversions": self.conversions,
        }


@dataclass
class AnalyticsStats(AgentStats):
    revenue: int = 0
    alerts: int = 0

    def counters(self) -> dict[str, Any]:
        return {"revenue": self.revenue, "alerts": self.alerts}


# ── Dashboard Metrics ────────────────────────────────────────


@dataclass
class RevenuePoint:
    """Revenue for one calendar day (ISO date key)."""
    date: str
    revenue: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "revenue": self.revenue}


def generate_initial_revenue_data(
    rng: random.Random,
    today: date,
    days: int = REVENUE_HISTORY_DAYS,
) -> list[RevenuePoint]:
    """
    Seed a plausible daily revenue curve ending today.

    A sine wave around 120 plus +/-50 of noise, floored at 50.
    """
    base_revenue = 120
    points = []
    for i in range(days - 1, -1, -1):
        variation = math.sin(i * 0.2) * 50
        noise = rng.random() * 100 - 50
        revenue = max(50, base_revenue + variation + noise)
        points.append(RevenuePoint(
            date=(today - timedelta(days=i)).isoformat(),
            revenue=math.floor(revenue),
        ))
    return points


@dataclass
class DashboardMetrics:
    """Aggregate figures polled by the dashboard front-end."""

    revenue: int = 3648
    target: float = 5000.0
    campaigns: int = 3
    content: int = 50
    clients: int = 3
    alerts: int = 3
    conversion_rate: float = 1.33
    revenue_data: list[RevenuePoint] = field(default_factory=list)
    last_update: datetime = field(default_factory=utcnow)

    @property
    def revenue_percentage(self) -> float:
        """Revenue as a percentage of target (100 when there is no target)."""
        if self.target <= 0:
            return 100.0
        return self.revenue / self.target * 100

    def record_daily_revenue(
        self,
        day: str,
        amount: int,
        max_days: int = REVENUE_HISTORY_DAYS,
    ) -> None:
        """
        Set today's revenue point and keep the last `max_days` entries.

        The last entry is overwritten when it already belongs to `day`;
        otherwise a new entry is appended. A `day` earlier than the last
        entry (clock went backwards) is ignored to keep the series sorted.
        """
        last = self.revenue_data[-1] if self.revenue_data else None
        if last is not None and last.date == day:
            last.revenue = amount
        elif last is not None and last.date > day:
            logger.warning(
                "revenue_day_out_of_order",
                extra={"day": day, "last_day": last.date},
            )
            return
        else:
            self.revenue_data.append(RevenuePoint(date=day, revenue=amount))

        if len(self.revenue_data) > max_days:
            del self.revenue_data[:-max_days]

    def to_dict(self) -> dict[str, Any]:
        return {
            "revenue": self.revenue,
            "target": self.target,
            "campaigns": self.campaigns,
            "content": self.content,
            "clients": self.clients,
            "alerts": self.alerts,
            "conversionRate": self.conversion_rate,
            "revenueData": [p.to_dict() for p in self.revenue_data],
            "lastUpdate": isoformat(self.last_update),
        }


# ── State Container ──────────────────────────────────────────


class DashboardState:
    """
    Process-wide dashboard state, owned explicitly.

    Args:
        target: Revenue goal for DashboardMetrics.target.
        rng: Random source for the seeded revenue history.
        clock: Returns "now" as an aware datetime (injectable for tests).
    """

    def __init__(
        self,
        target: float = 5000.0,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ):
        self.clock: Clock = clock or utcnow
        rng = rng or random.Random()
        now = self.clock()

        self.agents: dict[str, AgentStats] = {
            "content": ContentStats(last_run=now),
            "marketing": MarketingStats(last_run=now),
            "customer": CustomerStats(last_run=now),
            "analytics": AnalyticsStats(last_run=now),
        }
        self.metrics = DashboardMetrics(
            target=target,
            revenue_data=generate_initial_revenue_data(rng, now.date()),
            last_update=now,
        )
        self.started_at = time.monotonic()

    # --- Typed accessors ---

    @property
    def content(self) -> ContentStats:
        return self.agents["content"]  # type: ignore[return-value]

    @property
    def marketing(self) -> MarketingStats:
        return self.agents["marketing"]  # type: ignore[return-value]

    @property
    def customer(self) -> CustomerStats:
        return self.agents["customer"]  # type: ignore[return-value]

    @property
    def analytics(self) -> AnalyticsStats:
        return self.agents["analytics"]  # type: ignore[return-value]

    # --- Operations ---

    def get_agent(self, name: str) -> AgentStats:
        try:
            return self.agents[name]
        except KeyError:
            raise AgentNotFoundError(name) from None

    def toggle_agent(self, name: str) -> AgentStats:
        """Flip an agent's ``active`` flag; raises AgentNotFoundError."""
        stats = self.get_agent(name)
        stats.toggle()
        logger.info(
            "agent_toggled",
            extra={"agent": name, "active": stats.active, "status": stats.status.value},
        )
        return stats

    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def agents_dict(self) -> dict[str, dict[str, Any]]:
        return {name: stats.to_dict() for name, stats in self.agents.items()}

    def dashboard_snapshot(self) -> dict[str, Any]:
        return {
            **self.metrics.to_dict(),
            "timestamp": isoformat(self.clock()),
            "agents": self.agents_dict(),
            "systemStatus": "online",
        }

    def health_snapshot(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "uptime": self.uptime(),
            "timestamp": isoformat(self.clock()),
            "agents": [
                {
                    "name": name,
                    "active": stats.active,
                    "status": stats.status.value,
                    "lastRun": isoformat(stats.last_run),
                }
                for name, stats in self.agents.items()
            ],
        }
