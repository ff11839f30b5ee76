"""
Tests for the Analytics agent.

Covers:
- Revenue from real orders (USD total preferred) vs simulated growth
- Daily revenue history: overwrite today, append a new day, keep 30
- Alerts while revenue is below 70% of target
- Mirroring into the agent stats and the dashboard
"""

from __future__ import annotations

import asyncio

import pytest

from gaming_dashboard.agents.implementations.analytics_agent import AnalyticsAgent
from gaming_dashboard.agents.state import DashboardState, RunStatus
from gaming_dashboard.integrations.commerce_client import (
    CommerceClient,
    MockStorefrontProvider,
)
from gaming_dashboard.testing.fakes import FailingStorefront, FrozenClock, ScriptedRandom


def _run(coro):
    return asyncio.run(coro)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def state(clock):
    return DashboardState(rng=ScriptedRandom(default=0.5), clock=clock)


def _agent(state, orders=None, values=(), storefront=None):
    if storefront is None:
        storefront = MockStorefrontProvider(orders=orders if orders is not None else [])
    return AnalyticsAgent(state, CommerceClient(storefront), rng=ScriptedRandom(values))


class TestRevenueSource:

    def test_real_orders_replace_revenue(self, state):
        """Should replace revenue with the sum of real orders."""
        orders = [
            {"id": 1, "total_price_usd": "100.50", "total_price": "95.00"},
            {"id": 2, "total_price": "200.25"},
            {"id": 3},
        ]
        agent = _agent(state, orders)
        _run(agent.run())
        assert state.metrics.revenue == 300
        assert state.analytics.revenue == 300

    def test_mock_store_orders(self, state):
        agent = _agent(state, storefront=MockStorefrontProvider())
        _run(agent.run())
        # 79.99 + 268.50 + 149.00
        assert state.metrics.revenue == 497

    def test_no_orders_simulates_growth(self, state):
        """Should simulate growth when the store has no orders."""
        agent = _agent(state, [], [0.0])
        _run(agent.run())
        assert state.metrics.revenue == 3648 + 50

    def test_simulated_growth_upper_bound(self, state):
        agent = _agent(state, [], [0.999])
        _run(agent.run())
        assert state.metrics.revenue == 3648 + 199

    def test_zero_total_orders_simulate(self, state):
        agent = _agent(state, [{"total_price": "0.00"}], [0.5])
        _run(agent.run())
        assert state.metrics.revenue == 3648 + 125

    def test_store_failure_simulates(self, state):
        """Should fall back to simulated growth when the store fails."""
        store = FailingStorefront()
        agent = _agent(state, storefront=store, values=[0.0])

        assert _run(agent.run()) is True
        assert store.calls == ["get_orders"]
        assert state.metrics.revenue == 3698
        assert state.analytics.status == RunStatus.IDLE

    def test_without_commerce_client(self, state):
        agent = AnalyticsAgent(state, None, rng=ScriptedRandom([0.0]))
        _run(agent.run())
        assert state.metrics.revenue == 3698


class TestRevenueHistory:

    def test_same_day_overwrites_last_point(self, state, clock):
        # growth draw, then today's point 100 + floor(0.5 * 200)
        agent = _agent(state, [], [0.0, 0.5])
        _run(agent.run())

        data = state.metrics.revenue_data
        assert len(data) == 30
        assert data[-1].date == clock.now.date().isoformat()
        assert data[-1].revenue == 200

    def test_new_day_appends_and_truncates(self, state, clock):
        first_day = state.metrics.revenue_data[0].date
        clock.advance(days=1)
        agent = _agent(state, [], [0.0, 0.0])
        _run(agent.run())

        data = state.metrics.revenue_data
        assert len(data) == 30
        assert data[0].date != first_day
        assert data[-1].date == "2026-10-20"
        assert data[-1].revenue == 100

    def test_history_invariants_over_many_days(self, state, clock):
        """Should keep at most 30 points with non-decreasing dates."""
        agent = AnalyticsAgent(state, None, rng=ScriptedRandom(default=0.3))
        for i in range(40):
            clock.advance(hours=12)
            _run(agent.run())
            dates = [p.date for p in state.metrics.revenue_data]
            assert len(dates) <= 30
            assert dates == sorted(set(dates))
            assert dates[-1] == clock.now.date().isoformat()

    def test_last_update_stamped(self, state, clock):
        clock.advance(minutes=1)
        _run(_agent(state).run())
        assert state.metrics.last_update == clock.now
        assert state.analytics.last_run == clock.now


class TestAlerts:

    def test_alert_when_behind_target(self, state):
        """Should raise an alert below 70% of target."""
        agent = _agent(state, [{"total_price": "300"}])
        _run(agent.run())
        assert state.analytics.alerts == 1
        assert state.metrics.alerts == 1

    def test_alerts_accumulate(self, state):
        agent = _agent(state, [{"total_price": "300"}])
        for _ in range(3):
            _run(agent.run())
        assert state.analytics.alerts == 3
        assert state.metrics.alerts == 3

    def test_no_alert_on_track(self, state):
        agent = _agent(state, [{"total_price": "4000"}])
        _run(agent.run())
        assert state.analytics.alerts == 0
        # dashboard mirrors the agent's count, replacing the seed of 3
        assert state.metrics.alerts == 0

    def test_exactly_seventy_percent_is_on_track(self, state):
        """Should not alert at exactly 70%."""
        agent = _agent(state, [{"total_price": "3500"}])
        _run(agent.run())
        assert state.analytics.alerts == 0

    def test_custom_target(self, clock):
        state = DashboardState(target=1000, rng=ScriptedRandom(default=0.5), clock=clock)
        agent = _agent(state, [{"total_price": "800"}])
        _run(agent.run())
        assert state.analytics.alerts == 0


class TestInactive:

    def test_inactive_is_noop(self, state):
        state.toggle_agent("analytics")
        before = state.metrics.to_dict()
        agent = _agent(state, [{"total_price": "300"}])

        assert _run(agent.run()) is False
        assert state.metrics.to_dict() == before
        assert state.analytics.revenue == 0
