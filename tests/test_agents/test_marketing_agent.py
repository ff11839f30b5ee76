"""Tests for the Marketing agent's simulated campaign optimisation."""

from __future__ import annotations

import asyncio

import pytest

from gaming_dashboard.agents.implementations.marketing_agent import MarketingAgent
from gaming_dashboard.agents.state import DashboardState, RunStatus
from gaming_dashboard.testing.fakes import FrozenClock, ScriptedRandom


def _run(coro):
    return asyncio.run(coro)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def state(clock):
    return DashboardState(rng=ScriptedRandom(default=0.5), clock=clock)


class TestMarketingAgent:

    def test_optimisation_branch(self, state, clock):
        """Should add a campaign, ROAS and spend when the draw clears the threshold."""
        # chance draw, ROAS gain (0.4 * 0.5), spend 50 + floor(0.25 * 100)
        agent = MarketingAgent(state, rng=ScriptedRandom([0.5, 0.4, 0.25]))
        clock.advance(minutes=5)

        assert _run(agent.run()) is True

        stats = state.marketing
        assert stats.campaigns == 1
        assert stats.roas == pytest.approx(0.2)
        assert stats.spend == 75
        assert stats.status == RunStatus.IDLE
        assert stats.last_run == clock.now
        assert state.metrics.campaigns == 1

    def test_no_optimisation_at_threshold(self, state):
        rng = ScriptedRandom([0.3])
        agent = MarketingAgent(state, rng=rng)

        _run(agent.run())

        assert state.marketing.counters() == {"campaigns": 0, "roas": 0.0, "spend": 0}
        assert rng.calls == 1
        # mirror still happens, so the seeded 3 is replaced
        assert state.metrics.campaigns == 0

    def test_spend_upper_bound(self, state):
        agent = MarketingAgent(state, rng=ScriptedRandom([0.9, 0.0, 0.999]))
        _run(agent.run())
        assert state.marketing.spend == 149

    def test_counters_accumulate(self, state):
        agent = MarketingAgent(state, rng=ScriptedRandom(default=0.9))
        for _ in range(3):
            _run(agent.run())
        assert state.marketing.campaigns == 3
        assert state.marketing.spend == 3 * 140
        assert state.metrics.campaigns == 3

    def test_counters_never_decrease(self, state):
        """Should only ever grow campaigns and spend."""
        agent = MarketingAgent(state, rng=ScriptedRandom([0.9, 0.1, 0.1, 0.1, 0.2]))
        _run(agent.run())
        snapshot = state.marketing.counters()
        _run(agent.run())
        assert state.marketing.campaigns >= snapshot["campaigns"]
        assert state.marketing.spend >= snapshot["spend"]
        assert state.marketing.roas >= snapshot["roas"]

    def test_inactive_is_noop(self, state):
        state.toggle_agent("marketing")
        rng = ScriptedRandom(default=0.9)
        agent = MarketingAgent(state, rng=rng)

        assert _run(agent.run()) is False
        assert state.marketing.campaigns == 0
        assert state.metrics.campaigns == 3
        assert rng.calls == 0
