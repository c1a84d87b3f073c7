import asyncio
import re
from datetime import datetime

import pytest
from fakes import ScriptedOracle, oracle_json, quote_json

from agents.pricing import CONTEXT_PRICING_OPTIONS, PRICING_OPTIONS, PricingAgent, estimate_hours
from common.errors import MissingRequiredField, OracleTransportError, OracleUnavailable, PricingFailed
from common.models import MatchResult, Problem, WorkerMatch

FIXED_NOW = datetime(2025, 7, 4, 9, 15)  # Friday summer morning


@pytest.fixture
def problem(leak_analysis):
    return Problem.model_validate({**leak_analysis, "rawText": "sink leak"})


def _matches(roster, *ids):
    return [WorkerMatch(worker=roster.find_by_id(i), match=MatchResult(worker_id=i, match_score=0.8)) for i in ids]


def _worker_in(prompt):
    return re.search(r"- Name: (.+)", prompt).group(1)


@pytest.mark.asyncio
async def test_price_match_rounds_total_and_tags_source(problem, roster):
    oracle = ScriptedOracle(pricing=quote_json(175.4))
    quote = await PricingAgent(oracle, clock=lambda: FIXED_NOW).price_match(roster.find_by_id("w2"), problem)

    assert quote.total == 175
    assert quote.source == "oracle-pricing"
    assert quote.breakdown.base_rate == 75
    assert quote.alternatives.budget == pytest.approx(150.4)

    (stage, prompt, options), = oracle.calls
    assert stage == "pricing"
    assert options == PRICING_OPTIONS
    assert "Rick Williams" in prompt
    assert "Season: Summer" in prompt
    assert "Day of Week: Friday" in prompt
    assert "Time of Day: Morning" in prompt
    assert "Plumber (92% confidence)" in prompt
    assert "Estimated Duration: 1 hours" in prompt
    assert "ADDITIONAL CONTEXT" not in prompt


@pytest.mark.asyncio
async def test_additional_market_context_changes_prompt_and_options(problem, roster):
    oracle = ScriptedOracle(pricing=quote_json(200))
    market = {"localDemand": "High", "competitorPricing": "$90-110/hour"}
    await PricingAgent(oracle).price_match(roster.find_by_id("w2"), problem, 3, market)

    _, prompt, options = oracle.calls[0]
    assert options == CONTEXT_PRICING_OPTIONS
    assert "Local Demand: High" in prompt
    assert "ADDITIONAL CONTEXT:" in prompt
    assert "Competitor Pricing: $90-110/hour" in prompt
    assert "Estimated Duration: 3 hours" in prompt


@pytest.mark.asyncio
async def test_missing_breakdown_is_pricing_failed_with_worker(problem, roster):
    oracle = ScriptedOracle(pricing=oracle_json({"total": 150}))
    with pytest.raises(PricingFailed) as ei:
        await PricingAgent(oracle).price_match(roster.find_by_id("w1"), problem)
    assert ei.value.worker_id == "w1"
    assert isinstance(ei.value.cause, MissingRequiredField)


@pytest.mark.asyncio
async def test_negative_total_is_rejected(problem, roster):
    oracle = ScriptedOracle(pricing=quote_json(-20))
    with pytest.raises(PricingFailed):
        await PricingAgent(oracle).price_match(roster.find_by_id("w1"), problem)


@pytest.mark.parametrize("estimate,hours", [("3-4 hours", 3.0), ("about 1.5 hrs", 1.5), (None, 2.0), ("a while", 2.0)])
def test_estimate_hours(leak_analysis, estimate, hours):
    details = {**leak_analysis["problemDetails"], "timeEstimate": estimate}
    p = Problem.model_validate({**leak_analysis, "problemDetails": details})
    assert estimate_hours(p) == hours


@pytest.mark.asyncio
async def test_fan_out_isolates_one_failed_worker(problem, roster):
    def reply(prompt):
        name = _worker_in(prompt)
        if name == "Rick Williams":
            raise OracleTransportError("timed out after 30s")
        return quote_json(180 if name == "Marcus Thompson" else 220)

    oracle = ScriptedOracle(pricing=reply)
    priced = await PricingAgent(oracle).price_matches(_matches(roster, "w1", "w2", "w5"), problem)

    assert [p.worker.id for p in priced] == ["w1", "w2", "w5"]
    assert priced[0].outcome.ok and priced[0].outcome.quote.total == 180
    assert not priced[1].outcome.ok
    assert "timed out" in priced[1].outcome.error
    assert priced[2].outcome.ok and priced[2].outcome.quote.total == 220
    assert len(oracle.calls) == 3


@pytest.mark.asyncio
async def test_fan_out_runs_concurrently_and_keeps_match_order(problem, roster):
    in_flight = 0
    peak = 0

    class SlowOracle(ScriptedOracle):
        async def send(self, prompt, options=None, *, stage="oracle", session_id=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            # first worker answers last
            await asyncio.sleep(0.03 if "Marcus" in prompt else 0.01)
            in_flight -= 1
            return await super().send(prompt, options, stage=stage, session_id=session_id)

    oracle = SlowOracle(pricing=lambda prompt: quote_json(100))
    priced = await PricingAgent(oracle).price_matches(_matches(roster, "w1", "w2", "w3"), problem)
    assert [p.worker.id for p in priced] == ["w1", "w2", "w3"]
    assert peak == 3


@pytest.mark.asyncio
async def test_max_concurrency_bounds_in_flight_calls(problem, roster):
    in_flight = 0
    peak = 0

    class CountingOracle(ScriptedOracle):
        async def send(self, prompt, options=None, *, stage="oracle", session_id=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await super().send(prompt, options, stage=stage, session_id=session_id)

    oracle = CountingOracle(pricing=quote_json(100))
    priced = await PricingAgent(oracle, max_concurrency=2).price_matches(
        _matches(roster, "w1", "w2", "w3", "w4", "w5"), problem
    )
    assert len(priced) == 5
    assert peak <= 2


@pytest.mark.asyncio
async def test_fan_out_propagates_oracle_unavailable(problem, roster):
    oracle = ScriptedOracle(pricing=OracleUnavailable("no key"))
    with pytest.raises(OracleUnavailable):
        await PricingAgent(oracle).price_matches(_matches(roster, "w1", "w2"), problem)


@pytest.mark.asyncio
async def test_oracle_unavailable_cancels_pending_quotes(problem, roster):
    cancelled = []

    class FailingFirstOracle(ScriptedOracle):
        async def send(self, prompt, options=None, *, stage="oracle", session_id=None):
            if "Marcus" in prompt:
                raise OracleUnavailable("no key")
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append(_worker_in(prompt))
                raise
            return quote_json(100)

    with pytest.raises(OracleUnavailable):
        await asyncio.wait_for(
            PricingAgent(FailingFirstOracle()).price_matches(_matches(roster, "w1", "w2", "w3"), problem),
            timeout=2,
        )
    assert len(cancelled) == 2


@pytest.mark.asyncio
async def test_fan_out_of_nothing_makes_no_calls(problem):
    oracle = ScriptedOracle()
    assert await PricingAgent(oracle).price_matches([], problem) == []
    assert oracle.calls == []
