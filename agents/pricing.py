## agents/pricing.py

import asyncio
import logging
import re
from typing import Optional, Sequence

from common.base_agent import BaseAgent
from common.errors import PricingFailed
from common.models import PricedMatch, Problem, Quote, QuoteOutcome, WorkerMatch, WorkerRecord
from constants.prompts.pricing_prompts import build_pricing_prompt, has_additional_context
from constants.types import MarketContext, OracleOptions
from services.response_contract import PRICING_CONTRACT, build_model

logger = logging.getLogger("trades-matching")

PRICING_OPTIONS: OracleOptions = {"maxOutputTokens": 1000, "temperature": 0.3}
CONTEXT_PRICING_OPTIONS: OracleOptions = {"maxOutputTokens": 1200, "temperature": 0.2}
DEFAULT_HOURS = 2.0

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def estimate_hours(problem: Problem) -> float:
    """First number in the analysed time estimate ("2-3 hours" -> 2), else 2."""
    m = _NUMBER.search(problem.details.time_estimate or "")
    if m:
        hours = float(m.group())
        if hours > 0:
            return hours
    return DEFAULT_HOURS


class PricingAgent(BaseAgent):
    """One oracle call per (worker, problem); batch fan-out with per-worker isolation."""

    stage = "pricing"
    failure = PricingFailed

    def __init__(self, oracle, *, max_concurrency: Optional[int] = None, **kwargs) -> None:
        super().__init__(oracle, **kwargs)
        self._max_concurrency = max_concurrency if max_concurrency and max_concurrency > 0 else None

    async def price_match(
        self,
        worker: WorkerRecord,
        problem: Problem,
        estimated_hours: Optional[float] = None,
        market_context: Optional[MarketContext] = None,
        *,
        session_id: Optional[str] = None,
    ) -> Quote:
        hours = estimated_hours if estimated_hours and estimated_hours > 0 else estimate_hours(problem)
        prompt = build_pricing_prompt(worker, problem, hours, market_context, now=self._clock(), brand=self._brand)
        options = CONTEXT_PRICING_OPTIONS if has_additional_context(market_context) else PRICING_OPTIONS

        with self._stage_failures(session_id, worker_id=worker.id):
            raw = await self._ask(prompt, options, session_id=session_id, worker=worker.id, hours=hours)
            data = PRICING_CONTRACT.read(raw)
            data.pop("source", None)
            quote = build_model(Quote, data)

        self._log(session_id).stage_result(self.stage, worker=worker.id, total=quote.total)
        return quote

    async def price_matches(
        self,
        matches: Sequence[WorkerMatch],
        problem: Problem,
        market_context: Optional[MarketContext] = None,
        *,
        session_id: Optional[str] = None,
    ) -> list[PricedMatch]:
        """
        Price every match concurrently and join on all of them.
        Results keep match order. A PricingFailed becomes that item's error;
        anything else (OracleUnavailable included) cancels the
        remaining quotes and propagates.
        """
        sem = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
        hours = estimate_hours(problem)

        async def _one(m: WorkerMatch) -> PricedMatch:
            try:
                if sem is None:
                    quote = await self.price_match(m.worker, problem, hours, market_context, session_id=session_id)
                else:
                    async with sem:
                        quote = await self.price_match(m.worker, problem, hours, market_context, session_id=session_id)
                outcome = QuoteOutcome(worker_id=m.worker_id, quote=quote)
            except PricingFailed as e:
                outcome = QuoteOutcome(worker_id=m.worker_id, error=str(e))
            return PricedMatch(worker=m.worker, match=m.match, outcome=outcome)

        tasks = [asyncio.create_task(_one(m)) for m in matches]
        try:
            priced = await asyncio.gather(*tasks)
        except BaseException:
            # one fatal failure stops the rest of the batch
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        failed = [p.worker.id for p in priced if not p.outcome.ok]
        if failed:
            logger.warning("Pricing failed for %d of %d workers: %s", len(failed), len(priced), failed)
        return list(priced)
