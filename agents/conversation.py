## agents/conversation.py

"""
Turn orchestration: analysis -> gate -> matching -> pricing fan-out.

One ConversationState per session id. Turns of the same session run one at a
time; different sessions only share the read-only roster.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from agents.analysis import ProblemAnalyzer
from agents.gate import AskFollowUp, Proceed, Unresolved, decide_next_step
from agents.matching import WorkerMatcher
from agents.narrative import NarrativeAgent
from agents.pricing import PricingAgent
from agents.state import ConversationPhase, ConversationState
from common.config_loader import Settings
from common.errors import OracleUnavailable, StageFailed, UnknownWorker
from common.models import BookingRecord, PricedMatch, Problem
from constants.prompts.analysis_prompts import build_refinement_text
from constants.types import MarketContext, Preferences
from services.booking_service import BookingStore
from services.oracle_client import OracleClient, ReasoningOracleClient
from services.worker_roster import WorkerRoster
from utils.prompt_logger import PromptLogger

logger = logging.getLogger("trades-matching")

UNAVAILABLE_REPLY = (
    "I'm sorry, intelligent analysis is temporarily unavailable. "
    "Please try again in a few moments."
)


@dataclass
class TurnResult:
    session_id: str
    reply: str
    phase: ConversationPhase
    problem: Optional[Problem] = None
    matches: List[PricedMatch] = field(default_factory=list)
    follow_up_questions: List[str] = field(default_factory=list)
    error: Optional[str] = None


def summarize_matches(matches: Sequence[PricedMatch]) -> str:
    lines = [f"I found {len(matches)} professional{'s' if len(matches) != 1 else ''} for this job:"]
    for i, m in enumerate(matches, start=1):
        price = f"${m.outcome.quote.total}" if m.outcome.ok else "quote unavailable"
        lines.append(
            f"{i}. {m.worker.name} ({m.worker.trade}, {m.worker.rating}/5, {m.worker.distance} mi) "
            f"- {price}, arrival {m.match.estimated_arrival}"
        )
    return "\n".join(lines)


class ConversationManager:
    def __init__(
        self,
        analyzer: ProblemAnalyzer,
        matcher: WorkerMatcher,
        pricer: PricingAgent,
        narrator: NarrativeAgent,
        roster: WorkerRoster,
        booking_store: Optional[BookingStore] = None,
        gate_min_confidence: float = 0.0,
        session_idle_ttl_s: Optional[float] = None,
    ):
        self.analyzer = analyzer
        self.matcher = matcher
        self.pricer = pricer
        self.narrator = narrator
        self.roster = roster
        self.booking_store = booking_store
        self.gate_min_confidence = gate_min_confidence
        self.session_idle_ttl_s = session_idle_ttl_s
        self._sessions: Dict[str, ConversationState] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._last_seen: Dict[str, float] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        oracle: Optional[OracleClient] = None,
        roster: Optional[WorkerRoster] = None,
        booking_store: Optional[BookingStore] = None,
    ) -> "ConversationManager":
        if oracle is None:
            tracer = PromptLogger(settings.trace_db_path) if settings.trace_db_path else None
            oracle = ReasoningOracleClient.from_settings(settings, tracer=tracer)
        brand = settings.brand
        return cls(
            analyzer=ProblemAnalyzer(oracle, brand=brand),
            matcher=WorkerMatcher(oracle, brand=brand),
            pricer=PricingAgent(oracle, brand=brand, max_concurrency=settings.pricing_max_concurrency),
            narrator=NarrativeAgent(oracle, brand=brand),
            roster=roster if roster is not None else WorkerRoster.load(settings.roster_path),
            booking_store=booking_store,
            gate_min_confidence=settings.gate_min_confidence,
            session_idle_ttl_s=settings.session_idle_ttl_s,
        )

    # ---------- sessions ----------

    def get_state(self, session_id: str) -> Optional[ConversationState]:
        return self._sessions.get(session_id)

    def _state(self, session_id: str) -> ConversationState:
        st = self._sessions.get(session_id)
        if st is None:
            st = ConversationState(session_id=session_id)
            self._sessions[session_id] = st
        return st

    def end_session(self, session_id: str) -> bool:
        """Drop a session's state. A turn still running keeps its lock until it finishes."""
        lock = self._locks.get(session_id)
        if lock is None or not lock.locked():
            self._locks.pop(session_id, None)
            self._last_seen.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def evict_idle_sessions(self, now: Optional[float] = None) -> List[str]:
        """End sessions with no turn for longer than session_idle_ttl_s. Busy sessions are kept."""
        if not self.session_idle_ttl_s:
            return []
        now = time.monotonic() if now is None else now
        stale = [
            sid
            for sid, seen in self._last_seen.items()
            if now - seen > self.session_idle_ttl_s and not (sid in self._locks and self._locks[sid].locked())
        ]
        for sid in stale:
            self.end_session(sid)
        if stale:
            logger.info("Evicted %d idle sessions", len(stale))
        return stale

    # ---------- turns ----------

    async def handle_message(
        self,
        session_id: str,
        text: str,
        images: Optional[Sequence] = None,
        location: Optional[str] = None,
        preferences: Optional[Preferences] = None,
        market_context: Optional[MarketContext] = None,
    ) -> TurnResult:
        if not text or not text.strip():
            raise ValueError("message text is required")
        self.evict_idle_sessions()
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        async with lock:
            self._last_seen[session_id] = time.monotonic()
            st = self._state(session_id)
            st.add_message("user", text.strip())
            try:
                return await self._run_turn(st, text.strip(), images, location, preferences, market_context)
            except (StageFailed, OracleUnavailable) as e:
                logger.error("Turn failed | session=%s error=%s: %s", session_id, type(e).__name__, e)
                st.reset_to_input()
                st.current_problem = None
                st.current_matches = []
                st.add_message("assistant", UNAVAILABLE_REPLY)
                return TurnResult(
                    session_id=session_id,
                    reply=UNAVAILABLE_REPLY,
                    phase=st.phase,
                    error=str(e),
                )

    async def _run_turn(
        self,
        st: ConversationState,
        text: str,
        images: Optional[Sequence],
        location: Optional[str],
        preferences: Optional[Preferences],
        market_context: Optional[MarketContext],
    ) -> TurnResult:
        sid = st.session_id
        if st.phase == ConversationPhase.awaiting_clarification and st.pending_request:
            request = build_refinement_text(st.pending_request, st.pending_questions, text)
        else:
            request = text

        st.phase = ConversationPhase.analyzing
        problem = await self.analyzer.analyze_problem(request, images, location, session_id=sid)
        st.current_problem = problem
        st.current_matches = []

        step = decide_next_step(problem, self.gate_min_confidence)
        if isinstance(step, AskFollowUp):
            st.await_clarification(request, step.questions)
            return self._reply(st, step.message, problem=problem, questions=step.questions)

        if isinstance(step, Unresolved):
            logger.info("Gate unresolved | session=%s reason=%s", sid, step.reason)
            reply = await self.narrator.clarification_reply(text, session_id=sid)
            st.await_clarification(request, [])
            return self._reply(st, reply, problem=problem)

        if not isinstance(step, Proceed):
            raise TypeError(f"unexpected gate decision: {step!r}")
        st.clear_pending()
        st.phase = ConversationPhase.matching
        result = await self.matcher.find_matches(
            problem, self.roster.list_all(), location or problem.location.extracted, preferences, session_id=sid
        )
        if not result.matches:
            reply = await self.narrator.no_match_reply(problem, session_id=sid)
            st.phase = ConversationPhase.resolved
            return self._reply(st, reply, problem=problem)

        st.phase = ConversationPhase.pricing
        priced = await self.pricer.price_matches(result.matches, problem, market_context, session_id=sid)
        st.current_matches = priced
        st.phase = ConversationPhase.resolved
        return self._reply(st, summarize_matches(priced), problem=problem, matches=priced)

    def _reply(
        self,
        st: ConversationState,
        reply: str,
        *,
        problem: Optional[Problem] = None,
        matches: Optional[List[PricedMatch]] = None,
        questions: Optional[List[str]] = None,
    ) -> TurnResult:
        st.add_message("assistant", reply, problem=problem, matches=matches)
        return TurnResult(
            session_id=st.session_id,
            reply=reply,
            phase=st.phase,
            problem=problem,
            matches=list(matches or []),
            follow_up_questions=list(questions or []),
        )

    # ---------- booking ----------

    async def book(
        self,
        session_id: Optional[str],
        worker_id: str,
        schedule: str,
        *,
        problem_summary: Optional[str] = None,
        estimated_cost: Optional[float] = None,
    ) -> BookingRecord:
        """
        Book a roster worker. The session's problem and successful quote win;
        the caller's summary and cost fill in when the session has none
        (bookings made from a stateless find-workers result).
        """
        if self.booking_store is None:
            raise RuntimeError("no booking store configured")
        worker = self.roster.find_by_id(worker_id)
        if worker is None:
            raise UnknownWorker(worker_id)

        st = self._sessions.get(session_id) if session_id else None
        summary, cost = "", None
        if st is not None:
            if st.current_problem is not None:
                summary = st.current_problem.summary or st.current_problem.raw_text
            priced = st.find_match(worker_id)
            if priced is not None and priced.outcome.ok:
                cost = float(priced.outcome.quote.total)
        if not summary and problem_summary:
            summary = problem_summary
        if cost is None and estimated_cost is not None:
            cost = float(estimated_cost)

        record = await self.booking_store.create(worker.id, schedule, summary, cost)
        logger.info("Booked | session=%s worker=%s booking=%s cost=%s", session_id, worker.id, record.id, cost)
        return record
