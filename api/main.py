from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncEngine

from agents.conversation import ConversationManager, TurnResult
from agents.gate import AskFollowUp, Proceed, decide_next_step
from api.utils import AnalyzeImageIn, AnalyzeProblemIn, BookIn, ChatIn, FindWorkersIn
from common.config_loader import Settings, load_settings
from common.errors import OracleUnavailable, StageFailed, UnknownWorker
from common.models import ImageInput
from db.models import init_db
from db.session import make_engine, make_session_factory
from services.booking_service import BookingStore

logger = logging.getLogger("trades-matching")


def _dump(model: BaseModel) -> Any:
    return model.model_dump(mode="json", by_alias=True)


def _turn_out(turn: TurnResult) -> dict:
    return {
        "sessionId": turn.session_id,
        "reply": turn.reply,
        "phase": turn.phase.value,
        "problem": _dump(turn.problem) if turn.problem else None,
        "matches": [_dump(m) for m in turn.matches],
        "followUpQuestions": turn.follow_up_questions,
        "error": turn.error,
    }


def create_app(
    settings: Optional[Settings] = None,
    *,
    manager: Optional[ConversationManager] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Build the HTTP boundary. Tests pass a manager wired to a fake oracle
    and an in-memory engine; production builds both from settings.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        eng = engine or make_engine(settings.database_url)
        await init_db(eng)
        store = BookingStore(make_session_factory(eng))
        mgr = manager or ConversationManager.from_settings(settings, booking_store=store)
        if mgr.booking_store is None:
            mgr.booking_store = store
        app.state.manager = mgr
        yield
        await eng.dispose()

    app = FastAPI(lifespan=lifespan, title=f"{settings.brand} Matching API", version="0.1.0")

    @app.exception_handler(OracleUnavailable)
    async def _oracle_unavailable(request: Request, exc: OracleUnavailable):
        return JSONResponse(status_code=503, content={"detail": str(exc) or "oracle unavailable"})

    @app.exception_handler(StageFailed)
    async def _stage_failed(request: Request, exc: StageFailed):
        return JSONResponse(status_code=502, content={"detail": str(exc), "stage": exc.stage})

    @app.exception_handler(UnknownWorker)
    async def _unknown_worker(request: Request, exc: UnknownWorker):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    def _manager(request: Request) -> ConversationManager:
        return request.app.state.manager

    # ---------------------------
    # Pipeline stages
    # ---------------------------
    @app.post("/api/analyze-problem")
    async def analyze_problem(body: AnalyzeProblemIn, request: Request):
        mgr = _manager(request)
        problem = await mgr.analyzer.analyze_problem(body.description, body.images, body.location)
        step = decide_next_step(problem, mgr.gate_min_confidence)
        return {"problem": _dump(problem), "nextStep": step.kind}

    @app.post("/api/find-workers")
    async def find_workers(body: FindWorkersIn, request: Request):
        mgr = _manager(request)
        problem = body.problem
        if problem is None:
            if not (body.description or "").strip():
                raise HTTPException(400, "Provide either problem or description")
            problem = await mgr.analyzer.analyze_problem(body.description, location=body.location)

        # matching only runs on a problem the gate lets through
        step = decide_next_step(problem, mgr.gate_min_confidence)
        if not isinstance(step, Proceed):
            return {
                "problem": _dump(problem),
                "nextStep": step.kind,
                "followUpQuestions": list(step.questions) if isinstance(step, AskFollowUp) else [],
                "matches": [],
            }

        location = body.location or problem.location.extracted
        result = await mgr.matcher.find_matches(problem, mgr.roster.list_all(), location, body.preferences)
        priced = await mgr.pricer.price_matches(result.matches, problem, body.market_context)
        return {
            "problem": _dump(problem),
            "nextStep": step.kind,
            "matches": [_dump(p) for p in priced],
            "summary": result.summary,
            "alternatives": result.alternatives,
        }

    @app.post("/api/chat")
    async def chat(body: ChatIn, request: Request):
        if not body.message.strip():
            raise HTTPException(400, "message must not be empty")
        session_id = body.session_id or str(uuid.uuid4())
        turn = await _manager(request).handle_message(
            session_id,
            body.message,
            images=body.images,
            location=body.location,
            preferences=body.preferences,
            market_context=body.market_context,
        )
        return _turn_out(turn)

    @app.delete("/api/chat/{session_id}", status_code=204)
    async def end_chat(session_id: str, request: Request):
        if not _manager(request).end_session(session_id):
            raise HTTPException(404, f"Session not found: {session_id}")
        return Response(status_code=204)

    @app.post("/api/analyze-image")
    async def analyze_image(body: AnalyzeImageIn, request: Request):
        if not body.image.strip():
            raise HTTPException(400, "image must not be empty")
        image = ImageInput(data=body.image, media_type=body.media_type)
        result = await _manager(request).analyzer.analyze_image(image, body.context)
        return _dump(result)

    # ---------------------------
    # Roster
    # ---------------------------
    @app.get("/api/workers")
    async def list_workers(request: Request, trade: Optional[str] = Query(None)):
        roster = _manager(request).roster
        workers: List = roster.filter_by_trade(trade) if trade else roster.list_all()
        return [_dump(w) for w in workers]

    @app.get("/api/workers/{worker_id}")
    async def get_worker(worker_id: str, request: Request):
        w = _manager(request).roster.find_by_id(worker_id)
        if w is None:
            raise UnknownWorker(worker_id)
        return _dump(w)

    # ---------------------------
    # Bookings
    # ---------------------------
    @app.post("/api/book", status_code=201)
    async def book(body: BookIn, request: Request):
        try:
            record = await _manager(request).book(
                body.session_id,
                body.worker_id,
                body.schedule,
                problem_summary=body.problem_summary,
                estimated_cost=body.estimated_cost,
            )
        except ValueError as e:
            raise HTTPException(400, str(e)) from e
        return _dump(record)

    return app
