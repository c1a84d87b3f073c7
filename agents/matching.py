## agents/matching.py

import logging
from typing import Any, Dict, List, Optional, Sequence

from common.base_agent import BaseAgent
from common.errors import ContractError, InvalidFieldValue, MatchingFailed
from common.models import MatchingResult, MatchResult, Problem, WorkerMatch, WorkerRecord
from constants.prompts.matching_prompts import build_matching_prompt
from constants.types import OracleOptions, Preferences
from services.response_contract import MATCH_ENTRY_DEFAULTS, MATCHING_CONTRACT, apply_defaults, build_model

logger = logging.getLogger("trades-matching")

MATCHING_OPTIONS: OracleOptions = {"maxOutputTokens": 2000, "temperature": 0.2}


def join_matches(entries: Sequence[Any], roster: Sequence[WorkerRecord]) -> List[WorkerMatch]:
    """
    Resolve oracle match entries against the roster by exact id, in oracle order.
    Entries without an id, with an unknown id, a repeated id, or unusable fields
    are dropped; a WorkerRecord is never fabricated.
    """
    by_id: Dict[str, WorkerRecord] = {w.id: w for w in roster}
    out: List[WorkerMatch] = []
    seen: set[str] = set()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        worker_id = entry.get("workerId")
        worker_id = str(worker_id).strip() if worker_id is not None else ""
        worker = by_id.get(worker_id)
        if worker is None:
            logger.info("Dropping match for unknown worker id %r", worker_id or None)
            continue
        if worker_id in seen:
            continue
        try:
            match = build_model(MatchResult, apply_defaults({**entry, "workerId": worker_id}, MATCH_ENTRY_DEFAULTS))
        except ContractError as e:
            logger.info("Dropping match for %s: %s", worker_id, e)
            continue
        seen.add(worker_id)
        out.append(WorkerMatch(worker=worker, match=match))
    return out


class WorkerMatcher(BaseAgent):
    """Rank a roster against a Problem; join valid matches back to roster records."""

    stage = "matching"
    failure = MatchingFailed

    async def find_matches(
        self,
        problem: Problem,
        roster: Sequence[WorkerRecord],
        location: Optional[str] = None,
        preferences: Optional[Preferences] = None,
        *,
        session_id: Optional[str] = None,
    ) -> MatchingResult:
        roster = list(roster)
        prompt = build_matching_prompt(problem, roster, location, preferences, brand=self._brand)

        with self._stage_failures(session_id):
            raw = await self._ask(prompt, MATCHING_OPTIONS, session_id=session_id, roster=len(roster))
            data = MATCHING_CONTRACT.read(raw)
            entries = data["matches"]
            if not isinstance(entries, list):
                raise InvalidFieldValue("matches must be a list")
            result = MatchingResult(
                matches=join_matches(entries, roster),
                summary=str(data.get("summary") or ""),
                alternatives=_as_text(data.get("alternatives")),
            )

        self._log(session_id).stage_result(
            self.stage,
            proposed=len(entries),
            kept=[m.worker_id for m in result.matches],
        )
        return result


def _as_text(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, (list, tuple)):
        return "; ".join(str(x) for x in v)
    return str(v)
