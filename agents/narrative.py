## agents/narrative.py

from typing import Optional

from common.base_agent import BaseAgent
from common.errors import NarrativeFailed, OracleTransportError
from common.models import Problem
from constants.prompts.narrative_prompts import build_clarification_prompt, build_no_match_prompt
from constants.types import OracleOptions

CLARIFICATION_OPTIONS: OracleOptions = {"maxOutputTokens": 500, "temperature": 0.7}
NO_MATCH_OPTIONS: OracleOptions = {"maxOutputTokens": 400, "temperature": 0.7}


class NarrativeAgent(BaseAgent):
    """Free-text replies. The response contract is not applied here."""

    stage = "narrative"
    failure = NarrativeFailed

    async def clarification_reply(self, user_text: str, *, session_id: Optional[str] = None) -> str:
        return await self._reply(build_clarification_prompt(user_text), CLARIFICATION_OPTIONS, session_id, "clarification")

    async def no_match_reply(self, problem: Problem, *, session_id: Optional[str] = None) -> str:
        return await self._reply(build_no_match_prompt(problem), NO_MATCH_OPTIONS, session_id, "no_match")

    async def _reply(self, prompt: str, options: OracleOptions, session_id: Optional[str], kind: str) -> str:
        with self._stage_failures(session_id):
            raw = await self._ask(prompt, options, session_id=session_id, kind=kind)
            text = (raw or "").strip()
            if not text:
                raise OracleTransportError("empty narrative reply")
        self._log(session_id).stage_result(self.stage, kind=kind, chars=len(text))
        return text
