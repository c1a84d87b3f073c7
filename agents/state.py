from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from common.models import PricedMatch, Problem


class ConversationPhase(str, Enum):
    awaiting_input = "awaiting_input"
    analyzing = "analyzing"
    awaiting_clarification = "awaiting_clarification"
    matching = "matching"
    pricing = "pricing"
    resolved = "resolved"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationMessage(BaseModel):
    role: Literal["user", "assistant"]
    text: str
    timestamp: datetime = Field(default_factory=_now)
    problem: Optional[Problem] = None
    matches: Optional[List[PricedMatch]] = None


class ConversationState(BaseModel):
    session_id: str
    phase: ConversationPhase = ConversationPhase.awaiting_input
    messages: List[ConversationMessage] = Field(default_factory=list)
    current_problem: Optional[Problem] = None
    current_matches: List[PricedMatch] = Field(default_factory=list)
    # the request and questions a clarification answer refines
    pending_request: Optional[str] = None
    pending_questions: List[str] = Field(default_factory=list)

    def add_message(self, role: str, text: str, problem: Optional[Problem] = None,
                    matches: Optional[List[PricedMatch]] = None) -> ConversationMessage:
        msg = ConversationMessage(role=role, text=text, problem=problem, matches=matches)
        self.messages.append(msg)
        return msg

    def await_clarification(self, request: str, questions: List[str]):
        self.phase = ConversationPhase.awaiting_clarification
        self.pending_request = request
        self.pending_questions = list(questions)

    def clear_pending(self):
        self.pending_request = None
        self.pending_questions = []

    def reset_to_input(self):
        self.phase = ConversationPhase.awaiting_input
        self.clear_pending()

    def find_match(self, worker_id: str) -> Optional[PricedMatch]:
        for m in self.current_matches:
            if m.worker.id == worker_id:
                return m
        return None
