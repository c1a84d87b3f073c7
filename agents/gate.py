"""
Clarification gate: Problem -> AskFollowUp | Unresolved | Proceed.

Pure and deterministic. The only numeric policy is `min_confidence`
(config `gate.min_confidence`, default 0.0): a problem whose overall
confidence is at or below it cannot proceed to matching.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from common.models import Problem

DEFAULT_MIN_CONFIDENCE = 0.0


@dataclass(frozen=True)
class AskFollowUp:
    questions: List[str]
    summary: str = ""
    kind: str = field(default="ask_follow_up", init=False)

    @property
    def message(self) -> str:
        lines = []
        if self.summary:
            lines.append(self.summary.strip())
            lines.append("")
        lines.append("To find the right professional, could you tell me:")
        lines.extend(f"- {q}" for q in self.questions)
        return "\n".join(lines)


@dataclass(frozen=True)
class Unresolved:
    reason: str
    kind: str = field(default="unresolved", init=False)


@dataclass(frozen=True)
class Proceed:
    problem: Problem
    kind: str = field(default="proceed", init=False)


NextStep = Union[AskFollowUp, Unresolved, Proceed]


def decide_next_step(problem: Problem, min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> NextStep:
    questions = [q.strip() for q in problem.follow_up_questions if q and q.strip()]
    if problem.needs_more_info and questions:
        return AskFollowUp(questions=questions, summary=problem.summary)
    if not problem.trades:
        return Unresolved(reason="no trade identified")
    if problem.confidence <= min_confidence:
        return Unresolved(reason=f"confidence {problem.confidence:.2f} <= {min_confidence:.2f}")
    return Proceed(problem=problem)
