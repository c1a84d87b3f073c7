import pytest

from agents.gate import AskFollowUp, Proceed, Unresolved, decide_next_step
from common.models import Problem


def _problem(**over):
    base = {"trades": [{"trade": "Electrician", "confidence": 0.8}], "urgency": "soon", "confidence": 0.8}
    base.update(over)
    return Problem.model_validate(base)


def test_follow_up_questions_ask_before_anything_else():
    p = _problem(followUpQuestions=["Is anything sparking?"], summary="Outlet problem")
    step = decide_next_step(p)
    assert isinstance(step, AskFollowUp)
    assert step.questions == ["Is anything sparking?"]
    assert "Is anything sparking?" in step.message
    assert step.message.startswith("Outlet problem")


def test_follow_up_wins_even_without_trades():
    p = _problem(trades=[], followUpQuestions=["What is broken?"])
    assert isinstance(decide_next_step(p), AskFollowUp)


def test_no_trades_is_unresolved():
    step = decide_next_step(_problem(trades=[]))
    assert isinstance(step, Unresolved)


def test_confident_problem_proceeds_with_same_problem():
    p = _problem()
    step = decide_next_step(p)
    assert isinstance(step, Proceed)
    assert step.problem is p


@pytest.mark.parametrize("confidence,threshold,kind", [
    (0.0, 0.0, Unresolved),
    (0.3, 0.5, Unresolved),
    (0.5, 0.5, Unresolved),
    (0.51, 0.5, Proceed),
    (0.01, 0.0, Proceed),
])
def test_min_confidence_threshold(confidence, threshold, kind):
    assert isinstance(decide_next_step(_problem(confidence=confidence), threshold), kind)


def test_gate_is_pure():
    p = _problem(followUpQuestions=["Where?"])
    assert decide_next_step(p) == decide_next_step(p)
    assert p.follow_up_questions == ["Where?"]
