import pytest
from fakes import ScriptedOracle

from agents.narrative import CLARIFICATION_OPTIONS, NO_MATCH_OPTIONS, NarrativeAgent
from common.errors import NarrativeFailed, OracleTransportError, OracleUnavailable
from common.models import Problem


@pytest.mark.asyncio
async def test_clarification_reply_is_free_text():
    oracle = ScriptedOracle(narrative="  Sorry to hear that! What exactly stopped working? {not json}  ")
    text = await NarrativeAgent(oracle).clarification_reply("it's broken")
    assert text == "Sorry to hear that! What exactly stopped working? {not json}"

    (stage, prompt, options), = oracle.calls
    assert stage == "narrative"
    assert options == CLARIFICATION_OPTIONS
    assert '"it\'s broken"' in prompt
    assert "not JSON" in prompt


@pytest.mark.asyncio
async def test_no_match_reply_mentions_problem(leak_analysis):
    oracle = ScriptedOracle(narrative="We couldn't find anyone nearby yet.")
    problem = Problem.model_validate(leak_analysis)
    text = await NarrativeAgent(oracle).no_match_reply(problem)
    assert text.startswith("We couldn't")

    _, prompt, options = oracle.calls[0]
    assert options == NO_MATCH_OPTIONS
    assert "Plumber" in prompt
    assert "Leak under the kitchen sink" in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["", "   \n"])
async def test_empty_reply_is_a_failure(reply):
    with pytest.raises(NarrativeFailed):
        await NarrativeAgent(ScriptedOracle(narrative=reply)).clarification_reply("help")


@pytest.mark.asyncio
async def test_transport_errors_are_wrapped_and_unavailable_is_not():
    with pytest.raises(NarrativeFailed) as ei:
        await NarrativeAgent(ScriptedOracle(narrative=OracleTransportError("503"))).clarification_reply("help")
    assert isinstance(ei.value.cause, OracleTransportError)

    with pytest.raises(OracleUnavailable):
        await NarrativeAgent(ScriptedOracle(narrative=OracleUnavailable("no key"))).clarification_reply("help")
