import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from common.config_loader import Settings
from common.errors import OracleTransportError, OracleUnavailable
from services.oracle_client import ReasoningOracleClient, _build_messages
from utils.prompt_logger import PromptLogger


class FakeCompletions:
    def __init__(self, content="ok", exc=None, delay=0.0):
        self.content = content
        self.exc = exc
        self.delay = delay
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc:
            raise self.exc
        msg = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=msg)])


def _client(completions, **kw):
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return ReasoningOracleClient(api_key="sk-test", model="gpt-test", client=fake, **kw)


@pytest.mark.asyncio
async def test_send_returns_text_and_passes_options():
    comp = FakeCompletions('{"total": 1}')
    text = await _client(comp).send("price this", {"maxOutputTokens": 1200, "temperature": 0.2})
    assert text == '{"total": 1}'
    assert comp.kwargs["model"] == "gpt-test"
    assert comp.kwargs["max_tokens"] == 1200
    assert comp.kwargs["temperature"] == 0.2
    assert comp.kwargs["messages"] == [{"role": "user", "content": "price this"}]


def test_images_become_data_uri_parts():
    msgs = _build_messages({"text": "look", "images": [{"data": "QUJD", "media_type": "image/png"}]})
    parts = msgs[0]["content"]
    assert parts[0] == {"type": "text", "text": "look"}
    assert parts[1]["image_url"]["url"] == "data:image/png;base64,QUJD"


@pytest.mark.asyncio
async def test_missing_key_is_unavailable():
    client = ReasoningOracleClient.from_settings(Settings(openai_api_key=None))
    assert not client.available
    with pytest.raises(OracleUnavailable):
        await client.send("hello")


@pytest.mark.asyncio
async def test_timeout_is_a_transport_error():
    with pytest.raises(OracleTransportError):
        await _client(FakeCompletions(delay=0.5), timeout_s=0.01).send("slow")


@pytest.mark.asyncio
async def test_api_errors_are_transport_errors():
    req = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    comp = FakeCompletions(exc=openai.APIConnectionError(request=req))
    with pytest.raises(OracleTransportError) as ei:
        await _client(comp).send("hi")
    assert isinstance(ei.value.__cause__, openai.APIConnectionError)


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "   "])
async def test_empty_completion_is_a_transport_error(content):
    with pytest.raises(OracleTransportError):
        await _client(FakeCompletions(content)).send("hi")


@pytest.mark.asyncio
async def test_tracer_records_success_and_failure(tmp_path):
    tracer = PromptLogger(str(tmp_path / "traces.sqlite3"))
    try:
        await _client(FakeCompletions("fine"), tracer=tracer).send("p1", stage="analysis", session_id="s1")
        with pytest.raises(OracleTransportError):
            await _client(FakeCompletions(""), tracer=tracer).send("p2", stage="pricing")

        newest, oldest = tracer.recent(2)
        assert oldest["stage"] == "analysis" and oldest["outcome"] == "ok"
        assert oldest["response_text"] == "fine" and oldest["session_id"] == "s1"
        assert newest["stage"] == "pricing" and newest["outcome"] == "error"
        assert "empty completion" in newest["error"]
    finally:
        tracer.close()
