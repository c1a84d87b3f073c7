"""
Reasoning oracle client
-----------------------
Thin transport wrapper around the OpenAI chat-completions API.

  send(prompt, options) -> response text

`prompt` is either plain text or {"text": ..., "images": [{"data", "media_type"}]}.
Failures are classified:
  - OracleUnavailable     no API key / client configured
  - OracleTransportError  network error, non-2xx, timeout, empty completion
The client never parses the response; that is the response contract's job.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

import openai
from openai import AsyncOpenAI

from common.config_loader import Settings, mask_key
from common.errors import OracleTransportError, OracleUnavailable
from constants.types import OracleOptions, Prompt
from utils.prompt_logger import PromptLogger

logger = logging.getLogger("trades-matching")

DEFAULT_OPTIONS: OracleOptions = {"maxOutputTokens": 1000, "temperature": 0.3}


class OracleClient(Protocol):
    async def send(
        self,
        prompt: Prompt,
        options: Optional[OracleOptions] = None,
        *,
        stage: str = "oracle",
        session_id: Optional[str] = None,
    ) -> str: ...


def _build_messages(prompt: Prompt) -> List[Dict[str, Any]]:
    if isinstance(prompt, str):
        return [{"role": "user", "content": prompt}]
    content: List[Dict[str, Any]] = [{"type": "text", "text": prompt["text"]}]
    for img in prompt.get("images") or []:
        media_type = img.get("media_type") or "image/jpeg"
        content.append({
            "type": "image_url",
            "image_url": {"url": f"data:{media_type};base64,{img['data']}"},
        })
    return [{"role": "user", "content": content}]


def _image_count(prompt: Prompt) -> int:
    return 0 if isinstance(prompt, str) else len(prompt.get("images") or [])


class ReasoningOracleClient:
    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        timeout_s: float = 30.0,
        client: Optional[AsyncOpenAI] = None,
        tracer: Optional[PromptLogger] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout_s = timeout_s
        self._client = client
        self._tracer = tracer

    @classmethod
    def from_settings(cls, settings: Settings, tracer: Optional[PromptLogger] = None) -> "ReasoningOracleClient":
        if settings.openai_api_key:
            logger.info("Oracle model=%s key=%s", settings.oracle_model, mask_key(settings.openai_api_key))
        else:
            logger.warning("OPENAI_API_KEY is missing. Oracle calls will fail with OracleUnavailable.")
        return cls(
            api_key=settings.openai_api_key,
            model=settings.oracle_model,
            timeout_s=settings.oracle_timeout_s,
            tracer=tracer,
        )

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise OracleUnavailable(
                    "No reasoning oracle configured. Set OPENAI_API_KEY to enable intelligent analysis."
                )
            # retries belong to the caller, not the transport
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout_s, max_retries=0)
        return self._client

    async def send(
        self,
        prompt: Prompt,
        options: Optional[OracleOptions] = None,
        *,
        stage: str = "oracle",
        session_id: Optional[str] = None,
    ) -> str:
        client = self._get_client()
        opts = {**DEFAULT_OPTIONS, **(options or {})}
        text_prompt = prompt if isinstance(prompt, str) else prompt["text"]

        trace_id = None
        if self._tracer:
            trace_id = self._tracer.begin_trace(
                stage=stage, prompt=text_prompt, session_id=session_id, image_count=_image_count(prompt)
            )

        text: Optional[str] = None
        error: Optional[str] = None
        try:
            resp = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self._model,
                    messages=_build_messages(prompt),
                    max_tokens=opts["maxOutputTokens"],
                    temperature=opts["temperature"],
                ),
                timeout=self._timeout_s,
            )
            text = resp.choices[0].message.content if resp.choices else None
            if not text or not text.strip():
                raise OracleTransportError("Oracle returned an empty completion")
            return text
        except asyncio.TimeoutError as e:
            error = f"timed out after {self._timeout_s:g}s"
            raise OracleTransportError(f"Oracle call {error}") from e
        except openai.APIError as e:
            error = f"{type(e).__name__}: {e}"
            raise OracleTransportError(f"Oracle call failed: {error}") from e
        except OracleTransportError as e:
            error = str(e)
            raise
        finally:
            if self._tracer:
                self._tracer.end_trace(
                    trace_id,
                    response_text=None if error else text,
                    error=error,
                )
