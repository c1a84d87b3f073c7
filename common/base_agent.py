# common/base_agent.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Optional, Type

from common.errors import ContractError, OracleTransportError, StageFailed
from constants.types import OracleOptions, Prompt
from services.oracle_client import OracleClient
from utils.logger import StageLogger

logger = logging.getLogger("trades-matching")


class BaseAgent:
    """
    Base class for all pipeline stages.
    - Owns the oracle client and the stage logger
    - `_ask()` sends one prompt and logs prompt/response
    - `_stage_failures()` turns transport/contract errors into the stage's failure type
    OracleUnavailable is never wrapped: it is fatal for the whole pipeline.
    """

    stage: str = "oracle"
    failure: Type[StageFailed] = StageFailed

    def __init__(
        self,
        oracle: OracleClient,
        *,
        brand: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
        stage_logger: Optional[StageLogger] = None,
    ) -> None:
        self._oracle = oracle
        self._brand = brand
        self._clock = clock
        self._stage_log = stage_logger or StageLogger(logger)

    def _log(self, session_id: Optional[str]) -> StageLogger:
        return self._stage_log.with_session(session_id) if session_id else self._stage_log

    async def _ask(
        self,
        prompt: Prompt,
        options: OracleOptions,
        *,
        session_id: Optional[str] = None,
        stage: Optional[str] = None,
        **log_fields: Any,
    ) -> str:
        stage = stage or self.stage
        log = self._log(session_id)
        text = prompt if isinstance(prompt, str) else prompt["text"]
        log.stage_start(stage, text, **log_fields)
        raw = await self._oracle.send(prompt, options, stage=stage, session_id=session_id)
        log.stage_response(stage, raw)
        return raw

    @contextmanager
    def _stage_failures(self, session_id: Optional[str] = None, **failure_kwargs: Any) -> Iterator[None]:
        try:
            yield
        except (OracleTransportError, ContractError) as e:
            self._log(session_id).stage_failed(self.stage, e)
            raise self.failure(e, **failure_kwargs) from e
