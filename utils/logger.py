from __future__ import annotations
import logging
import os
import json
from typing import Any, Optional

__all__ = ["get_logger", "StageLogger", "truncate"]


def truncate(s: Any, limit: int = 4000) -> str:
    """Safely truncate long values for logs (keeps unicode; appends ellipsis)."""
    if not isinstance(s, str):
        try:
            s = json.dumps(s, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            s = str(s)
    return s if len(s) <= limit else (s[:limit] + " …[truncated]")


def get_logger(name: str = "trades-matching", logfile: Optional[str] = None) -> logging.Logger:
    """Create or fetch a configured logger with a console handler and an optional file handler.
    Respects LOGLEVEL and LOGFILE env. Idempotent (won't duplicate handlers).
    """
    level = getattr(logging, os.getenv("LOGLEVEL", "INFO").upper(), logging.INFO)
    logfile = logfile or os.getenv("LOGFILE")
    logger = logging.getLogger(name)
    logger.setLevel(level)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setLevel(level)
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    if logfile and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        fh = logging.FileHandler(logfile, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


class StageLogger:
    """High-signal logging for pipeline stages (one line per start/result/failure)."""

    def __init__(self, logger: logging.Logger, session_id: Optional[str] = None):
        self._log = logger
        self._sid = session_id or "-"

    def with_session(self, session_id: Optional[str]) -> "StageLogger":
        return StageLogger(self._log, session_id)

    def stage_start(self, stage: str, prompt: str, **fields: Any):
        extra = " ".join(f"{k}={v}" for k, v in fields.items())
        self._log.info("STAGE START | session=%s stage=%s %s", self._sid, stage, extra)
        self._log.debug("STAGE PROMPT | session=%s stage=%s\n%s", self._sid, stage, truncate(prompt))

    def stage_response(self, stage: str, raw: str):
        self._log.debug("STAGE RAW | session=%s stage=%s\n%s", self._sid, stage, truncate(raw))

    def stage_result(self, stage: str, **fields: Any):
        extra = " ".join(f"{k}={truncate(v, 200)}" for k, v in fields.items())
        self._log.info("STAGE DONE | session=%s stage=%s %s", self._sid, stage, extra)

    def stage_failed(self, stage: str, err: BaseException):
        self._log.warning("STAGE FAIL | session=%s stage=%s error=%s: %s", self._sid, stage, type(err).__name__, err)
