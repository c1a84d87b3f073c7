# utils/prompt_logger.py
from __future__ import annotations
import sqlite3, datetime, threading
from typing import Optional

ISO = "%Y-%m-%dT%H:%M:%S.%fZ"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS oracle_traces (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  created_at TEXT NOT NULL,
  ended_at   TEXT,
  session_id TEXT,
  stage      TEXT,
  prompt     TEXT,
  image_count INTEGER,
  outcome    TEXT,   -- "ok" | "error"
  response_text TEXT,
  error      TEXT
);
"""

class PromptLogger:
  """
  Simple oracle prompt/response tracer:
    - begin_trace(...) before the oracle call
    - end_trace(...)   once the call returned or failed
  """
  def __init__(self, db_path: str = "traces.sqlite3", echo: bool = False):
    self._db_path = db_path
    self._echo = echo
    self._lock = threading.Lock()
    self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
    self._conn.execute(_SCHEMA)
    self._conn.commit()

  def _now(self) -> str:
    return datetime.datetime.now(datetime.timezone.utc).strftime(ISO)

  def begin_trace(
      self,
      *,
      stage: str,
      prompt: str,
      session_id: str | None = None,
      image_count: int = 0,
  ) -> int:
    created = self._now()
    with self._lock:
      cur = self._conn.cursor()
      cur.execute(
        "INSERT INTO oracle_traces (created_at, session_id, stage, prompt, image_count) VALUES (?, ?, ?, ?, ?)",
        (created, session_id, stage, prompt or "", image_count),
      )
      trace_id = cur.lastrowid
      self._conn.commit()

    if self._echo:
      sep = "=" * 60
      print(f"\n{sep}\n[ORACLE PROMPT | {stage}] (trace_id={trace_id}, images={image_count})")
      print(prompt)
      print(sep)
    return trace_id

  def end_trace(
      self,
      trace_id: int | None,
      *,
      response_text: Optional[str] = None,
      error: Optional[str] = None,
  ) -> None:
    if not trace_id:
      return
    ended = self._now()
    outcome = "error" if error else "ok"
    with self._lock:
      self._conn.execute(
        "UPDATE oracle_traces SET ended_at=?, outcome=?, response_text=?, error=? WHERE id=?",
        (ended, outcome, response_text or "", error, trace_id),
      )
      self._conn.commit()

    if self._echo:
      print("\n--- ORACLE RESPONSE ---")
      print(f"[error] {error}" if error else (response_text or ""))
      print("=" * 60)

  def recent(self, limit: int = 20) -> list[dict]:
    with self._lock:
      rows = self._conn.execute(
        "SELECT id, session_id, stage, outcome, response_text, error FROM oracle_traces ORDER BY id DESC LIMIT ?",
        (limit,),
      ).fetchall()
    keys = ("id", "session_id", "stage", "outcome", "response_text", "error")
    return [dict(zip(keys, r)) for r in rows]

  def close(self) -> None:
    with self._lock:
      self._conn.close()
