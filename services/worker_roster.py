"""
Worker roster (read-only)
-------------------------
Functions:
  - WorkerRoster.list_all()
  - WorkerRoster.find_by_id(worker_id)
  - WorkerRoster.filter_by_trade(trade)
  - WorkerRoster.from_yaml(path) / WorkerRoster.default()

Records are frozen pydantic models; the roster itself is an immutable tuple,
so concurrent sessions may share one instance without locking.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from common.models import WorkerRecord
from constants.roster import DEFAULT_ROSTER

logger = logging.getLogger("trades-matching")


class WorkerRoster:
    def __init__(self, workers: Iterable[WorkerRecord | Dict[str, Any]]):
        records: List[WorkerRecord] = []
        seen: set[str] = set()
        for w in workers:
            rec = w if isinstance(w, WorkerRecord) else WorkerRecord.model_validate(w)
            if rec.id in seen:
                raise ValueError(f"Duplicate worker id in roster: {rec.id}")
            seen.add(rec.id)
            records.append(rec)
        self._workers: Tuple[WorkerRecord, ...] = tuple(records)
        self._by_id: Dict[str, WorkerRecord] = {w.id: w for w in records}

    @classmethod
    def default(cls) -> "WorkerRoster":
        return cls(DEFAULT_ROSTER)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "WorkerRoster":
        p = Path(path)
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or []
        if isinstance(data, dict):
            data = data.get("workers", [])
        logger.info("Loaded %d workers from %s", len(data), p)
        return cls(data)

    @classmethod
    def load(cls, path: Optional[str]) -> "WorkerRoster":
        return cls.from_yaml(path) if path else cls.default()

    def list_all(self) -> List[WorkerRecord]:
        return list(self._workers)

    def find_by_id(self, worker_id: str) -> Optional[WorkerRecord]:
        return self._by_id.get(worker_id)

    def filter_by_trade(self, trade: str) -> List[WorkerRecord]:
        needle = (trade or "").strip().lower()
        if not needle:
            return self.list_all()
        return [w for w in self._workers if needle in w.trade.lower() or w.trade.lower() in needle]

    def __len__(self) -> int:
        return len(self._workers)

    def __iter__(self):
        return iter(self._workers)
