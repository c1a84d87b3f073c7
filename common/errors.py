# common/errors.py
from __future__ import annotations

from typing import Optional

__all__ = [
    "MatchingPipelineError",
    "OracleError",
    "OracleUnavailable",
    "OracleTransportError",
    "ContractError",
    "NoJsonFound",
    "MalformedJson",
    "MissingRequiredField",
    "InvalidFieldValue",
    "StageFailed",
    "AnalysisFailed",
    "MatchingFailed",
    "PricingFailed",
    "NarrativeFailed",
    "UnknownWorker",
]


class MatchingPipelineError(Exception):
    """Root of every error raised by the matching pipeline."""


# ---------- oracle transport ----------

class OracleError(MatchingPipelineError):
    pass


class OracleUnavailable(OracleError):
    """No reasoning capability configured (e.g. missing API key). Fatal for the pipeline."""


class OracleTransportError(OracleError):
    """Network failure, timeout, non-2xx or empty completion."""


# ---------- response contract ----------

class ContractError(MatchingPipelineError):
    """The oracle's text did not satisfy a stage contract."""


class NoJsonFound(ContractError):
    pass


class MalformedJson(ContractError):
    pass


class MissingRequiredField(ContractError):
    def __init__(self, field: str):
        super().__init__(f"Missing required field: {field}")
        self.field = field


class InvalidFieldValue(ContractError):
    pass


# ---------- stage failures ----------

class StageFailed(MatchingPipelineError):
    stage = "stage"

    def __init__(self, cause: BaseException, message: Optional[str] = None):
        super().__init__(message or f"{self.stage} failed: {cause}")
        self.cause = cause


class AnalysisFailed(StageFailed):
    stage = "Problem analysis"


class MatchingFailed(StageFailed):
    stage = "Worker matching"


class PricingFailed(StageFailed):
    stage = "Pricing"

    def __init__(self, cause: BaseException, worker_id: Optional[str] = None):
        who = f" for worker {worker_id}" if worker_id else ""
        super().__init__(cause, f"{self.stage} failed{who}: {cause}")
        self.worker_id = worker_id


class NarrativeFailed(StageFailed):
    stage = "Narrative response"


class UnknownWorker(MatchingPipelineError, KeyError):
    def __init__(self, worker_id: str):
        super().__init__(worker_id)
        self.worker_id = worker_id

    def __str__(self) -> str:
        return f"Worker not found: {self.worker_id}"
