## common/models.py

"""
Domain records shared by every stage.

The oracle speaks camelCase JSON; attributes here are snake_case with camelCase
aliases, so `Problem.model_validate(oracle_dict)` and
`problem.model_dump(by_alias=True)` both use the wire shape.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Urgency = Literal["emergency", "soon", "flexible"]
Complexity = Literal["simple", "moderate", "complex"]
RecommendationLevel = Literal["excellent", "good", "fair"]


# ---------- coercion helpers ----------

def _clamp01(v: Any) -> float:
    return max(0.0, min(1.0, float(v)))


def _as_list(v: Any) -> Any:
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v.strip() else []
    return v


def _as_text(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return ", ".join(str(x) for x in v)
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


def _lower(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


def to_number(v: Any) -> Any:
    """Accept 175, 175.4, "$1,175", "25%"; anything else is left for pydantic to reject."""
    if isinstance(v, str):
        cleaned = v.replace("$", "").replace(",", "").replace("%", "").strip()
        try:
            return float(cleaned)
        except ValueError:
            return v
    return v


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # JSON nulls fall back to field defaults
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# ---------- problem ----------

class TradeAssessment(WireModel):
    trade: str
    confidence: float = 0.5
    specialties: List[str] = Field(default_factory=list)
    reasoning: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def _conf(cls, v):
        return _clamp01(v)

    @field_validator("specialties", mode="before")
    @classmethod
    def _lists(cls, v):
        return _as_list(v)


class ProblemDetails(WireModel):
    category: str = "general"
    complexity: Complexity = "moderate"
    location: Optional[str] = None
    symptoms: List[str] = Field(default_factory=list)
    possible_causes: List[str] = Field(default_factory=list)
    material_estimate: Optional[str] = None
    time_estimate: Optional[str] = None

    @field_validator("complexity", mode="before")
    @classmethod
    def _norm_complexity(cls, v):
        return _lower(v)

    @field_validator("symptoms", "possible_causes", mode="before")
    @classmethod
    def _lists(cls, v):
        return _as_list(v)

    @field_validator("location", "material_estimate", "time_estimate", mode="before")
    @classmethod
    def _texts(cls, v):
        return _as_text(v)


class LocationInfo(WireModel):
    extracted: Optional[str] = None
    needed: bool = False


class Problem(WireModel):
    raw_text: str = ""
    trades: List[TradeAssessment] = Field(default_factory=list)
    urgency: Urgency
    urgency_reasoning: str = ""
    details: ProblemDetails = Field(default_factory=ProblemDetails, alias="problemDetails")
    location: LocationInfo = Field(default_factory=LocationInfo)
    missing_info: List[str] = Field(default_factory=list)
    follow_up_questions: List[str] = Field(default_factory=list)
    needs_more_info: bool = False
    safety_issues: List[str] = Field(default_factory=list)
    summary: str = ""
    confidence: float = 0.5
    source: str = "oracle-analysis"

    @model_validator(mode="before")
    @classmethod
    def _follow_ups_imply_more_info(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        for q_key, flag_key in (("followUpQuestions", "needsMoreInfo"), ("follow_up_questions", "needs_more_info")):
            if _as_list(data.get(q_key)):
                data = {k: v for k, v in data.items() if k not in ("needsMoreInfo", "needs_more_info")}
                data[flag_key] = True
                break
        return data

    @field_validator("urgency", mode="before")
    @classmethod
    def _norm_urgency(cls, v):
        return _lower(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _conf(cls, v):
        return _clamp01(v)

    @field_validator("missing_info", "follow_up_questions", "safety_issues", mode="before")
    @classmethod
    def _lists(cls, v):
        return _as_list(v)

    @field_validator("location", mode="before")
    @classmethod
    def _location(cls, v):
        if isinstance(v, str):
            return {"extracted": v}
        return v

    @property
    def primary_trade(self) -> Optional[str]:
        return self.trades[0].trade if self.trades else None


# ---------- workers & matches ----------

class WorkerRecord(WireModel):
    id: str
    name: str
    trade: str
    specialties: List[str] = Field(default_factory=list)
    rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    distance: float = Field(default=0.0, ge=0)
    hourly_rate: float = Field(gt=0)
    availability: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    experience: int = Field(default=0, ge=0)
    completed_jobs: int = Field(default=0, ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("specialties", "availability", "certifications", mode="before")
    @classmethod
    def _lists(cls, v):
        return _as_list(v)


class MatchResult(WireModel):
    worker_id: str
    match_score: float = 0.0
    reasoning: str = ""
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    estimated_arrival: str = "Unknown"
    recommendation_level: RecommendationLevel = "fair"

    @field_validator("worker_id", "estimated_arrival", mode="before")
    @classmethod
    def _texts(cls, v):
        return _as_text(v)

    @field_validator("match_score", mode="before")
    @classmethod
    def _score(cls, v):
        return _clamp01(v)

    @field_validator("recommendation_level", mode="before")
    @classmethod
    def _level(cls, v):
        return _lower(v)

    @field_validator("strengths", "concerns", mode="before")
    @classmethod
    def _lists(cls, v):
        return _as_list(v)


class WorkerMatch(WireModel):
    worker: WorkerRecord
    match: MatchResult

    @property
    def worker_id(self) -> str:
        return self.worker.id


class MatchingResult(WireModel):
    matches: List[WorkerMatch] = Field(default_factory=list)
    summary: str = ""
    alternatives: str = ""
    source: str = "oracle-matching"


# ---------- pricing ----------

class PriceAdjustment(WireModel):
    factor: str = ""
    amount: float = 0.0
    percentage: float = 0.0
    rationale: str = ""

    @field_validator("amount", "percentage", mode="before")
    @classmethod
    def _numbers(cls, v):
        return to_number(v)


class PriceBreakdown(WireModel):
    base_rate: Optional[float] = None
    hours: Optional[float] = None
    subtotal: Optional[float] = None
    adjustments: List[PriceAdjustment] = Field(default_factory=list)
    travel_fee: float = 0.0
    final_total: Optional[float] = None

    @field_validator("base_rate", "hours", "subtotal", "travel_fee", "final_total", mode="before")
    @classmethod
    def _numbers(cls, v):
        return to_number(v)


class PriceAlternatives(WireModel):
    budget: Optional[float] = None
    premium: Optional[float] = None

    @field_validator("budget", "premium", mode="before")
    @classmethod
    def _numbers(cls, v):
        return to_number(v)


class Quote(WireModel):
    total: int = Field(ge=0)
    reasoning: str = ""
    breakdown: PriceBreakdown
    confidence: float = 0.8
    alternatives: PriceAlternatives = Field(default_factory=PriceAlternatives)
    source: str = "oracle-pricing"

    @field_validator("total", mode="before")
    @classmethod
    def _round_total(cls, v):
        v = to_number(v)
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return v
        # round half up to whole dollars
        return int(math.floor(float(v) + 0.5))

    @field_validator("confidence", mode="before")
    @classmethod
    def _conf(cls, v):
        return _clamp01(v)


class QuoteOutcome(WireModel):
    worker_id: str
    quote: Optional[Quote] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.quote is None) == (self.error is None):
            raise ValueError("QuoteOutcome needs exactly one of quote or error")
        return self

    @property
    def ok(self) -> bool:
        return self.quote is not None


class PricedMatch(WireModel):
    worker: WorkerRecord
    match: MatchResult
    outcome: QuoteOutcome


# ---------- images ----------

class ImageInput(WireModel):
    data: Optional[str] = None  # base64 payload
    media_type: str = "image/jpeg"
    analysis: Optional[str] = None


class ImageAnalysis(WireModel):
    analysis: str
    suggested_trades: List[TradeAssessment] = Field(default_factory=list)
    urgency: Urgency = "flexible"
    urgency_reasoning: str = ""
    material_estimate: Optional[str] = None
    complexity_level: Complexity = "moderate"
    time_estimate: Optional[str] = None
    safety_issues: List[str] = Field(default_factory=list)
    follow_up_questions: List[str] = Field(default_factory=list)
    confidence: float = 0.7
    source: str = "oracle-vision"

    @field_validator("urgency", "complexity_level", mode="before")
    @classmethod
    def _lower(cls, v):
        return _lower(v)

    @field_validator("material_estimate", "time_estimate", mode="before")
    @classmethod
    def _texts(cls, v):
        return _as_text(v)

    @field_validator("safety_issues", "follow_up_questions", mode="before")
    @classmethod
    def _lists(cls, v):
        return _as_list(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _conf(cls, v):
        return _clamp01(v)


# ---------- bookings ----------

class BookingRecord(WireModel):
    id: str
    worker_id: str
    schedule: str
    problem_summary: str = ""
    estimated_cost: Optional[float] = None
    status: str = "confirmed"
    created_at: datetime
