from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from common.models import ImageInput, Problem
from constants.types import MarketContext, Preferences


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeProblemIn(ApiModel):
    description: str
    images: List[ImageInput] = Field(default_factory=list)
    location: Optional[str] = None

    @field_validator("description")
    @classmethod
    def _not_blank(cls, v: str):
        if not v.strip():
            raise ValueError("description must not be empty")
        return v.strip()


class FindWorkersIn(ApiModel):
    # either an analysed problem or a description to analyse first
    problem: Optional[Problem] = None
    description: Optional[str] = None
    location: Optional[str] = None
    preferences: Optional[Preferences] = None
    market_context: Optional[MarketContext] = None


class ChatIn(ApiModel):
    session_id: Optional[str] = None
    message: str
    images: List[ImageInput] = Field(default_factory=list)
    location: Optional[str] = None
    preferences: Optional[Preferences] = None
    market_context: Optional[MarketContext] = None


class BookIn(ApiModel):
    # without a chat session the client passes what it was quoted
    session_id: Optional[str] = None
    worker_id: str
    schedule: str
    problem_summary: Optional[str] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)


class AnalyzeImageIn(ApiModel):
    image: str = Field(description="base64 payload")
    media_type: str = "image/jpeg"
    context: str = ""
