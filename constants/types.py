from __future__ import annotations
from typing import Literal, List, Union

from typing_extensions import TypedDict

Role = Literal["user", "assistant"]
QualityPriority = Literal["budget", "balanced", "quality"]


class Preferences(TypedDict, total=False):
    budgetRange: str
    timeline: str
    qualityPriority: QualityPriority


class MarketContext(TypedDict, total=False):
    localDemand: str
    weatherImpact: str
    # optional "additional context" block
    marketConditions: str
    seasonalFactors: str
    competitorPricing: str


class OracleOptions(TypedDict, total=False):
    maxOutputTokens: int
    temperature: float


class PromptImage(TypedDict):
    data: str  # base64
    media_type: str


class PromptWithImages(TypedDict):
    text: str
    images: List[PromptImage]


Prompt = Union[str, PromptWithImages]
