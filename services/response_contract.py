"""
Response contract
-----------------
Turns an oracle's free-text answer into a typed structure, tolerating prose
around the JSON payload.

Functions:
  - extract(text)                      -> raw JSON slice (first "{" .. last "}")
  - parse(raw)                         -> dict
  - validate(obj, required)            -> dict
  - apply_defaults(obj, defaults)      -> new dict
  - read_contract(text, required, defaults)
  - build_model(model_cls, data)       -> pydantic model

Every caller gets either a fully-defaulted object or a ContractError subclass;
never a partially-initialised object with a required field silently absent.
"""
from __future__ import annotations

import copy
import json
import re
from typing import Any, Dict, Iterable, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from common.errors import InvalidFieldValue, MalformedJson, MissingRequiredField, NoJsonFound

__all__ = [
    "StageContract",
    "extract",
    "parse",
    "validate",
    "apply_defaults",
    "read_contract",
    "build_model",
    "ANALYSIS_CONTRACT",
    "MATCHING_CONTRACT",
    "MATCH_ENTRY_DEFAULTS",
    "PRICING_CONTRACT",
    "IMAGE_CONTRACT",
]

M = TypeVar("M", bound=BaseModel)

# greedy: first "{" through the last "}"
_JSON_SPAN_RE = re.compile(r"\{[\s\S]*\}")


def extract(text: str) -> str:
    m = _JSON_SPAN_RE.search(text or "")
    if not m:
        raise NoJsonFound("No JSON object found in oracle response")
    return m.group(0)


def parse(raw: str) -> Dict[str, Any]:
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedJson(f"Malformed JSON in oracle response: {e}") from e
    if not isinstance(obj, dict):
        raise MalformedJson(f"Expected a JSON object, got {type(obj).__name__}")
    return obj


def validate(obj: Mapping[str, Any], required: Iterable[str]) -> Dict[str, Any]:
    for field in required:
        if obj.get(field) is None:
            raise MissingRequiredField(field)
    return dict(obj)


def apply_defaults(obj: Mapping[str, Any], defaults: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(obj)
    for key, value in defaults.items():
        if out.get(key) is None:
            out[key] = copy.deepcopy(value)
    return out


class StageContract:
    """Required fields plus defaults for one stage's oracle response."""

    def __init__(self, name: str, required: Iterable[str], defaults: Mapping[str, Any] | None = None):
        self.name = name
        self.required = tuple(required)
        self.defaults = dict(defaults or {})

    def read(self, text: str) -> Dict[str, Any]:
        return read_contract(text, self.required, self.defaults)

    def __repr__(self) -> str:
        return f"StageContract({self.name!r}, required={self.required!r})"


def read_contract(text: str, required: Iterable[str], defaults: Mapping[str, Any]) -> Dict[str, Any]:
    obj = parse(extract(text))
    obj = validate(obj, required)
    return apply_defaults(obj, defaults)


def build_model(model_cls: Type[M], data: Mapping[str, Any]) -> M:
    try:
        return model_cls.model_validate(dict(data))
    except ValidationError as e:
        raise InvalidFieldValue(f"{model_cls.__name__}: {e.errors()[0].get('msg', e)}") from e


# ---------- stage contracts ----------

ANALYSIS_CONTRACT = StageContract(
    "analysis",
    required=("trades", "urgency"),
    defaults={
        "urgencyReasoning": "No urgency reasoning provided",
        "problemDetails": {},
        "location": {},
        "missingInfo": [],
        "followUpQuestions": [],
        "needsMoreInfo": False,
        "safetyIssues": [],
        "summary": "",
        "confidence": 0.5,
    },
)

MATCHING_CONTRACT = StageContract(
    "matching",
    required=("matches",),
    defaults={"summary": "", "alternatives": ""},
)

MATCH_ENTRY_DEFAULTS: Dict[str, Any] = {
    "matchScore": 0.0,
    "reasoning": "No reasoning provided",
    "strengths": [],
    "concerns": [],
    "estimatedArrival": "Unknown",
    "recommendationLevel": "fair",
}

PRICING_CONTRACT = StageContract(
    "pricing",
    required=("total", "breakdown"),
    defaults={
        "reasoning": "AI-generated pricing",
        "confidence": 0.8,
        "alternatives": {},
    },
)

IMAGE_CONTRACT = StageContract(
    "image",
    required=("analysis",),
    defaults={
        "suggestedTrades": [],
        "urgency": "flexible",
        "complexityLevel": "moderate",
        "safetyIssues": [],
        "followUpQuestions": [],
        "confidence": 0.7,
    },
)
