# constants/prompts/analysis_prompts.py
from __future__ import annotations
from datetime import datetime
from typing import Optional, Sequence

from business_profile import (
    FOLLOW_UP_CONFIDENCE,
    PLATFORM_PROFILE,
    trade_catalogue_text,
    urgency_indicators_text,
)
from common.models import ImageInput

__all__ = [
    "build_analysis_prompt",
    "build_image_analysis_prompt",
    "build_refinement_text",
]

ANALYSIS_RESPONSE_FORMAT = """{
  "trades": [
    {
      "trade": "[trade name]",
      "confidence": [0.0-1.0],
      "specialties": ["[specific skills needed]"],
      "reasoning": "[why this trade is needed]"
    }
  ],
  "urgency": "[emergency/soon/flexible]",
  "urgencyReasoning": "[why this urgency level]",
  "problemDetails": {
    "category": "[electrical/plumbing/mechanical/etc]",
    "complexity": "[simple/moderate/complex]",
    "location": "[where the problem is]",
    "symptoms": ["[list of symptoms]"],
    "possibleCauses": ["[likely causes]"],
    "materialEstimate": "[materials that might be needed]",
    "timeEstimate": "[estimated duration]"
  },
  "location": {
    "extracted": "[any location info from description]",
    "needed": [true/false if more location info needed]
  },
  "missingInfo": ["[what additional info would help]"],
  "followUpQuestions": ["[specific questions ONLY for safety issues or very unclear problems]"],
  "needsMoreInfo": [true/false],
  "safetyIssues": ["[any immediate safety concerns]"],
  "summary": "[brief summary for customer]",
  "confidence": [0.0-1.0]
}"""

IMAGE_RESPONSE_FORMAT = """{
  "analysis": "[detailed description of what you see]",
  "suggestedTrades": [
    {
      "trade": "[trade name]",
      "confidence": [0.0-1.0],
      "reasoning": "[why this trade is needed]"
    }
  ],
  "urgency": "[emergency/soon/flexible]",
  "urgencyReasoning": "[why this urgency level]",
  "materialEstimate": "[materials that might be needed]",
  "complexityLevel": "[simple/moderate/complex]",
  "timeEstimate": "[estimated hours/days]",
  "safetyIssues": ["[list any safety concerns]"],
  "followUpQuestions": ["[questions to ask customer for more details]"],
  "confidence": [0.0-1.0]
}"""


# ---------- helpers ----------

def _quote(text: str) -> str:
    return '"' + (text or "").replace('"', '\\"').strip() + '"'


def _images_line(images: Sequence[ImageInput]) -> list[str]:
    if not images:
        return ["- Images Provided: None"]
    summaries = [img.analysis or "Image uploaded" for img in images]
    return [
        f"- Images Provided: {len(images)} image(s)",
        f"- Image Analysis: {', '.join(summaries)}",
    ]


# ---------- ANALYSIS PROMPT ----------

def build_analysis_prompt(
    description: str,
    images: Sequence[ImageInput] = (),
    location: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    brand: Optional[str] = None,
) -> str:
    now = now or datetime.now()
    brand = brand or PLATFORM_PROFILE["brand"]
    threshold = f"{FOLLOW_UP_CONFIDENCE:.1f}"
    levels = PLATFORM_PROFILE["urgency_levels"]

    lines = []
    lines.append(
        f"You are an expert trades analysis AI for {brand}, a platform connecting customers with skilled "
        "tradespeople. Your job is to analyze customer problems and determine the best trade professionals needed."
    )
    lines.append("")
    lines.append("CONTEXT:")
    lines.append(f"- Current Date/Time: {now:%Y-%m-%d %H:%M} ({now:%A})")
    lines.append("- Use the date and time of day for seasonal and after-hours context.")
    lines.append("")
    lines.append("CUSTOMER REQUEST:")
    lines.append(f"- Problem Description: {_quote(description)}")
    lines.append(f"- User Location: {location or 'Not specified'}")
    lines.extend(_images_line(images))
    lines.append("")
    lines.append("ANALYSIS REQUIREMENTS:")
    lines.append("1. TRADE IDENTIFICATION: primary trade, secondary trades for multi-trade jobs, a confidence (0.0-1.0) and specialties for each.")
    lines.append("2. URGENCY ASSESSMENT:")
    for level, desc in levels.items():
        lines.append(f"   - {level}: {desc}")
    lines.append("3. PROBLEM DETAILS: components involved, damage assessment, likely materials, complexity (simple, moderate, complex).")
    lines.append("4. LOCATION: extract any location info from the description; say whether more is needed.")
    lines.append("5. CONFIDENCE: overall confidence in the problem identification (0.0-1.0).")
    lines.append("")
    lines.append("TRADE CATEGORIES:")
    lines.append(trade_catalogue_text())
    lines.append("")
    lines.append("URGENCY INDICATORS:")
    lines.append(urgency_indicators_text())
    lines.append("")
    lines.append("FOLLOW-UP RULES:")
    lines.append(f"- Ask follow-up questions ONLY for safety issues (gas leaks, sparking, flooding) or when confidence < {threshold}.")
    lines.append(f"- If confidence >= {threshold} and there are no safety issues, set needsMoreInfo to false and leave followUpQuestions empty.")
    lines.append("- If you generate followUpQuestions, you MUST set needsMoreInfo to true.")
    lines.append("- Do NOT ask about location or scheduling; those are handled elsewhere.")
    lines.append("")
    lines.append("RESPONSE FORMAT:")
    lines.append("Provide your analysis in this exact JSON format:")
    lines.append("")
    lines.append(ANALYSIS_RESPONSE_FORMAT)
    lines.append("")
    lines.append("Return the JSON object only. Be thorough but practical.")
    return "\n".join(lines)


def build_image_analysis_prompt(problem_context: str = "") -> str:
    lines = []
    lines.append("Analyze this image in the context of a trades/repair problem.")
    lines.append("")
    lines.append(f"Problem Context: {_quote(problem_context)}")
    lines.append("")
    lines.append("Provide a detailed analysis in JSON format:")
    lines.append(IMAGE_RESPONSE_FORMAT)
    return "\n".join(lines)


def build_refinement_text(original: str, questions: Sequence[str], answer: str) -> str:
    """Fold a follow-up answer into the prior request so the next analysis sees both."""
    lines = [original.strip()]
    if questions:
        lines.append("")
        lines.append("Follow-up questions we asked:")
        lines.extend(f"- {q}" for q in questions)
    lines.append("")
    lines.append(f"Customer answer: {answer.strip()}")
    return "\n".join(lines)
