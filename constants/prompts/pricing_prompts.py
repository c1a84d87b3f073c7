# constants/prompts/pricing_prompts.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from business_profile import PLATFORM_PROFILE, pricing_guidelines_text
from common.models import Problem, WorkerRecord
from constants.types import MarketContext

__all__ = [
    "build_pricing_prompt",
    "current_season",
    "time_of_day",
    "has_additional_context",
]

PRICING_RESPONSE_FORMAT = """{
  "total": [final price in dollars, integer],
  "reasoning": "[2-3 sentences explaining your pricing logic]",
  "breakdown": {
    "baseRate": [worker hourly rate],
    "hours": [estimated hours],
    "subtotal": [base rate x hours],
    "adjustments": [
      {
        "factor": "[adjustment reason]",
        "amount": [dollar amount, can be negative],
        "percentage": [percentage change],
        "rationale": "[why this adjustment]"
      }
    ],
    "travelFee": [travel fee if applicable],
    "finalTotal": [total after all adjustments]
  },
  "confidence": [0.0-1.0, how confident you are in this pricing],
  "alternatives": {
    "budget": [lower price option],
    "premium": [higher price option]
  }
}"""

PRICING_CONSIDERATIONS = [
    "**Base Rate**: Worker's established hourly rate",
    "**Experience Premium**: More experienced workers command higher rates",
    "**Rating Premium**: Higher-rated workers deserve premium pricing",
    "**Urgency Surcharge**: Emergency/urgent jobs cost more",
    "**Distance Factor**: Travel time and costs for distant jobs",
    "**Market Demand**: High demand periods increase pricing",
    "**Complexity**: Job difficulty affects pricing",
    "**Seasonal Factors**: Weather, holidays, peak seasons",
    "**Competition**: Other available workers in the area",
    "**Value Delivered**: Specialized skills, certifications",
]

_ADDITIONAL_KEYS = (
    ("marketConditions", "Market Conditions"),
    ("seasonalFactors", "Seasonal Factors"),
    ("competitorPricing", "Competitor Pricing"),
)


def current_season(now: datetime) -> str:
    m = now.month
    if 3 <= m <= 5:
        return "Spring"
    if 6 <= m <= 8:
        return "Summer"
    if 9 <= m <= 11:
        return "Fall"
    return "Winter"


def time_of_day(now: datetime) -> str:
    h = now.hour
    if 6 <= h < 12:
        return "Morning"
    if 12 <= h < 17:
        return "Afternoon"
    if 17 <= h < 21:
        return "Evening"
    return "Night"


def has_additional_context(market: Optional[MarketContext]) -> bool:
    return any((market or {}).get(k) for k, _ in _ADDITIONAL_KEYS)


def _trades_line(problem: Problem) -> str:
    if not problem.trades:
        return "Unknown"
    return ", ".join(f"{t.trade} ({round(t.confidence * 100)}% confidence)" for t in problem.trades)


def build_pricing_prompt(
    worker: WorkerRecord,
    problem: Problem,
    estimated_hours: float,
    market: Optional[MarketContext] = None,
    *,
    now: Optional[datetime] = None,
    brand: Optional[str] = None,
) -> str:
    now = now or datetime.now()
    market = market or {}
    brand = brand or PLATFORM_PROFILE["brand"]
    description = problem.summary or problem.raw_text

    lines = []
    lines.append(
        f"You are an expert pricing analyst for {brand}, a trades matching platform. "
        "Your job is to determine fair, competitive pricing for skilled trade services."
    )
    lines.append("")
    lines.append("CONTEXT:")
    lines.append(f"- Current Date/Time: {now:%Y-%m-%d %H:%M}")
    lines.append("- Goal: Fair pricing that benefits both customers and workers")
    lines.append("")
    lines.append("WORKER PROFILE:")
    lines.append(f"- Name: {worker.name}")
    lines.append(f"- Trade: {worker.trade}")
    lines.append(f"- Specialties: {', '.join(worker.specialties) or 'None'}")
    lines.append(f"- Experience: {worker.experience} years")
    lines.append(f"- Rating: {worker.rating}/5.0 ({worker.review_count} reviews)")
    lines.append(f"- Base Hourly Rate: ${worker.hourly_rate:g}/hour")
    lines.append(f"- Distance from Customer: {worker.distance} miles")
    lines.append(f"- Certifications: {', '.join(worker.certifications) or 'None'}")
    lines.append(f"- Completed Jobs: {worker.completed_jobs}")
    lines.append(f"- Availability: {', '.join(worker.availability) or 'Unknown'}")
    lines.append("")
    lines.append("CUSTOMER REQUEST:")
    lines.append(f'- Problem Description: "{description}"')
    lines.append(f"- Urgency Level: {problem.urgency}")
    lines.append(f"- Complexity: {problem.details.complexity}")
    lines.append(f"- Identified Trade Needs: {_trades_line(problem)}")
    lines.append(f"- Estimated Duration: {estimated_hours:g} hours")
    lines.append("")
    lines.append("MARKET CONDITIONS:")
    lines.append(f"- Season: {current_season(now)}")
    lines.append(f"- Day of Week: {now:%A}")
    lines.append(f"- Time of Day: {time_of_day(now)}")
    lines.append(f"- Local Demand: {market.get('localDemand') or 'Normal'}")
    lines.append(f"- Weather Impact: {market.get('weatherImpact') or 'None'}")
    lines.append("")
    lines.append("PRICING CONSIDERATIONS:")
    lines.extend(f"{i}. {c}" for i, c in enumerate(PRICING_CONSIDERATIONS, start=1))
    lines.append("")
    lines.append("PRICING GUIDELINES:")
    lines.append(pricing_guidelines_text())
    lines.append("")
    lines.append("RESPONSE FORMAT:")
    lines.append("Provide your pricing analysis in this exact JSON format:")
    lines.append("")
    lines.append(PRICING_RESPONSE_FORMAT)
    lines.append("")
    lines.append(
        "Think through the pricing step by step, considering all factors. Be fair to both customer and worker. "
        "Provide transparent reasoning for your decisions."
    )

    if has_additional_context(market):
        lines.append("")
        lines.append("ADDITIONAL CONTEXT:")
        for key, label in _ADDITIONAL_KEYS:
            if market.get(key):
                lines.append(f"- {label}: {market[key]}")
        lines.append("")
        lines.append("Consider these additional factors in your pricing decision.")
    return "\n".join(lines)
