# constants/prompts/matching_prompts.py
from __future__ import annotations
import json
from typing import Optional, Sequence

from business_profile import PLATFORM_PROFILE
from common.models import Problem, WorkerRecord
from constants.types import Preferences

__all__ = ["build_matching_prompt", "format_worker_block"]

MATCHING_RESPONSE_FORMAT = """{
  "matches": [
    {
      "workerId": "[worker ID]",
      "matchScore": [0.0-1.0],
      "reasoning": "[why this worker is a good match]",
      "strengths": ["key strengths for this job"],
      "concerns": ["any potential concerns"],
      "estimatedArrival": "[time estimate]",
      "recommendationLevel": "[excellent/good/fair]"
    }
  ],
  "summary": "[overall matching summary]",
  "alternatives": "[suggestions if no perfect matches]"
}"""

MATCHING_CRITERIA = [
    "Trade Match: Does worker's trade match the problem?",
    "Specialty Match: Do worker's specialties align with specific needs?",
    "Experience Level: Is experience appropriate for complexity?",
    "Availability: Can worker meet timeline requirements?",
    "Location: Is worker within reasonable distance?",
    "Certifications: Does worker have required licenses/certs?",
    "Rating/Reviews: Quality and reliability indicators",
    "Similar Work: Has worker done similar jobs before?",
]


def _join(items: Sequence[str]) -> str:
    return ", ".join(items) if items else "None"


def format_worker_block(w: WorkerRecord) -> str:
    return "\n".join([
        f"Worker ID: {w.id}",
        f"Name: {w.name}",
        f"Trade: {w.trade}",
        f"Specialties: {_join(w.specialties)}",
        f"Rating: {w.rating}/5.0 ({w.review_count} reviews)",
        f"Experience: {w.experience} years",
        f"Distance: {w.distance} miles",
        f"Hourly Rate: ${w.hourly_rate:g}",
        f"Availability: {_join(w.availability)}",
        f"Certifications: {_join(w.certifications)}",
        f"Completed Jobs: {w.completed_jobs}",
    ])


def build_matching_prompt(
    problem: Problem,
    roster: Sequence[WorkerRecord],
    location: Optional[str] = None,
    preferences: Optional[Preferences] = None,
    *,
    brand: Optional[str] = None,
) -> str:
    prefs = preferences or {}
    brand = brand or PLATFORM_PROFILE["brand"]
    problem_json = json.dumps(problem.model_dump(by_alias=True, mode="json"), ensure_ascii=False, indent=2)

    lines = []
    lines.append(f"You are an expert worker matching AI for {brand}. Your job is to find the best tradespeople for customer needs.")
    lines.append("")
    lines.append("CUSTOMER PROBLEM:")
    lines.append(problem_json)
    lines.append("")
    lines.append(f"CUSTOMER LOCATION: {location or 'Not specified'}")
    lines.append("")
    lines.append("AVAILABLE WORKERS:")
    lines.append("\n---\n".join(format_worker_block(w) for w in roster) or "(none)")
    lines.append("")
    lines.append("CUSTOMER PREFERENCES:")
    lines.append(f"- Budget Range: {prefs.get('budgetRange') or 'Not specified'}")
    lines.append(f"- Timeline: {prefs.get('timeline') or 'Not specified'}")
    lines.append(f"- Quality Priority: {prefs.get('qualityPriority') or 'Balanced'}")
    lines.append("")
    lines.append("MATCHING CRITERIA:")
    lines.extend(f"{i}. {c}" for i, c in enumerate(MATCHING_CRITERIA, start=1))
    lines.append("")
    lines.append("RULES:")
    lines.append("- Use ONLY Worker IDs listed above. Never invent workers or IDs.")
    lines.append("- Return the top 3-4 best matches, best first. Return an empty list if nobody fits.")
    lines.append("")
    lines.append("RESPONSE FORMAT:")
    lines.append(MATCHING_RESPONSE_FORMAT)
    lines.append("")
    lines.append("Rank workers by overall suitability, considering all factors. Provide honest assessments.")
    return "\n".join(lines)
