# constants/prompts/narrative_prompts.py
# Free-text prompts: no JSON contract is expected back.
from __future__ import annotations

from common.models import Problem

__all__ = ["build_clarification_prompt", "build_no_match_prompt"]


def build_clarification_prompt(user_message: str) -> str:
    return f"""A customer sent this message about a home repair/maintenance issue: "{user_message.strip()}"

The message is too vague to properly identify the problem and match them with the right tradesperson. Generate a helpful response that:

1. Acknowledges their situation empathetically
2. Asks 2-3 specific clarifying questions to better understand:
   - What exactly is broken/not working
   - Where the problem is located
   - When it started or how urgent it is
   - Any visible symptoms or signs

Make the response conversational and helpful, not robotic. Focus on gathering the most important information to identify the right trade professional.

Respond in plain text format, not JSON."""


def build_no_match_prompt(problem: Problem) -> str:
    trade = problem.primary_trade or "home repair"
    trades = ", ".join(t.trade for t in problem.trades) or "Unknown"
    return f"""A customer has a {trade} problem but no suitable workers were found in their area.

Problem summary: {problem.summary or 'Home repair issue'}
Identified trades needed: {trades}
Urgency: {problem.urgency}

Generate a helpful response that:
1. Acknowledges the situation
2. Explains why no matches were found (could be location, availability, or need more specific details)
3. Suggests next steps (expanding search area, providing more details, or alternative solutions)
4. Maintains a helpful and solution-oriented tone

Respond in plain text format, not JSON."""
