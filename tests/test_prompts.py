from datetime import datetime

import pytest

from business_profile import FOLLOW_UP_CONFIDENCE, PLATFORM_PROFILE
from common.models import ImageInput, Problem
from constants.prompts.analysis_prompts import build_analysis_prompt, build_refinement_text
from constants.prompts.matching_prompts import build_matching_prompt
from constants.prompts.pricing_prompts import current_season, has_additional_context, time_of_day


def test_analysis_prompt_carries_catalogue_and_follow_up_threshold():
    prompt = build_analysis_prompt(
        'Toilet "keeps running"',
        [ImageInput(analysis="photo shows cracked flapper")],
        None,
        now=datetime(2025, 3, 2, 8, 0),
        brand="FixIt",
    )
    assert "FixIt" in prompt
    assert "User Location: Not specified" in prompt
    assert "photo shows cracked flapper" in prompt
    assert f"confidence < {FOLLOW_UP_CONFIDENCE:.1f}" in prompt
    for trade in PLATFORM_PROFILE["trades"][:3]:
        assert trade["label"] in prompt
    assert '"needsMoreInfo"' in prompt


def test_refinement_text_keeps_original_questions_and_answer():
    text = build_refinement_text("Heater broken", ["Gas or electric?"], "Gas, pilot is out")
    assert text.splitlines()[0] == "Heater broken"
    assert "- Gas or electric?" in text
    assert text.endswith("Customer answer: Gas, pilot is out")


def test_matching_prompt_lists_each_worker_once_and_forbids_invented_ids(roster, leak_analysis):
    problem = Problem.model_validate(leak_analysis)
    prompt = build_matching_prompt(problem, roster.list_all(), None, {"budgetRange": "$100-200"})
    for w in roster:
        assert prompt.count(f"Worker ID: {w.id}\n") == 1
    assert "Budget Range: $100-200" in prompt
    assert "Quality Priority: Balanced" in prompt
    assert "Use ONLY Worker IDs listed above" in prompt
    assert '"problemDetails"' in prompt


@pytest.mark.parametrize("month,season", [(1, "Winter"), (4, "Spring"), (8, "Summer"), (10, "Fall"), (12, "Winter")])
def test_current_season(month, season):
    assert current_season(datetime(2025, month, 10)) == season


@pytest.mark.parametrize("hour,label", [(7, "Morning"), (13, "Afternoon"), (19, "Evening"), (23, "Night"), (3, "Night")])
def test_time_of_day(hour, label):
    assert time_of_day(datetime(2025, 5, 5, hour)) == label


def test_additional_context_only_for_extra_keys():
    assert not has_additional_context(None)
    assert not has_additional_context({"localDemand": "High", "weatherImpact": "Storm"})
    assert has_additional_context({"seasonalFactors": "Holiday week"})
