import pytest

from common.errors import ContractError, InvalidFieldValue, MalformedJson, MissingRequiredField, NoJsonFound
from common.models import Quote
from services.response_contract import (
    ANALYSIS_CONTRACT,
    PRICING_CONTRACT,
    apply_defaults,
    build_model,
    extract,
    parse,
    read_contract,
    validate,
)


def test_extract_tolerates_prose_around_payload():
    text = 'Sure! Here you go:\n{"trades": [], "urgency": "soon"}\nHope that helps.'
    assert extract(text) == '{"trades": [], "urgency": "soon"}'


def test_extract_spans_first_open_to_last_close_brace():
    text = 'a {"x": {"y": 1}} b'
    assert extract(text) == '{"x": {"y": 1}}'


def test_extract_without_braces_raises_no_json_found():
    with pytest.raises(NoJsonFound):
        extract("I could not analyze that, sorry.")


def test_greedy_span_over_two_objects_is_malformed():
    # two objects in one answer -> slice is not valid JSON
    text = 'first {"a": 1} then {"b": 2}'
    with pytest.raises(MalformedJson):
        parse(extract(text))


def test_parse_rejects_non_object_json():
    with pytest.raises(MalformedJson):
        parse("[1, 2, 3]")


def test_validate_missing_and_null_required_fields():
    with pytest.raises(MissingRequiredField) as ei:
        validate({"trades": []}, ("trades", "urgency"))
    assert ei.value.field == "urgency"

    with pytest.raises(MissingRequiredField):
        validate({"trades": [], "urgency": None}, ("trades", "urgency"))


def test_validate_accepts_empty_but_present_values():
    obj = validate({"trades": [], "urgency": "flexible"}, ("trades", "urgency"))
    assert obj["trades"] == []


def test_apply_defaults_fills_missing_and_null_without_touching_input():
    src = {"total": 100, "confidence": None}
    out = apply_defaults(src, {"confidence": 0.8, "alternatives": {}})
    assert out == {"total": 100, "confidence": 0.8, "alternatives": {}}
    assert src == {"total": 100, "confidence": None}


def test_apply_defaults_is_idempotent():
    defaults = {"summary": "", "followUpQuestions": [], "confidence": 0.5}
    once = apply_defaults({"summary": "x"}, defaults)
    twice = apply_defaults(once, defaults)
    assert once == twice


def test_apply_defaults_does_not_share_mutable_defaults():
    defaults = {"followUpQuestions": []}
    a = apply_defaults({}, defaults)
    a["followUpQuestions"].append("q")
    b = apply_defaults({}, defaults)
    assert b["followUpQuestions"] == []


def test_analysis_contract_defaults_confidence_and_keeps_provided_fields():
    data = ANALYSIS_CONTRACT.read('{"trades": [{"trade": "Plumber"}], "urgency": "soon"}')
    assert data["confidence"] == 0.5
    assert data["followUpQuestions"] == []
    assert data["trades"] == [{"trade": "Plumber"}]


def test_pricing_contract_requires_breakdown():
    with pytest.raises(MissingRequiredField) as ei:
        PRICING_CONTRACT.read('{"total": 150}')
    assert ei.value.field == "breakdown"


def test_read_contract_errors_are_contract_errors():
    for text in ("no json", '{"broken": ', '{"total": 1}'):
        with pytest.raises(ContractError):
            read_contract(text, ("total", "breakdown"), {})


def test_build_model_turns_validation_errors_into_invalid_field_value():
    with pytest.raises(InvalidFieldValue):
        build_model(Quote, {"total": "a lot", "breakdown": {}})
