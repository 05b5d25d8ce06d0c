# tests/test_explanation_utils.py

import pytest
from nutri_app.data_model import UserHealthProfile
from nutri_app.explanation_utils import (
    append_recommendations_to_reply,
    build_recommendation_text,
    build_schedule_text,
    build_structured_explanation,
)
from nutri_app.recommendation_selector import select_recommendations
from nutri_app.supplement_catalog import load_catalog
from nutri_app.text_extractor import extract_recommendations


@pytest.fixture(scope="module")
def catalog():
    return load_catalog()


@pytest.fixture
def recommendations(catalog):
    user = UserHealthProfile(gender="male", height=175, weight=80, birth_date="1980-03-01")
    return select_recommendations(user, [], catalog)


def test_schedule_text(recommendations):
    omega = next(r for r in recommendations if r.supplement_id == "omega3")
    assert build_schedule_text(omega.schedule) == "아침 1알 (식후), 저녁 1알 (식후)"

    vitamin_c = next(r for r in recommendations if r.supplement_id == "vitaminC")
    assert build_schedule_text(vitamin_c.schedule) == "아침 2알 (식전)"


def test_recommendation_text_first_line(recommendations, catalog):
    omega = next(r for r in recommendations if r.supplement_id == "omega3")
    text = build_recommendation_text(omega, catalog.get("omega3"))
    lines = text.split("\n")
    assert lines[0] == "[추천] 오메가3 : 2알/일 / 아침 1알 (식후), 저녁 1알 (식후)"
    assert lines[1] == omega.reason
    assert len(lines) == 3
    assert lines[2].startswith("심혈관 건강 개선")


def test_reply_without_marker_gets_block(recommendations, catalog):
    reply = append_recommendations_to_reply("규칙적인 운동을 권해드립니다.", recommendations, catalog)
    assert reply.startswith("규칙적인 운동을 권해드립니다.\n\n영양제 추천:\n")
    assert reply.count("[추천]") == len(recommendations)


def test_reply_with_marker_unchanged(recommendations, catalog):
    reply = "[추천] 루테인 : 1알/일"
    assert append_recommendations_to_reply(reply, recommendations, catalog) == reply


def test_no_recommendations_unchanged(catalog):
    assert append_recommendations_to_reply("안녕하세요", [], catalog) == "안녕하세요"


def test_appended_block_reads_back(recommendations, catalog):
    reply = append_recommendations_to_reply("답변입니다.", recommendations, catalog)
    parsed = {p.name: p.dosage for p in extract_recommendations(reply, catalog)}
    assert parsed == {rec.name: rec.daily_dosage for rec in recommendations}


def test_structured_explanation(recommendations):
    omega = next(r for r in recommendations if r.supplement_id == "omega3")
    explanation = build_structured_explanation(omega)
    assert explanation["name"] == "오메가3"
    assert explanation["daily_dosage"] == "하루 2알"
    assert [s["meal"] for s in explanation["schedule"]] == ["식후", "식후"]
    assert explanation["warnings"] == []
