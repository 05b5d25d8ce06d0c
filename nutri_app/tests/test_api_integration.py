# tests/test_api_integration.py

import json
from datetime import date
from unittest.mock import patch
from fastapi.testclient import TestClient
from nutri_app import supplement_catalog
from nutri_app.api import app
from nutri_app.goal_selector import NONE_KEYWORD, filtered_categories
from nutri_app.supplement_engine import PlanningError

client = TestClient(app)


def male_profile():
    return {
        "gender": "male",
        "height": 175,
        "weight": 80,
        "birthDate": f"{date.today().year - 45}-05-02",
    }


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


def test_catalog_summary():
    response = client.get("/catalog")
    assert response.status_code == 200
    ids = [entry["id"] for entry in response.json()]
    assert "omega3" in ids
    assert len(ids) == len(set(ids))


def test_recommend_happy_path():
    response = client.post("/recommend", json={"profile": male_profile()})
    assert response.status_code == 200
    data = response.json()
    assert len(data["recommendations"]) == 6
    omega = next(rec for rec in data["recommendations"] if rec["supplement_id"] == "omega3")
    assert omega["daily_dosage"] == 2
    assert [s["time"] for s in omega["schedule"]] == ["아침", "저녁"]
    assert set(data["plan_quotes"]) == {"monthly", "annual", "once"}


def test_recommend_with_subscriptions_and_reply():
    payload = {
        "profile": male_profile(),
        "active_subscriptions": ["오메가3"],
        "reply_text": "머리 아파요.\n[추천] 루테인 : 1알/일",
    }
    response = client.post("/recommend", json=payload)
    assert response.status_code == 200
    data = response.json()
    names = [rec["name"] for rec in data["recommendations"]]
    assert "오메가3" not in names
    assert names[-1] == "루테인"
    assert data["keywords"] == ["두통"]


def test_recommend_missing_profile():
    response = client.post("/recommend", json={"active_subscriptions": []})
    assert response.status_code == 422
    assert "detail" in response.json()


def test_recommend_empty_profile_still_works():
    response = client.post("/recommend", json={"profile": {}})
    assert response.status_code == 200
    assert len(response.json()["recommendations"]) == 3


@patch("nutri_app.api.generate_recommendation_plan")
def test_recommend_planning_error(mock_plan):
    mock_plan.side_effect = PlanningError("catalog down")
    response = client.post("/recommend", json={"profile": male_profile()})
    assert response.status_code == 503


@patch("nutri_app.api.generate_recommendation_plan")
def test_recommend_unexpected_error(mock_plan):
    mock_plan.side_effect = RuntimeError("boom")
    response = client.post("/recommend", json={"profile": male_profile()})
    assert response.status_code == 500


def test_extract():
    response = client.post("/extract", json={"reply_text": "[추천] 비타민C : 2정/일 식전"})
    assert response.status_code == 200
    recs = response.json()["recommendations"]
    assert len(recs) == 1
    assert recs[0]["name"] == "비타민C"
    assert recs[0]["daily_dosage"] == 2


def test_pricing_all_plans():
    response = client.post("/pricing", json={"selection_count": 3})
    assert response.status_code == 200
    quotes = response.json()["quotes"]
    assert quotes["monthly"]["total"] == 18500
    assert quotes["once"]["total"] == 20000


def test_pricing_single_plan():
    response = client.post("/pricing", json={"selection_count": 3, "plan": "annual"})
    assert response.status_code == 200
    assert list(response.json()["quotes"]) == ["annual"]


def test_pricing_unknown_plan():
    response = client.post("/pricing", json={"selection_count": 3, "plan": "weekly"})
    assert response.status_code == 400


def test_pricing_negative_count():
    response = client.post("/pricing", json={"selection_count": -1})
    assert response.status_code == 422


def test_goal_categories_by_gender():
    male = [c["key"] for c in client.get("/goals/categories", params={"gender": "male"}).json()]
    female = [c["key"] for c in client.get("/goals/categories", params={"gender": "female"}).json()]
    assert "PREGNANCY" not in male
    assert "MENS_HEALTH" not in female
    assert "PREGNANCY" in female


def test_recommend_survives_huge_dosage_in_reply():
    payload = {"profile": male_profile(), "reply_text": "[추천] 루테인 : " + "9" * 5000 + "정/일"}
    response = client.post("/recommend", json=payload)
    assert response.status_code == 200
    lutein = response.json()["recommendations"][-1]
    assert lutein["name"] == "루테인"
    assert lutein["daily_dosage"] == 1


def test_recommend_malformed_catalog_is_unavailable(tmp_path, monkeypatch):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([{"id": "x", "name": "엑스", "dosageCalculation": [1, 2]}]), encoding="utf-8")
    monkeypatch.setenv("SUPPLEMENT_CATALOG_PATH", str(path))
    monkeypatch.setattr(supplement_catalog, "_shared_catalog", None)
    response = client.post("/recommend", json={"profile": male_profile()})
    assert response.status_code == 503


def test_submit_goals():
    selections = {key: [NONE_KEYWORD] for key in filtered_categories("female")}
    response = client.post("/goals", json={"gender": "female", "selections": selections})
    assert response.status_code == 200
    assert response.json() == {"goals": [NONE_KEYWORD], "completed": True}


def test_submit_goals_incomplete():
    response = client.post("/goals", json={"gender": "male", "selections": {"ENERGY": ["피로 회복"]}})
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["category"] == "IMMUNITY"
    assert detail["progress"] > 0
