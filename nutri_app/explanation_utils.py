# explanation_utils.py

from typing import List, Optional
from nutri_app.data_model import DosageSchedule, Recommendation, SupplementCatalogEntry
from nutri_app.supplement_catalog import SupplementCatalog

RECOMMEND_MARKER = "[추천]"


def meal_text(with_meal: bool) -> str:
    return "식후" if with_meal else "식전"


def build_schedule_text(schedule: List[DosageSchedule]) -> str:
    """e.g. "아침 1알 (식후), 저녁 1알 (식후)" """
    return ", ".join(
        f"{entry.time} {entry.amount}알 ({meal_text(entry.with_meal)})"
        for entry in schedule
    )


def build_recommendation_text(rec: Recommendation, entry: Optional[SupplementCatalogEntry] = None) -> str:
    """
    One recommendation block in the advisor's reply format. The first line is
    readable by text_extractor.extract_recommendations.
    """
    lines = [f"{RECOMMEND_MARKER} {rec.name} : {rec.daily_dosage}알/일 / {build_schedule_text(rec.schedule)}"]
    if rec.reason:
        lines.append(rec.reason)
    if entry and entry.benefits:
        lines.append(", ".join(entry.benefits))
    return "\n".join(lines)


def append_recommendations_to_reply(
    reply: str,
    recommendations: List[Recommendation],
    catalog: SupplementCatalog,
) -> str:
    """
    Adds the rule-based recommendations to an advisor reply that did not
    mark any supplement itself. Replies that already carry a marker are
    returned unchanged.
    """
    reply = reply or ""
    if not recommendations or RECOMMEND_MARKER in reply:
        return reply

    blocks = [
        build_recommendation_text(rec, catalog.get(rec.supplement_id))
        for rec in recommendations
    ]
    return f"{reply}\n\n영양제 추천:\n" + "\n\n".join(blocks)


def build_structured_explanation(rec: Recommendation) -> dict:
    """
    Dict view of a recommendation for the cart and detail screens.
    """
    return {
        "name": rec.name,
        "reason": rec.reason,
        "daily_dosage": f"하루 {rec.daily_dosage}알",
        "schedule": [
            {"time": s.time, "amount": s.amount, "meal": meal_text(s.with_meal), "reason": s.reason}
            for s in rec.schedule
        ],
        "warnings": list(rec.validation_flags),
    }
