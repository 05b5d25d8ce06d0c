# nutri_app/supplement_engine.py
from __future__ import annotations
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional
import logging

from nutri_app.data_model import Recommendation, UserHealthProfile
from nutri_app.explanation_utils import append_recommendations_to_reply, build_structured_explanation
from nutri_app.pricing import quote_all_plans, quote_cart
from nutri_app.recommendation_selector import select_recommendations
from nutri_app.safety_checks import attach_interaction_flags
from nutri_app.supplement_catalog import CatalogError, SupplementCatalog, get_catalog
from nutri_app.text_extractor import (
    build_extracted_recommendations,
    extract_health_keywords,
    extract_recommendations,
    merge_recommendations,
)

logger = logging.getLogger(__name__)


class PlanningError(Exception):
    pass


def _resolve_catalog(catalog: Optional[SupplementCatalog]) -> SupplementCatalog:
    if catalog is not None:
        return catalog
    try:
        return get_catalog()
    except CatalogError as e:
        raise PlanningError(f"Supplement catalog unavailable: {e}")


def recommendation_to_dict(rec: Recommendation) -> Dict[str, Any]:
    return asdict(rec)


def generate_recommendation_plan(
    profile: UserHealthProfile,
    active_subscriptions: Iterable[str] = (),
    reply_text: Optional[str] = None,
    catalog: Optional[SupplementCatalog] = None,
) -> Dict[str, Any]:
    """
    Single entry point for one chat turn / page load.
    Returns a dict with:
      - recommendations (rule-based first, then extra items parsed from the reply)
      - reply (advisor reply, with the recommendation block appended when it had none)
      - explanations (per-item display view: daily dosage text, schedule, warnings)
      - keywords (symptom keywords found in the reply)
      - plan_quotes (monthly / annual / once for the recommendation count)
      - cart_quote (monthly checkout price from the items' own prices)
    """
    catalog = _resolve_catalog(catalog)
    subscriptions: List[str] = list(active_subscriptions or [])

    structured = select_recommendations(profile, subscriptions, catalog)
    extracted = build_extracted_recommendations(
        extract_recommendations(reply_text, catalog, subscriptions),
        catalog,
    )
    merged = attach_interaction_flags(merge_recommendations(structured, extracted), catalog)

    logger.info(
        "Recommendation plan: %d rule-based, %d parsed from reply, %d merged",
        len(structured), len(extracted), len(merged),
    )

    reply = None
    if reply_text is not None:
        reply = append_recommendations_to_reply(reply_text, structured, catalog)

    return {
        "recommendations": [recommendation_to_dict(rec) for rec in merged],
        "explanations": [build_structured_explanation(rec) for rec in merged],
        "reply": reply,
        "keywords": extract_health_keywords(reply_text),
        "plan_quotes": {plan: asdict(q) for plan, q in quote_all_plans(len(merged)).items()},
        "cart_quote": asdict(quote_cart(merged, "monthly")),
    }
