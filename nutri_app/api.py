from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from dataclasses import asdict
from dotenv import load_dotenv
import logging
import os

load_dotenv()

from nutri_app.data_model import UserHealthProfile
from nutri_app.goal_selector import (
    HEALTH_GOAL_CATEGORIES,
    GoalSelectionError,
    filtered_categories,
    run_goal_selection,
)
from nutri_app.pricing import PLANS, PricingError, DEFAULT_UNIT_PRICE, quote_plan
from nutri_app.supplement_catalog import CatalogError, get_catalog
from nutri_app.supplement_engine import PlanningError, generate_recommendation_plan
from nutri_app.text_extractor import build_extracted_recommendations, extract_recommendations

app = FastAPI()

# -----------------------------
# Middleware
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger("uvicorn.error")


@app.get("/")
@app.head("/")
def root():
    return {"message": "Welcome to the Nutri AI Supplement API"}


# -----------------------------
# Request models
# -----------------------------
class HealthProfileInput(BaseModel):
    gender: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    birth_date: Optional[str] = Field(default=None, alias="birthDate")
    name: Optional[str] = None

    model_config = {"populate_by_name": True}


class RecommendInput(BaseModel):
    profile: HealthProfileInput
    active_subscriptions: List[str] = Field(default_factory=list)
    reply_text: Optional[str] = None


class ExtractInput(BaseModel):
    reply_text: str
    active_subscriptions: List[str] = Field(default_factory=list)


class PricingInput(BaseModel):
    selection_count: int = Field(ge=0)
    plan: Optional[str] = None
    unit_price: int = Field(default=DEFAULT_UNIT_PRICE, ge=0)


class GoalSelectionInput(BaseModel):
    gender: Optional[str] = None
    selections: Dict[str, List[str]] = Field(default_factory=dict)


def _to_profile(data: HealthProfileInput) -> UserHealthProfile:
    return UserHealthProfile(
        gender=data.gender,
        height=data.height,
        weight=data.weight,
        birth_date=data.birth_date,
        name=data.name,
    )


# -----------------------------
# Endpoints
# -----------------------------
@app.get("/catalog")
def catalog_summary():
    try:
        catalog = get_catalog()
    except CatalogError as e:
        logger.error(f"Catalog load failed: {e}")
        raise HTTPException(status_code=503, detail="Supplement catalog temporarily unavailable.")

    return [
        {
            "id": entry.id,
            "name": entry.name,
            "category": entry.category,
            "price_per_unit": entry.price_per_unit,
            "benefits": entry.benefits,
            "precautions": entry.precautions,
        }
        for entry in catalog
    ]


@app.post("/recommend", response_model=dict)
def recommend(payload: RecommendInput):
    try:
        return generate_recommendation_plan(
            _to_profile(payload.profile),
            active_subscriptions=payload.active_subscriptions,
            reply_text=payload.reply_text,
        )
    except PlanningError as e:
        logger.error(f"Recommendation planning error: {e}")
        raise HTTPException(status_code=503,
                            detail="Supplement recommendation temporarily unavailable. Please try again later.")
    except Exception as e:
        logger.error(f"Error in /recommend endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500,
                            detail="Internal Server Error. Please check your input and try again.")


@app.post("/extract")
def extract(payload: ExtractInput):
    try:
        catalog = get_catalog()
    except CatalogError as e:
        logger.error(f"Catalog load failed: {e}")
        raise HTTPException(status_code=503, detail="Supplement catalog temporarily unavailable.")

    partials = extract_recommendations(payload.reply_text, catalog, payload.active_subscriptions)
    recs = build_extracted_recommendations(partials, catalog)
    logger.info(f"Extracted {len(recs)} recommendations from advisor reply")
    return {"recommendations": [asdict(rec) for rec in recs]}


@app.post("/pricing")
def pricing(payload: PricingInput):
    plans = [payload.plan] if payload.plan else list(PLANS)
    try:
        quotes = {plan: asdict(quote_plan(payload.selection_count, plan, payload.unit_price)) for plan in plans}
    except PricingError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"quotes": quotes}


@app.get("/goals/categories")
def goal_categories(gender: Optional[str] = None):
    return [
        {"key": key, **HEALTH_GOAL_CATEGORIES[key]}
        for key in filtered_categories(gender)
    ]


@app.post("/goals")
def submit_goals(payload: GoalSelectionInput):
    try:
        result = run_goal_selection(payload.gender, payload.selections)
    except GoalSelectionError as e:
        raise HTTPException(status_code=400,
                            detail={"message": str(e), "category": e.category, "progress": e.progress})
    return {"goals": result.goals, "completed": result.completed}
