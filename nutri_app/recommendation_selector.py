# recommendation_selector.py

import logging
from typing import Iterable, List, Optional, Tuple

from nutri_app.data_model import Recommendation, UserHealthProfile
from nutri_app.dosage_calculator import compute_daily_dosage, normalize_gender
from nutri_app.pricing import monthly_unit_price
from nutri_app.schedule_builder import build_schedule
from nutri_app.supplement_catalog import SupplementCatalog

logger = logging.getLogger(__name__)

COQ10_MIN_AGE = 40
MAGNESIUM_MIN_AGE = 35
BMI_OVERWEIGHT = 25
BMI_UNDERWEIGHT = 18.5


def _candidates(profile: UserHealthProfile, age: Optional[int]) -> List[Tuple[str, str]]:
    """
    (supplement id, reason) pairs in rule order. Rules are cumulative.
    """
    picks: List[Tuple[str, str]] = []
    gender = normalize_gender(profile.gender)

    # 1. Vitamin D for everyone
    picks.append((
        "vitaminD",
        "실내 생활이 많은 현대인은 대부분 비타민D가 부족하기 쉬워 뼈 건강과 면역력 유지를 위해 보충이 필요합니다.",
    ))

    # 2-3. Gender branch
    if gender == "male":
        picks.append(("omega3", "남성은 심혈관 질환 위험이 높아 혈중 중성지방 관리와 혈행 개선에 오메가3가 도움이 됩니다."))
        if age is not None and age >= COQ10_MIN_AGE:
            picks.append(("coenzymeQ10", f"{COQ10_MIN_AGE}세 이후에는 체내 코엔자임Q10 생성이 줄어들어 심장 건강과 에너지 생성을 위해 보충이 권장됩니다."))
    elif gender == "female":
        picks.append(("calcium", "여성은 골밀도 감소 위험이 높아 뼈 건강을 위해 칼슘 보충이 중요합니다."))
        if age is not None and age >= MAGNESIUM_MIN_AGE:
            picks.append(("magnesium", "30대 중반 이후 여성에게 흔한 스트레스와 수면 문제 개선, 칼슘 대사에 마그네슘이 도움을 줍니다."))

    # 4. BMI branch
    bmi = profile.bmi
    if bmi is not None:
        if bmi > BMI_OVERWEIGHT:
            picks.append(("curcumin", f"체질량지수(BMI {bmi:.1f})가 높아 만성 염증 관리와 대사 건강을 위해 커큐민이 도움이 됩니다."))
        elif bmi < BMI_UNDERWEIGHT:
            picks.append(("vitaminB", f"체질량지수(BMI {bmi:.1f})가 낮아 에너지 대사와 체중 유지를 위해 비타민B 복합체가 도움이 됩니다."))

    # 5-6. Everyone
    picks.append(("vitaminC", "항산화 작용으로 세포 손상을 막고 면역력을 높이는 데 비타민C가 필요합니다."))
    picks.append(("probiotics", "장 건강은 면역력과 전반적인 건강 상태에 중요한 역할을 합니다."))

    return picks


def build_recommendation(
    catalog: SupplementCatalog,
    supplement_id: str,
    reason: str,
    profile: UserHealthProfile,
    age: Optional[int] = None,
) -> Optional[Recommendation]:
    entry = catalog.get(supplement_id)
    if entry is None:
        logger.warning("Supplement '%s' is missing from the catalog; skipping", supplement_id)
        return None

    dosage = compute_daily_dosage(entry, profile, age=age)
    return Recommendation(
        supplement_id=entry.id,
        name=entry.name,
        daily_dosage=dosage,
        schedule=build_schedule(entry.id, dosage),
        reason=reason,
        monthly_price=monthly_unit_price(entry.price_per_unit, dosage),
    )


def select_recommendations(
    profile: UserHealthProfile,
    active_subscriptions: Iterable[str],
    catalog: SupplementCatalog,
) -> List[Recommendation]:
    """
    Rule-based supplement selection for one health profile.
    Deterministic for identical inputs; already-subscribed names are excluded.
    """
    subscribed = {str(name).strip() for name in active_subscriptions or []}
    age = profile.age()

    recommendations: List[Recommendation] = []
    seen = set()
    for supplement_id, reason in _candidates(profile, age):
        if supplement_id in seen:
            continue
        seen.add(supplement_id)

        rec = build_recommendation(catalog, supplement_id, reason, profile, age=age)
        if rec is None or rec.name in subscribed:
            continue
        recommendations.append(rec)

    return recommendations
