import math
from typing import Optional
from nutri_app.data_model import SupplementCatalogEntry, UserHealthProfile

MALE_SPELLINGS = {"male", "남", "남성", "남자"}
FEMALE_SPELLINGS = {"female", "여", "여성", "여자"}

# Always exactly this many tablets regardless of body metrics
FIXED_DOSE_SUPPLEMENTS = {
    "magnesium": 1,
}


def normalize_gender(gender: Optional[str]) -> Optional[str]:
    """
    Maps the survey's spellings onto "male" / "female".
    Unrecognized values are returned unchanged (they match no gender factor).
    """
    if gender is None:
        return None
    raw = str(gender).strip()
    lowered = raw.lower()
    if lowered in MALE_SPELLINGS:
        return "male"
    if lowered in FEMALE_SPELLINGS:
        return "female"
    return raw


def age_bracket(age: Optional[int]) -> Optional[str]:
    if age is None:
        return None
    if age < 30:
        return "under30"
    if age <= 50:
        return "between30And50"
    return "above50"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_finite(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def compute_daily_dosage(
    entry: SupplementCatalogEntry,
    profile: UserHealthProfile,
    age: Optional[int] = None,
) -> int:
    """
    Daily tablet count for one supplement. Never raises, never below 1.
    Returns: int
    """
    # ✅ Catalog override
    fixed = _as_finite(entry.dosage_info.recommended_daily_tablets) if entry.dosage_info else None
    if fixed:
        return max(1, round_half_up(fixed))

    if entry.id in FIXED_DOSE_SUPPLEMENTS:
        return FIXED_DOSE_SUPPLEMENTS[entry.id]

    calc = entry.dosage_calculation
    if calc is None:
        return 1

    base = _as_finite(calc.base_amount)
    amount = base if base is not None else 1.0

    weight = _as_finite(profile.weight)
    weight_factor = _as_finite(calc.weight_factor)
    if weight_factor is not None and weight is not None:
        amount += weight * weight_factor

    gender = normalize_gender(profile.gender)
    gender_factor = _as_finite((calc.gender_factor or {}).get(gender)) if gender else None
    if gender_factor is not None:
        amount *= gender_factor

    if age is None:
        age = profile.age()
    bracket = age_bracket(age)
    age_factor = _as_finite((calc.age_factor or {}).get(bracket)) if bracket else None
    if age_factor is not None:
        amount *= age_factor

    max_dosage = _as_finite(calc.max_dosage)
    if max_dosage is not None:
        amount = min(amount, max_dosage)

    if base is not None and base > 0:
        tablets = amount / base
    else:
        tablets = amount

    if not math.isfinite(tablets):
        return 1
    return max(1, round_half_up(tablets))
