# data_model.py

import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Dict, Optional

# Dose time slots shown to the user
MORNING = "아침"
NOON = "점심"
EVENING = "저녁"
BEDTIME = "취침전"

DOSE_TIMES = (MORNING, NOON, EVENING, BEDTIME)

# --- Catalog Models ---

@dataclass(frozen=True)
class DosageCalculation:
    base_amount: Optional[float] = None     # denominator for tablet conversion, e.g. 1000 (mg)
    weight_factor: Optional[float] = None   # added per kg of body weight
    gender_factor: Dict[str, float] = field(default_factory=dict)   # {"male": 1.2, "female": 1.0}
    age_factor: Dict[str, float] = field(default_factory=dict)      # {"under30": .., "between30And50": .., "above50": ..}
    max_dosage: Optional[float] = None      # ceiling, applied before tablet conversion


@dataclass(frozen=True)
class DosageInfo:
    tablet_size: Optional[float] = None
    tablet_unit: Optional[str] = None
    recommended_daily_tablets: Optional[int] = None  # overrides computed dosage when set


@dataclass(frozen=True)
class SupplementCatalogEntry:
    id: str
    name: str                  # unique display name, secondary index
    category: str
    description: str
    price_per_unit: float      # KRW per tablet
    benefits: List[str] = field(default_factory=list)
    precautions: List[str] = field(default_factory=list)
    side_effects: List[str] = field(default_factory=list)
    interactions: List[str] = field(default_factory=list)
    food_sources: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    dosage_info: DosageInfo = field(default_factory=DosageInfo)
    dosage_calculation: Optional[DosageCalculation] = None


# --- Core User Model ---

_BIRTH_YEAR_RE = re.compile(r"^(\d{4})(?!\d)")


def _finite_positive(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


@dataclass
class UserHealthProfile:
    gender: Optional[str] = None      # "male", "여성", ... normalized on use
    height: Optional[float] = None    # cm
    weight: Optional[float] = None    # kg
    birth_date: Optional[str] = None  # ISO date, e.g. "1980-05-02"
    name: Optional[str] = None

    def age(self, today: Optional[date] = None) -> Optional[int]:
        """
        Calendar-year age: current year minus birth year. Only the leading
        4-digit year is read ("1980", "1980-05-02", "1980.05.02"), so the
        value can be one year high before the birthday.
        Returns None when birth_date has no leading year.
        """
        if not self.birth_date:
            return None
        match = _BIRTH_YEAR_RE.match(str(self.birth_date).strip())
        if not match:
            return None
        today = today or date.today()
        return today.year - int(match.group(1))

    @property
    def bmi(self) -> Optional[float]:
        height = _finite_positive(self.height)
        weight = _finite_positive(self.weight)
        if height is None or weight is None:
            return None
        meters = height / 100
        return weight / (meters * meters)


# --- Recommendation Models ---

@dataclass
class DosageSchedule:
    time: str          # one of DOSE_TIMES
    amount: int
    with_meal: bool
    reason: str


@dataclass
class Recommendation:
    supplement_id: str
    name: str
    daily_dosage: int
    schedule: List[DosageSchedule]
    reason: str
    monthly_price: int
    source: str = "rule-based"
    validation_flags: List[str] = field(default_factory=list)


@dataclass
class PartialRecommendation:
    name: str
    dosage: int


@dataclass
class PriceLineItem:
    name: str
    monthly_price: int
    display_price: int   # after the flat subscribe discount


@dataclass
class PriceQuote:
    plan: str
    base_price: int
    plan_discount: int
    first_subsidy: int
    shipping_cost: int      # display only
    survey_discount: int    # display only
    total: int
    daily_price: int
    per_unit_breakdown: List[PriceLineItem] = field(default_factory=list)
