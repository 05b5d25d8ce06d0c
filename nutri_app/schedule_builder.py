# schedule_builder.py

from typing import Dict, List, Tuple
from nutri_app.data_model import DosageSchedule, MORNING, NOON, EVENING, BEDTIME

# Strategy kinds
SPLIT = "split"      # ceil(d/2) morning, floor(d/2) evening when d >= 2
SINGLE = "single"    # the whole daily dosage in one slot

# supplement id -> (kind, time slot for single doses, with_meal, reasons)
# Single-dose reasons are one string; split reasons are (morning, evening).
_STRATEGIES: Dict[str, Tuple[str, str, bool, Tuple[str, ...]]] = {
    "omega3": (SPLIT, MORNING, True, (
        "오메가3는 지용성 영양소로 식사 중 지방과 함께 섭취하면 흡수율이 높아집니다.",
        "하루 복용량을 나누어 저녁 식사와 함께 복용하면 위장 부담을 줄이고 흡수를 높일 수 있습니다.",
    )),
    "calcium": (SPLIT, MORNING, True, (
        "칼슘은 한 번에 흡수되는 양이 제한적이므로 식사와 함께 나누어 복용하는 것이 좋습니다.",
        "저녁 식사와 함께 나머지 칼슘을 복용하면 흡수율이 높아지고 야간 뼈 대사에 도움이 됩니다.",
    )),
    "vitaminC": (SINGLE, MORNING, False, (
        "비타민C는 수용성 비타민으로 공복에 복용하면 빠르게 흡수됩니다.",
    )),
    "probiotics": (SINGLE, MORNING, False, (
        "프로바이오틱스는 위산이 적은 식전 공복 상태에서 더 많은 유산균이 장까지 도달할 수 있습니다.",
    )),
    "magnesium": (SINGLE, BEDTIME, False, (
        "마그네슘은 수면에 도움을 주므로 취침 전 복용이 효과적입니다.",
    )),
    "vitaminD": (SINGLE, MORNING, True, (
        "비타민D는 지용성 비타민으로 식사와 함께 복용 시 흡수가 잘 됩니다.",
    )),
    "coenzymeQ10": (SINGLE, MORNING, True, (
        "코엔자임Q10은 지용성 성분으로 아침 식사와 함께 복용하면 흡수가 잘 되고 낮 동안 에너지 생성에 도움이 됩니다.",
    )),
    "vitaminB": (SINGLE, MORNING, True, (
        "비타민B 복합체는 에너지 대사를 돕기 때문에 아침 식사와 함께 복용하면 위장 자극 없이 하루 활력에 도움이 됩니다.",
    )),
    "lutein": (SINGLE, NOON, True, (
        "루테인은 지용성 성분으로 식사와 함께 복용하면 흡수가 잘 됩니다.",
    )),
    "curcumin": (SINGLE, NOON, True, (
        "커큐민은 생체이용률이 낮아 지방이 포함된 점심 식사와 함께 복용하면 흡수율이 높아집니다.",
    )),
    "arginine": (SPLIT, MORNING, False, (
        "아르기닌은 다른 아미노산과 흡수 경쟁을 하므로 아침 공복에 복용하는 것이 좋습니다.",
        "저녁 식전 공복에 나누어 복용하면 단백질 식사와의 흡수 경쟁을 피할 수 있습니다.",
    )),
}

_DEFAULT_STRATEGY = (SPLIT, MORNING, True, (
    "일반적으로 영양제는 식사와 함께 복용하면 흡수율이 높아집니다.",
    "하루 복용량을 아침과 저녁으로 나누어 식사와 함께 복용하면 체내 농도를 일정하게 유지할 수 있습니다.",
))


def build_schedule(supplement_id: str, daily_dosage: int) -> List[DosageSchedule]:
    """
    Time-of-day intake plan for one supplement.
    The amounts always add up to daily_dosage (at least 1); never empty.
    """
    try:
        dosage = int(daily_dosage)
    except (TypeError, ValueError):
        dosage = 1
    dosage = max(1, dosage)

    kind, slot, with_meal, reasons = _STRATEGIES.get(supplement_id, _DEFAULT_STRATEGY)

    if kind == SPLIT and dosage >= 2:
        morning = (dosage + 1) // 2
        evening = dosage // 2
        return [
            DosageSchedule(time=MORNING, amount=morning, with_meal=with_meal, reason=reasons[0]),
            DosageSchedule(time=EVENING, amount=evening, with_meal=with_meal, reason=reasons[1]),
        ]

    return [DosageSchedule(time=slot, amount=dosage, with_meal=with_meal, reason=reasons[0])]
