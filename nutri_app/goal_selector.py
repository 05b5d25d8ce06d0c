# goal_selector.py

from dataclasses import dataclass
from typing import Dict, List, Optional

from nutri_app.dosage_calculator import normalize_gender

NONE_KEYWORD = "관심없음"

# category key -> title and keywords, in display order
HEALTH_GOAL_CATEGORIES: Dict[str, Dict[str, object]] = {
    "ENERGY": {"title": "에너지/피로 관련", "keywords": ["피로 회복", "활력 증진", "에너지 향상", "아침 컨디션 개선", "무기력 해소", "체력 유지", "만성피로 개선"]},
    "IMMUNITY": {"title": "면역 관련", "keywords": ["면역력 강화", "감기 예방", "자주 아픈 체질 개선", "염증 억제", "항산화 케어"]},
    "SLEEP": {"title": "수면 관련", "keywords": ["수면 질 개선", "불면증 완화", "숙면 유도", "야간 각성 감소", "자율신경 안정"]},
    "BRAIN": {"title": "두뇌/인지/집중", "keywords": ["집중력 향상", "기억력 개선", "학습능력 향상", "뇌건강 유지", "치매 예방", "멍한 상태 개선"]},
    "STRESS": {"title": "스트레스/기분", "keywords": ["스트레스 완화", "기분 안정", "긴장 완화", "우울감 케어", "호르몬 균형 유지"]},
    "DIGESTION": {"title": "소화/장 건강", "keywords": ["소화기능 개선", "변비 해소", "설사 완화", "장내 유익균 증가", "복부 팽만감 감소"]},
    "LIVER": {"title": "디톡스/간 건강", "keywords": ["간 해독", "음주 후 회복", "간 기능 개선", "알코올 대사 촉진"]},
    "NUTRITION": {"title": "영양 보충/기본관리", "keywords": ["종합 영양 보충", "비타민 균형", "미네랄 보충", "식사 불균형 보완", "성장기 영양 보강"]},
    "MUSCLE": {"title": "근육/체력/운동", "keywords": ["근육 성장", "운동 회복", "근육통 완화", "지구력 향상", "단백질 보충", "BCAA 케어"]},
    "JOINT": {"title": "관절/뼈 건강", "keywords": ["관절통 완화", "연골 보호", "관절 유연성 유지", "골밀도 유지", "골다공증 예방"]},
    "EYE": {"title": "눈 건강", "keywords": ["시력 보호", "눈 피로 해소", "블루라이트 보호", "황반변성 예방"]},
    "CARDIOVASCULAR": {"title": "심혈관/혈액 건강", "keywords": ["혈액순환 개선", "고지혈 예방", "콜레스테롤 관리", "혈압 안정", "혈관 건강 강화"]},
    "BEAUTY": {"title": "피부/미용", "keywords": ["피부 트러블 개선", "피부 탄력 강화", "보습 유지", "여드름 완화", "피부톤 개선", "모발 건강", "손톱 강화"]},
    "ANTIOXIDANT": {"title": "항산화/노화방지", "keywords": ["노화 예방", "세포 손상 보호", "프리래디컬 억제", "주름 예방", "항산화 활성"]},
    "DIET": {"title": "체형/다이어트", "keywords": ["체중 감량", "체지방 감소", "식욕 억제", "지방 대사 촉진", "근육 유지형 감량"]},
    "WOMENS_HEALTH": {"title": "여성 건강", "keywords": ["생리통 완화", "생리불순 개선", "PMS 완화", "갱년기 증상 완화", "여성 호르몬 균형", "질 건강 유지"]},
    "MENS_HEALTH": {"title": "남성 건강", "keywords": ["전립선 건강", "남성 호르몬 유지", "활력 유지", "정자 건강", "성기능 보조"]},
    "PREGNANCY": {"title": "임신/육아기", "keywords": ["태아 발달 지원", "엽산 보충", "임신 준비", "수유기 영양 보강"]},
}

HIDDEN_FOR_GENDER = {
    "male": {"WOMENS_HEALTH", "PREGNANCY"},
    "female": {"MENS_HEALTH"},
}


def filtered_categories(gender: Optional[str]) -> List[str]:
    hidden = HIDDEN_FOR_GENDER.get(normalize_gender(gender), set())
    return [key for key in HEALTH_GOAL_CATEGORIES if key not in hidden]


@dataclass
class StepResult:
    """Outcome of a next/previous transition."""
    category: Optional[str]           # category now shown; None when the picker is left
    completed: bool = False           # True after the last category's "complete"
    exited: bool = False              # True when moving back past the first category
    goals: Optional[List[str]] = None  # final goals when completed


class GoalSelectionMachine:
    """
    Category-by-category health-goal picker.

    States are the gender-filtered categories in display order. `next` and
    `previous` move between them; `next` on the last category completes the
    picker. Each category's selection is cached when leaving it and restored
    when coming back.
    """

    def __init__(self, gender: Optional[str] = None):
        self.categories = filtered_categories(gender)
        self.index = 0
        self.selected: List[str] = []
        self.cache: Dict[str, List[str]] = {}
        self.completed = False

    @property
    def current(self) -> str:
        return self.categories[self.index]

    @property
    def progress(self) -> float:
        return (self.index + 1) / len(self.categories)

    def keywords(self) -> List[str]:
        return list(HEALTH_GOAL_CATEGORIES[self.current]["keywords"]) + [NONE_KEYWORD]

    def toggle(self, keyword: str) -> List[str]:
        if keyword == NONE_KEYWORD:
            self.selected = [] if NONE_KEYWORD in self.selected else [NONE_KEYWORD]
        elif NONE_KEYWORD in self.selected:
            self.selected = [keyword]
        elif keyword in self.selected:
            self.selected = [k for k in self.selected if k != keyword]
        else:
            self.selected = self.selected + [keyword]
        return list(self.selected)

    def select_none(self) -> None:
        self.selected = [NONE_KEYWORD]

    def can_proceed(self) -> bool:
        if NONE_KEYWORD in self.selected:
            return True
        category_keywords = HEALTH_GOAL_CATEGORIES[self.current]["keywords"]
        return any(k in category_keywords for k in self.selected)

    def _save_current(self) -> None:
        self.cache[self.current] = list(self.selected)

    def _enter(self, index: int) -> None:
        self.index = index
        self.selected = list(self.cache.get(self.current, []))

    def next(self) -> StepResult:
        self._save_current()
        if self.index == len(self.categories) - 1:
            self.completed = True
            return StepResult(category=None, completed=True, goals=self.collect_goals())
        self._enter(self.index + 1)
        return StepResult(category=self.current)

    def previous(self) -> StepResult:
        self._save_current()
        if self.index == 0:
            return StepResult(category=None, exited=True)
        self._enter(self.index - 1)
        return StepResult(category=self.current)

    def collect_goals(self) -> List[str]:
        """All cached selections, deduplicated; 관심없음 anywhere wins."""
        selections = dict(self.cache)
        selections[self.current] = list(self.selected)

        goals: List[str] = []
        for key in self.categories:
            for keyword in selections.get(key, []):
                if keyword not in goals:
                    goals.append(keyword)

        if NONE_KEYWORD in goals:
            return [NONE_KEYWORD]
        return goals


class GoalSelectionError(ValueError):
    def __init__(self, category: str, progress: float):
        super().__init__(f"No goal selected for category '{category}'")
        self.category = category
        self.progress = progress


def run_goal_selection(gender: Optional[str], selections: Dict[str, List[str]]) -> StepResult:
    """
    Replays a whole picker session from a category -> keywords map and
    returns the completed step. Keywords outside a category are ignored.
    Raises GoalSelectionError at the first category left without a choice.
    """
    machine = GoalSelectionMachine(gender)
    while True:
        chosen = selections.get(machine.current) or []
        if NONE_KEYWORD in chosen:
            machine.select_none()
        else:
            offered = machine.keywords()
            for keyword in chosen:
                if keyword in offered and keyword not in machine.selected:
                    machine.toggle(keyword)

        if not machine.can_proceed():
            raise GoalSelectionError(machine.current, machine.progress)

        result = machine.next()
        if result.completed:
            return result
