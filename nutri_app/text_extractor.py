# text_extractor.py

import logging
import re
from typing import Dict, Iterable, List, Optional

from nutri_app.data_model import PartialRecommendation, Recommendation
from nutri_app.pricing import monthly_unit_price
from nutri_app.schedule_builder import build_schedule
from nutri_app.supplement_catalog import SupplementCatalog

logger = logging.getLogger(__name__)

RECOMMEND_MARKERS = ("[영양제 추천]", "[추천]")
BULLETS = ("-", "•")
TABLET_UNITS = ("정", "알")

EXTRACTED_REASON = "AI 상담 답변에서 추천된 영양제입니다."

# Digit runs longer than this are treated as unparseable; built dosages are capped
MAX_DOSAGE_DIGITS = 2
MAX_DAILY_TABLETS = 10

_MARKER_RE = re.compile("|".join(re.escape(m) for m in RECOMMEND_MARKERS))
_INT_RE = re.compile(r"\d+")
_UNIT_RE = re.compile(r"^(.*?)(?<!\d)(\d+)\s*(?:%s)" % "|".join(TABLET_UNITS))

# Symptom keywords counted for the health mind map
HEALTH_KEYWORD_MAP: Dict[str, List[str]] = {
    "두통": ["머리 아파", "두통", "편두통", "머리 욱신", "머리 깨질 것 같아"],
    "수면": ["잠이 안와", "불면증", "수면 부족", "피곤한데 잠이 안와"],
    "무릎": ["무릎 아파", "계단 내려갈 때 힘들어", "무릎 쑤심"],
    "피로": ["기운이 없어", "너무 피곤해", "에너지 없음", "피로 누적"],
}


def _recommendation_buffer(reply_text: str) -> str:
    """Text following every marker, up to the next marker, newline-joined."""
    segments = _MARKER_RE.split(reply_text)
    if len(segments) < 2:
        return ""
    return "\n".join(segment.strip() for segment in segments[1:])


def _candidate_lines(buffer: str) -> List[str]:
    lines = []
    for raw_line in buffer.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith(BULLETS) or ":" in line:
            lines.append(line)
    return lines


def _parse_dosage(digits: str) -> int:
    if len(digits) > MAX_DOSAGE_DIGITS:
        return 1
    return int(digits)


def parse_line(line: str) -> Optional[PartialRecommendation]:
    """
    Pull (name, dosage) out of one recommendation line.

    "비타민C : 2정/일 식전" -> ("비타민C", 2)
    "- 오메가3 2알 아침"     -> ("오메가3", 2)
    "• 루테인 하루 한 번"    -> ("루테인", 1)
    """
    content = line.strip()
    while content.startswith(BULLETS):
        content = content[1:].strip()
    if not content:
        return None

    if ":" in content:
        name, rest = content.split(":", 1)
        match = _INT_RE.search(rest)
        dosage = _parse_dosage(match.group(0)) if match else 1
    else:
        unit_match = _UNIT_RE.match(content)
        if unit_match:
            name = unit_match.group(1)
            dosage = _parse_dosage(unit_match.group(2))
        else:
            name = content.split()[0]
            dosage = 1

    name = name.strip()
    if not name:
        return None
    return PartialRecommendation(name=name, dosage=dosage)


def extract_recommendations(
    reply_text: str,
    catalog: SupplementCatalog,
    active_subscriptions: Iterable[str] = (),
) -> List[PartialRecommendation]:
    """
    Fallback parser for advisor replies marked with [추천] / [영양제 추천].
    Unknown or already-subscribed supplements are dropped. Never raises.
    """
    if not isinstance(reply_text, str) or not reply_text:
        return []

    subscribed = {str(name).strip() for name in active_subscriptions or []}
    found: List[PartialRecommendation] = []
    seen = set()

    for line in _candidate_lines(_recommendation_buffer(reply_text)):
        parsed = parse_line(line)
        if parsed is None:
            continue
        entry = catalog.find_by_name(parsed.name)
        if entry is None:
            logger.debug("Dropping unmatched recommendation line: %r", line)
            continue
        if entry.name in subscribed or entry.name in seen:
            continue
        seen.add(entry.name)
        found.append(PartialRecommendation(name=entry.name, dosage=parsed.dosage))

    return found


def build_extracted_recommendations(
    partials: List[PartialRecommendation],
    catalog: SupplementCatalog,
) -> List[Recommendation]:
    """
    Turns parsed pairs into full recommendations. The parsed dosage, kept
    within 1..MAX_DAILY_TABLETS, is used for the schedule; the dosage rules
    are not applied again.
    """
    recommendations = []
    for partial in partials:
        entry = catalog.find_by_name(partial.name)
        if entry is None:
            continue
        dosage = min(max(1, partial.dosage), MAX_DAILY_TABLETS)
        recommendations.append(Recommendation(
            supplement_id=entry.id,
            name=entry.name,
            daily_dosage=dosage,
            schedule=build_schedule(entry.id, dosage),
            reason=EXTRACTED_REASON,
            monthly_price=monthly_unit_price(entry.price_per_unit, dosage),
            source="extracted",
        ))
    return recommendations


def merge_recommendations(
    structured: List[Recommendation],
    extracted: List[Recommendation],
) -> List[Recommendation]:
    """
    Structured recommendations win. An extracted item is appended only when
    no earlier item carries the same name.
    """
    merged = list(structured)
    names = {rec.name for rec in merged}
    for rec in extracted:
        if rec.name in names:
            continue
        names.add(rec.name)
        merged.append(rec)
    return merged


def extract_health_keywords(text: str) -> List[str]:
    if not isinstance(text, str):
        return []
    return [
        keyword
        for keyword, phrases in HEALTH_KEYWORD_MAP.items()
        if any(phrase in text for phrase in phrases)
    ]
