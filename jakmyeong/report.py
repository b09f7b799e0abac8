#!/usr/bin/env python3
"""
Name Report
===========
Narrative review of one chosen name:

- numerology periods (초년/청년/중년/말년) from the 81-suri table
- yin-yang balance by stroke parity
- natural elements of the Hanja against the birth chart
- pronunciation elements of the initial consonants
- forbidden-character review
- overall summary

Usage:
    report = ReportGenerator().generate('김', '서윤', given_hanja='瑞允')
    print(report.summary)
"""

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from jakmyeong.elements import DESTROYS, GENERATES, consonant_element
from jakmyeong.hangul import initial_sound
from jakmyeong.saju import ELEMENT_LABELS, SajuResult, analyze_elements
from jakmyeong.suri import get_suri_info, normalize_count
from jakmyeong.tables import (
    ELEMENTS, HanjaEntry, Surname, get_hanja, get_surname, given_name_entries, load_filters,
)

YANG = '양'
YIN = '음'

GRAPH_STEP = 20
GRAPH_MAX = 100
SAJU_LACK_BELOW = 40
NAME_FILL_FROM = 20

# (label, age range); stroke sums are chosen in _numerology
NUMEROLOGY_PERIODS = [
    ('초년', '0세~19세'),
    ('청년', '20세~39세'),
    ('중년', '40세~59세'),
    ('말년', '60세~'),
]


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class NumerologyPeriod:
    name: str
    age_range: str
    number: int
    level: str
    interpretation: str


@dataclass
class YinYangChar:
    hanja: str
    strokes: int
    type: str


@dataclass
class YinYangAnalysis:
    characters: List[YinYangChar]
    is_balanced: bool
    summary: str


@dataclass
class NaturalElementAnalysis:
    has_saju: bool
    name_elements: Dict[str, int]
    saju_elements: Optional[Dict[str, int]]
    filled: List[str]
    summary: str


@dataclass
class PronunciationChar:
    hangul: str
    initial: str
    element: Optional[str]


@dataclass
class PronunciationAnalysis:
    characters: List[PronunciationChar]
    relationship: str  # 'harmonious', 'conflicting', 'neutral'
    summary: str


@dataclass
class ForbiddenChar:
    hanja: str
    status: str  # 'good', 'caution', 'forbidden'
    reason: str


@dataclass
class NameReport:
    surname: str
    surname_hanja: str
    given_name: str
    given_hanja: str
    numerology: List[NumerologyPeriod] = field(default_factory=list)
    yin_yang: Optional[YinYangAnalysis] = None
    natural_element: Optional[NaturalElementAnalysis] = None
    pronunciation: Optional[PronunciationAnalysis] = None
    forbidden: List[ForbiddenChar] = field(default_factory=list)
    forbidden_summary: str = ''
    summary: str = ''

    @property
    def full_hangul(self) -> str:
        return self.surname + self.given_name

    @property
    def full_hanja(self) -> str:
        return self.surname_hanja + self.given_hanja

    def to_dict(self) -> dict:
        data = asdict(self)
        data['full_name'] = {'hangul': self.full_hangul, 'hanja': self.full_hanja}
        return data


# =============================================================================
# Analyzers
# =============================================================================

def _numerology(surname_strokes: int, s1: int, s2: int) -> List[NumerologyPeriod]:
    sums = [s1 + s2, surname_strokes + s1, surname_strokes + s2, surname_strokes + s1 + s2]
    periods = []
    for (name, age_range), count in zip(NUMEROLOGY_PERIODS, sums):
        info = get_suri_info(count)
        periods.append(NumerologyPeriod(
            name=name,
            age_range=age_range,
            number=normalize_count(count),
            level=info.level,
            interpretation=info.interpretation,
        ))
    return periods


def yin_yang(characters: List[tuple]) -> YinYangAnalysis:
    """``characters`` are (hanja, strokes); odd strokes are yang."""
    chars = [YinYangChar(h, s, YANG if s % 2 == 1 else YIN) for h, s in characters]
    yang = sum(1 for c in chars if c.type == YANG)
    yin = len(chars) - yang
    balanced = yin > 0 and yang > 0

    if balanced and yin == yang:
        summary = "차분한 '음'과 활발한 '양'이 완벽히 균형을 이루고 있어 이상적인 이름이에요."
    elif balanced:
        summary = "차분한 '음'과 활발한 '양'이 골고루 섞여 있어 균형이 좋은 이름이에요."
    elif yang == 0:
        summary = "'음'의 기운만 있어 차분하지만, '양'의 활기를 더하면 더 좋아요."
    else:
        summary = "'양'의 기운만 있어 활발하지만, '음'의 안정감을 더하면 더 좋아요."
    return YinYangAnalysis(characters=chars, is_balanced=balanced, summary=summary)


def _graph(counts: Dict[str, int]) -> Dict[str, int]:
    return {e: min(counts.get(e, 0) * GRAPH_STEP, GRAPH_MAX) for e in ELEMENTS}


def natural_elements(element_list: List[str], saju: Optional[SajuResult] = None) -> NaturalElementAnalysis:
    """Element graph of the name (surname included) against the chart."""
    counts = {e: 0 for e in ELEMENTS}
    for element in element_list:
        counts[element] += 1
    name_graph = _graph(counts)

    if saju is None:
        dominant = max(ELEMENTS, key=lambda e: name_graph[e])
        return NaturalElementAnalysis(
            has_saju=False,
            name_elements=name_graph,
            saju_elements=None,
            filled=[],
            summary=(f"이 이름은 {ELEMENT_LABELS[dominant]}의 기운이 강해요. "
                     "사주 정보를 입력하시면 더 정확한 분석이 가능합니다."),
        )

    saju_graph = _graph(analyze_elements(saju).distribution)
    filled = [e for e in ELEMENTS
              if saju_graph[e] < SAJU_LACK_BELOW and name_graph[e] >= NAME_FILL_FROM]
    if not filled:
        summary = '이름의 오행이 사주와 조화를 이루고 있습니다.'
    else:
        labels = '과 '.join(ELEMENT_LABELS[e] for e in filled)
        summary = f"사주에 필요한 {labels}의 에너지를 이름이 채워주고 있어요."
    return NaturalElementAnalysis(
        has_saju=True,
        name_elements=name_graph,
        saju_elements=saju_graph,
        filled=filled,
        summary=summary,
    )


def element_flow(element_list: List[Optional[str]]) -> str:
    """'harmonious' when generation links outnumber destruction links."""
    harmonious = conflicting = 0
    for current, following in zip(element_list, element_list[1:]):
        if current is None or following is None:
            continue
        if GENERATES[current] == following:
            harmonious += 1
        if DESTROYS[current] == following:
            conflicting += 1
    if harmonious > conflicting:
        return 'harmonious'
    if conflicting > harmonious:
        return 'conflicting'
    return 'neutral'


def pronunciation(full_hangul: str) -> PronunciationAnalysis:
    chars = []
    for syllable in full_hangul:
        initial = initial_sound(syllable)
        chars.append(PronunciationChar(syllable, initial, consonant_element(initial)))
    relationship = element_flow([c.element for c in chars])
    labels = ', '.join(ELEMENT_LABELS[c.element] for c in chars if c.element)

    if relationship == 'harmonious':
        summary = f"{labels}의 기운이 서로 상생하여 조화롭게 흐르는 좋은 발음 구조입니다."
    elif relationship == 'conflicting':
        summary = f"{labels}이 만나 서로 부딪히는 구조로, 강한 개성이 드러나는 소리입니다."
    else:
        summary = f"{labels}의 기운이 중립적으로 배치되어 안정적인 발음 구조입니다."
    return PronunciationAnalysis(characters=chars, relationship=relationship, summary=summary)


def forbidden_char_review(hanja_chars: str) -> List[ForbiddenChar]:
    """Status of each given-name Hanja against the forbidden table."""
    table = load_filters().get('forbidden_characters') or {}
    review = []
    for char in hanja_chars:
        row = table.get(char)
        if row:
            review.append(ForbiddenChar(char, row.get('status', 'caution'), row.get('reason', '')))
            continue
        entry = get_hanja(char)
        reason = f"{entry.meaning} - 이름에 사용하기 좋은 한자입니다." if entry else '이름에 사용하기 좋은 한자입니다.'
        review.append(ForbiddenChar(char, 'good', reason))
    return review


def forbidden_summary(review: List[ForbiddenChar]) -> str:
    statuses = [c.status for c in review]
    if 'forbidden' in statuses:
        return '일부 한자에 주의가 필요합니다. 다른 한자를 고려해보세요.'
    if 'caution' in statuses:
        return '대체로 좋지만, 일부 한자는 해석에 따라 다를 수 있어요.'
    return f"{', '.join(c.hanja for c in review)} 모두 이름에 써도 무방한 좋은 한자입니다."


# =============================================================================
# Generator
# =============================================================================

class ReportGenerator:
    """
    Builds a NameReport for a surname and a two-character given name.

    Usage:
        gen = ReportGenerator()
        report = gen.generate('김', '서윤', given_hanja='瑞允', saju=saju)
    """

    def generate(self,
                 surname: str,
                 given_name: str,
                 surname_hanja: Optional[str] = None,
                 given_hanja: str = '',
                 saju: Optional[SajuResult] = None) -> NameReport:
        surname_info: Surname = get_surname(surname, surname_hanja)
        entries = given_name_entries(given_name, given_hanja)

        report = NameReport(
            surname=surname,
            surname_hanja=surname_info.hanja,
            given_name=given_name,
            given_hanja=given_hanja,
        )

        s1 = entries[0].strokes
        s2 = entries[1].strokes
        report.numerology = _numerology(surname_info.strokes, s1, s2)
        report.yin_yang = yin_yang(
            [(surname_info.hanja, surname_info.strokes)] + [(e.hanja, e.strokes) for e in entries])
        report.natural_element = natural_elements(
            [surname_info.element] + [e.element for e in entries], saju)
        report.pronunciation = pronunciation(surname + given_name)
        report.forbidden = forbidden_char_review(given_hanja)
        report.forbidden_summary = forbidden_summary(report.forbidden)
        report.summary = self._summary(report, entries)
        return report

    def _summary(self, report: NameReport, entries: List[HanjaEntry]) -> str:
        meanings = '과 '.join(e.meaning for e in entries)
        tone = '균형 잡힌' if report.yin_yang.is_balanced else '개성 있는'
        lucky = sum(1 for p in report.numerology if p.level in ('대길', '길'))
        parts = [
            f"{meanings}의 의미를 담은 {tone} 이름이에요.",
            f"수리 네 시기 중 {lucky}개가 길한 수입니다.",
        ]
        if report.natural_element.filled:
            labels = ', '.join(ELEMENT_LABELS[e] for e in report.natural_element.filled)
            parts.append(f"사주에 부족한 {labels} 기운을 이름이 보완해 줍니다.")
        return ' '.join(parts)
