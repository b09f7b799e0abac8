#!/usr/bin/env python3
"""
Saju (사주) Calculation
=======================
Four pillars (year, month, day, hour) from a solar birth date, the
element distribution of the chart and the Yongsin (용신) derived from
the strength of the day master (일간).

Local calculation rules:
    Year  - 1984 is 갑자; the year changes at 입춘 (February 4)
    Month - solar-term day boundaries; 인월 starts in February and its
            stem follows the year stem
    Day   - 2000-01-01 is 무오 (sexagenary index 54)
    Hour  - 자시 covers 23:00-00:59; the stem follows the day stem
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from jakmyeong.elements import DESTROYS, GENERATES, birther_of, controller_of
from jakmyeong.tables import ELEMENTS

STEMS = ['갑', '을', '병', '정', '무', '기', '경', '신', '임', '계']
BRANCHES = ['자', '축', '인', '묘', '진', '사', '오', '미', '신', '유', '술', '해']

STEM_HANJA = dict(zip(STEMS, '甲乙丙丁戊己庚辛壬癸'))
BRANCH_HANJA = dict(zip(BRANCHES, '子丑寅卯辰巳午未申酉戌亥'))

STEM_ELEMENTS = ['Wood', 'Wood', 'Fire', 'Fire', 'Earth', 'Earth', 'Metal', 'Metal', 'Water', 'Water']
BRANCH_ELEMENTS = ['Water', 'Earth', 'Wood', 'Wood', 'Earth', 'Fire',
                   'Fire', 'Earth', 'Metal', 'Metal', 'Earth', 'Water']

ELEMENT_LABELS = {
    'Wood': '목(木)',
    'Fire': '화(火)',
    'Earth': '토(土)',
    'Metal': '금(金)',
    'Water': '수(水)',
}

BASE_YEAR = 1984            # 갑자년
BASE_DATE = date(2000, 1, 1)
BASE_DAY_INDEX = 54         # 무오일
IPCHUN = (2, 4)

# First day of each solar month (절기), January through December
SOLAR_TERM_DAYS = [5, 4, 6, 5, 6, 6, 7, 8, 8, 8, 7, 7]

STRONG_THRESHOLD = 4
YONGSIN_WEIGHT = 40
HUISIN_WEIGHT = 20
GISIN_WEIGHT = -20

SOURCE_KASI = 'kasi_api'
SOURCE_FALLBACK = 'local_fallback'
SOURCE_LOCAL = 'local_calculation'


class InvalidBirthDateError(ValueError):
    """Raised for unparseable birth dates or hours outside 0-23."""


@dataclass(frozen=True)
class Pillar:
    stem: str
    branch: str

    @property
    def name(self) -> str:
        return self.stem + self.branch

    @property
    def hanja(self) -> str:
        return STEM_HANJA[self.stem] + BRANCH_HANJA[self.branch]

    @property
    def stem_element(self) -> str:
        return STEM_ELEMENTS[STEMS.index(self.stem)]

    @property
    def branch_element(self) -> str:
        return BRANCH_ELEMENTS[BRANCHES.index(self.branch)]

    def to_dict(self) -> dict:
        return {
            'pillar': self.name,
            'hanja': self.hanja,
            'stem': self.stem,
            'branch': self.branch,
            'stem_element': self.stem_element,
            'branch_element': self.branch_element,
        }

    @classmethod
    def from_index(cls, index: int) -> 'Pillar':
        """Pillar at a position of the 60-cycle (0 = 갑자)."""
        index %= 60
        return cls(STEMS[index % 10], BRANCHES[index % 12])

    @classmethod
    def from_name(cls, name: str) -> 'Pillar':
        """Parse '갑자' (anything after the first two characters is ignored)."""
        if len(name) < 2 or name[0] not in STEMS or name[1] not in BRANCHES:
            raise ValueError(f"Not a sexagenary pillar: {name!r}")
        return cls(name[0], name[1])


@dataclass
class SajuResult:
    year: Pillar
    month: Optional[Pillar]
    day: Pillar
    hour: Optional[Pillar] = None
    source: str = SOURCE_LOCAL
    birth_date: Optional[date] = None
    birth_hour: Optional[int] = None

    def pillars(self) -> List[Pillar]:
        return [p for p in (self.year, self.month, self.day, self.hour) if p is not None]

    def to_dict(self) -> dict:
        return {
            'year': self.year.to_dict(),
            'month': self.month.to_dict() if self.month else None,
            'day': self.day.to_dict(),
            'hour': self.hour.to_dict() if self.hour else None,
            'source': self.source,
            'birth_date': self.birth_date.isoformat() if self.birth_date else None,
            'birth_hour': self.birth_hour,
        }


@dataclass
class ElementAnalysis:
    distribution: Dict[str, int]
    needed: List[str] = field(default_factory=list)
    excess: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.distribution.values())


@dataclass
class StrengthAnalysis:
    day_element: str
    month_element: str
    season_score: int
    same_count: int
    birther_count: int
    total: float

    @property
    def is_strong(self) -> bool:
        return self.total >= STRONG_THRESHOLD


@dataclass
class YongsinResult:
    strength: StrengthAnalysis
    yongsin: List[str]
    huisin: List[str]
    gisin: List[str]
    missing: List[str]
    summary: str

    def to_dict(self) -> dict:
        return {
            'day_element': self.strength.day_element,
            'is_strong': self.strength.is_strong,
            'strength': self.strength.total,
            'yongsin': list(self.yongsin),
            'huisin': list(self.huisin),
            'gisin': list(self.gisin),
            'missing': list(self.missing),
            'summary': self.summary,
        }


# =============================================================================
# Input parsing
# =============================================================================

def parse_birth_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise InvalidBirthDateError(f"Birth date must be YYYY-MM-DD: {value!r}")


def validate_hour(hour: Optional[int]) -> Optional[int]:
    if hour is None:
        return None
    if not isinstance(hour, int) or not 0 <= hour <= 23:
        raise InvalidBirthDateError(f"Birth hour must be 0-23: {hour!r}")
    return hour


# =============================================================================
# Pillars
# =============================================================================

def saju_year(birth: date) -> int:
    """Sexagenary year: dates before 입춘 belong to the previous year."""
    if (birth.month, birth.day) < IPCHUN:
        return birth.year - 1
    return birth.year


def solar_month(month: int, day: int) -> int:
    """Calendar month whose solar term has begun on this day (1-12)."""
    if day >= SOLAR_TERM_DAYS[month - 1]:
        return month
    return 12 if month == 1 else month - 1


def year_pillar(birth: date) -> Pillar:
    return Pillar.from_index(saju_year(birth) - BASE_YEAR)


def month_pillar(birth: date) -> Pillar:
    offset = (solar_month(birth.month, birth.day) - 2) % 12   # 0 = 인월
    year_stem = STEMS.index(year_pillar(birth).stem)
    stem = ((year_stem % 5) * 2 + 2 + offset) % 10
    branch = (2 + offset) % 12
    return Pillar(STEMS[stem], BRANCHES[branch])


def day_pillar(birth: date) -> Pillar:
    return Pillar.from_index(BASE_DAY_INDEX + (birth - BASE_DATE).days)


def hour_branch_index(hour: int) -> int:
    return ((hour + 1) // 2) % 12


def hour_pillar(day: Pillar, hour: int) -> Pillar:
    branch = hour_branch_index(hour)
    stem = ((STEMS.index(day.stem) % 5) * 2 + branch) % 10
    return Pillar(STEMS[stem], BRANCHES[branch])


def calculate_saju(birth_date: Union[str, date, datetime],
                   birth_hour: Optional[int] = None) -> SajuResult:
    """Four pillars computed locally from the solar birth date."""
    birth = parse_birth_date(birth_date)
    hour = validate_hour(birth_hour)
    day = day_pillar(birth)
    return SajuResult(
        year=year_pillar(birth),
        month=month_pillar(birth),
        day=day,
        hour=hour_pillar(day, hour) if hour is not None else None,
        source=SOURCE_LOCAL,
        birth_date=birth,
        birth_hour=hour,
    )


# =============================================================================
# Element analysis
# =============================================================================

def analyze_elements(saju: SajuResult) -> ElementAnalysis:
    """Stem and branch element counts; needed (<= 1) and excess (>= 3)."""
    counts = {element: 0 for element in ELEMENTS}
    for pillar in saju.pillars():
        counts[pillar.stem_element] += 1
        counts[pillar.branch_element] += 1

    needed = sorted((e for e in ELEMENTS if counts[e] <= 1), key=lambda e: counts[e])
    excess = sorted((e for e in ELEMENTS if counts[e] >= 3), key=lambda e: -counts[e])
    return ElementAnalysis(distribution=counts, needed=needed, excess=excess)


def saju_to_weights(saju: SajuResult) -> Dict[str, int]:
    """30, 20, 10 ... for needed elements, scarcest first."""
    weights = {element: 0 for element in ELEMENTS}
    for index, element in enumerate(analyze_elements(saju).needed):
        weights[element] = 30 - index * 10
    return weights


def analysis_text(saju: SajuResult) -> str:
    needed = analyze_elements(saju).needed
    if not needed:
        return '오행이 비교적 균형 잡혀 있습니다.'
    names = ', '.join(ELEMENT_LABELS[e] for e in needed)
    return f"{names}의 기운이 부족합니다. 이름에서 이 기운을 보충해주면 좋습니다."


def _season_score(month_element: str, day_element: str) -> int:
    if month_element == day_element:
        return 2
    if GENERATES[month_element] == day_element:
        return 1
    if GENERATES[day_element] == month_element:
        return 0
    if DESTROYS[month_element] == day_element:
        return -1
    return -2


def day_master_strength(saju: SajuResult) -> StrengthAnalysis:
    day_element = saju.day.stem_element
    month_element = saju.month.branch_element if saju.month else day_element
    distribution = analyze_elements(saju).distribution
    season = _season_score(month_element, day_element)
    same = distribution[day_element]
    birther = distribution[birther_of(day_element)]
    return StrengthAnalysis(
        day_element=day_element,
        month_element=month_element,
        season_score=season,
        same_count=same,
        birther_count=birther,
        total=same * 1.5 + birther + season,
    )


def extract_yongsin(saju: SajuResult) -> YongsinResult:
    """
    Yongsin from day-master strength.

    A strong day master is drained: its child element is the yongsin,
    the elements controlling it or controlled by it support. A weak one
    is fed: the birthing element is the yongsin and its own element
    supports.
    """
    strength = day_master_strength(saju)
    day_element = strength.day_element
    same = day_element
    birther = birther_of(day_element)
    child = GENERATES[day_element]
    controller = controller_of(day_element)
    controlled = DESTROYS[day_element]

    if strength.is_strong:
        yongsin, huisin, gisin = [child], [controller, controlled], [same, birther]
    else:
        yongsin, huisin, gisin = [birther], [same], [child, controller]

    distribution = analyze_elements(saju).distribution
    missing = [e for e in ELEMENTS if distribution[e] == 0]
    summary = (
        f"일간 {ELEMENT_LABELS[day_element]}이 {'강한' if strength.is_strong else '약한'} 편입니다. "
        f"용신은 {', '.join(ELEMENT_LABELS[e] for e in yongsin)}입니다."
    )
    return YongsinResult(
        strength=strength,
        yongsin=yongsin,
        huisin=huisin,
        gisin=gisin,
        missing=missing,
        summary=summary,
    )


def yongsin_weights(result: YongsinResult) -> Dict[str, int]:
    weights = {}
    for element in result.gisin:
        weights[element] = GISIN_WEIGHT
    for element in result.huisin:
        weights[element] = HUISIN_WEIGHT
    for element in result.yongsin:
        weights[element] = YONGSIN_WEIGHT
    return weights
