#!/usr/bin/env python3
"""
81-Suri Numerology
==================
Stroke-sum fortune periods (사격) and their 81-suri readings.

For a surname of S strokes and given-name Hanja of s1 and s2 strokes:

    초년운 (won)   = s1 + s2
    중년운 (hyung) = S + s1
    말년운 (yi)    = S + s2
    총운 (jeong)   = S + s1 + s2

Counts above 81 wrap around (``count % 81``, with 0 read as 81).
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List

from jakmyeong.tables import load_table

LEVELS = ('대길', '길', '반길반흉', '흉')
LUCKY_LEVELS = ('대길', '길')

PERIOD_LABELS = {
    'won': '초년운',
    'hyung': '중년운',
    'yi': '말년운',
    'jeong': '총운',
}

# Per-period points by level: (대길, 길, 반길반흉, 흉)
_PERIOD_POINTS = {
    'hyung': (10, 5, -2, -5),
    'jeong': (12, 6, -3, -6),
    'won': (4, 0, 0, -2),
    'yi': (6, 2, -4, -8),
}
_BASE_POINTS = 15
_ALL_DAEGIL_BONUS = 3
_MIN_POINTS = 5
_MAX_POINTS = 50

STYLE_MODES = ('balanced', 'modern', 'saju_perfect')


@dataclass(frozen=True)
class SuriInfo:
    number: int
    name: str
    level: str
    interpretation: str

    @property
    def is_lucky(self) -> bool:
        return self.level in LUCKY_LEVELS

    def to_dict(self) -> dict:
        return {
            'number': self.number,
            'name': self.name,
            'level': self.level,
            'interpretation': self.interpretation,
            'is_lucky': self.is_lucky,
        }


@dataclass(frozen=True)
class FourGeok:
    """The four fortune periods of a three-character name."""
    won: SuriInfo
    hyung: SuriInfo
    yi: SuriInfo
    jeong: SuriInfo

    def periods(self) -> List[SuriInfo]:
        return [self.won, self.hyung, self.yi, self.jeong]

    def levels(self) -> List[str]:
        return [p.level for p in self.periods()]

    def to_dict(self) -> Dict[str, dict]:
        return {
            PERIOD_LABELS[key]: getattr(self, key).to_dict()
            for key in ('won', 'hyung', 'yi', 'jeong')
        }


def normalize_count(count: int) -> int:
    """Fold a stroke sum into 1..81."""
    if count > 81:
        return count % 81 or 81
    return count


@lru_cache(maxsize=1)
def _suri_table() -> Dict[int, SuriInfo]:
    table = {}
    for row in load_table('suri_81.yaml').get('entries', []):
        number = int(row['number'])
        table[number] = SuriInfo(
            number=number,
            name=row.get('name', ''),
            level=row['level'],
            interpretation=row.get('interpretation', ''),
        )
    return table


def get_suri_info(count: int) -> SuriInfo:
    number = normalize_count(count)
    table = _suri_table()
    if number not in table:
        raise ValueError(f"No 81-suri entry for {count}")
    return table[number]


def calculate_four_geok(surname_strokes: int, s1: int, s2: int) -> FourGeok:
    return FourGeok(
        won=get_suri_info(s1 + s2),
        hyung=get_suri_info(surname_strokes + s1),
        yi=get_suri_info(surname_strokes + s2),
        jeong=get_suri_info(surname_strokes + s1 + s2),
    )


def lucky_count(four_geok: FourGeok) -> int:
    return sum(1 for p in four_geok.periods() if p.is_lucky)


def daegil_count(four_geok: FourGeok) -> int:
    return sum(1 for p in four_geok.periods() if p.level == '대길')


def bad_count(four_geok: FourGeok) -> int:
    """Periods at 반길반흉 or 흉."""
    return sum(1 for p in four_geok.periods() if p.level in ('반길반흉', '흉'))


def hyung_count(four_geok: FourGeok) -> int:
    return sum(1 for p in four_geok.periods() if p.level == '흉')


def weighted_suri_score(four_geok: FourGeok) -> int:
    """
    Period-weighted suri points in [5, 50].

    중년운 and 총운 weigh most; 초년운 only moves on 대길 or 흉.
    """
    score = _BASE_POINTS
    for key, points in _PERIOD_POINTS.items():
        level = getattr(four_geok, key).level
        score += points[LEVELS.index(level)]
    if daegil_count(four_geok) == 4:
        score += _ALL_DAEGIL_BONUS
    return max(_MIN_POINTS, min(_MAX_POINTS, score))


def suri_tier(four_geok: FourGeok) -> str:
    """S (all 대길), A, B (one 반길반흉), C (two or more), D (any 흉)."""
    levels = four_geok.levels()
    if '흉' in levels:
        return 'D'
    mixed = levels.count('반길반흉')
    if mixed >= 2:
        return 'C'
    if mixed == 1:
        return 'B'
    if all(level == '대길' for level in levels):
        return 'S'
    return 'A'


def passes_style(four_geok: FourGeok, style_mode: str) -> bool:
    if style_mode not in STYLE_MODES:
        raise ValueError(f"Unknown style mode: {style_mode}")
    lucky = lucky_count(four_geok)
    if style_mode == 'saju_perfect':
        return lucky == 4
    if style_mode == 'modern':
        return lucky >= 3
    return True
