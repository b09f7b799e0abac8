#!/usr/bin/env python3
"""
Pure Korean Names
=================
순우리말 names from the word table in ``data/pure_korean.yaml``:
single words used as the whole given name, and two-word combinations
scored on meaning harmony, sound beauty, harmony bonuses and
modernity.

Single words score higher than combinations; three-syllable and
four-syllable combinations only survive when both words are very
modern and their meanings fit together.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from jakmyeong.hangul import decompose, romanize
from jakmyeong.tables import load_pure_korean

GENDER_FIT = {'M': ('male', 'both'), 'F': ('female', 'both')}

SINGLE_BASE = 50
SINGLE_SYLLABLE_BONUS = {2: 25, 1: 10}
SINGLE_MODERNITY_FACTOR = 2.5

COMBO_BASE = 20
COMBO_RAW_MAX = 155
MAX_COMBO_LENGTH = 4


@dataclass(frozen=True)
class PureWord:
    word: str
    meaning: str
    story: str = ''
    emotion: str = ''
    imagery: str = ''
    modernity: float = 5
    beauty: float = 5
    gender_fit: str = 'both'
    position: str = 'any'

    @property
    def syllables(self) -> int:
        return len(self.word)


@dataclass
class PureKoreanName:
    surname: str
    words: Tuple[PureWord, ...]
    score: int
    breakdown: Dict[str, float] = field(default_factory=dict)

    @property
    def hangul(self) -> str:
        return ''.join(w.word for w in self.words)

    @property
    def full_name(self) -> str:
        return self.surname + self.hangul

    @property
    def is_single(self) -> bool:
        return len(self.words) == 1

    def to_dict(self) -> dict:
        return {
            'hangul': self.hangul,
            'full_name': self.full_name,
            'roman': romanize(self.full_name),
            'is_single': self.is_single,
            'score': self.score,
            'words': [
                {'word': w.word, 'meaning': w.meaning, 'story': w.story,
                 'emotion': w.emotion, 'imagery': w.imagery}
                for w in self.words
            ],
            'breakdown': dict(self.breakdown),
        }


def load_words() -> List[PureWord]:
    return [
        PureWord(
            word=row['word'],
            meaning=row.get('meaning', ''),
            story=row.get('story', ''),
            emotion=row.get('emotion', ''),
            imagery=row.get('imagery', ''),
            modernity=row.get('modernity', 5),
            beauty=row.get('beauty', 5),
            gender_fit=row.get('gender_fit', 'both'),
            position=row.get('position', 'any'),
        )
        for row in load_pure_korean().get('words') or []
    ]


# =============================================================================
# Filters
# =============================================================================

def surname_clash(surname: str, word: str) -> bool:
    """First syllable repeats the surname, its initial, or its onset and vowel."""
    first = word[0]
    if first == surname:
        return True
    s, w = decompose(surname), decompose(first)
    if s is None or w is None:
        return False
    if s.cho == w.cho and s.cho != 'ㅇ':
        return True
    return s.cho == w.cho and s.jung == w.jung


def is_awkward_single(word: PureWord) -> bool:
    return word.word in (load_pure_korean().get('awkward_single') or [])


def sound_clash(first: PureWord, second: PureWord) -> bool:
    """ㄴ/ㄹ collisions or a coda repeated as the next onset."""
    a, b = decompose(first.word[-1]), decompose(second.word[0])
    if a is None or b is None:
        return False
    if (a.jong, b.cho) in (('ㄴ', 'ㄹ'), ('ㄹ', 'ㄴ')):
        return True
    return bool(a.jong) and a.jong == b.cho and b.cho != 'ㅇ'


def _initials_match(first: PureWord, second: PureWord) -> bool:
    a, b = decompose(first.word[0]), decompose(second.word[0])
    return bool(a and b and a.cho == b.cho)


# =============================================================================
# Scoring
# =============================================================================

def _in_same_group(groups: List[List[str]], a: str, b: str) -> bool:
    return any(a in group and b in group for group in groups)


def meaning_harmony(first: PureWord, second: PureWord) -> float:
    table = load_pure_korean()
    score = 15
    if first.imagery == second.imagery:
        score += 15
    elif _in_same_group(table.get('meaning_complements') or [], first.imagery, second.imagery):
        score += 10
    else:
        score += 5

    if first.emotion == second.emotion:
        score += 10
    elif _in_same_group(table.get('emotion_harmony') or [], first.emotion, second.emotion):
        score += 7
    else:
        score += 3

    depth = sum(5 if len(w.story) > 15 else 3 for w in (first, second))
    score += min(10, depth)
    return max(15, min(40, score))


def sound_beauty(first: PureWord, second: PureWord) -> float:
    score = 15 + (first.beauty + second.beauty) / 2
    total = first.syllables + second.syllables
    score += {3: 10, 4: 8, 2: 6}.get(total, 4)
    if not sound_clash(first, second):
        score += 8
    if (total == 3 and first.syllables != second.syllables) or \
            (first.syllables == 2 and second.syllables == 2):
        score += 5
    return max(15, min(40, score))


def harmony_bonus(first: PureWord, second: PureWord) -> float:
    bonus = 0
    if first.modernity >= 9 and second.modernity >= 9:
        bonus += 5
    if first.gender_fit == second.gender_fit:
        bonus += 3
    if {first.imagery, second.imagery} == {'자연', '빛'}:
        bonus += 5
    if first.imagery == second.imagery and first.emotion == second.emotion:
        bonus += 4
    return min(15, bonus)


def combo_modernity(first: PureWord, second: PureWord) -> float:
    score = first.modernity + second.modernity
    score += {3: 20, 2: 12, 4: 3}.get(first.syllables + second.syllables, 0)
    trendy = load_pure_korean().get('trendy_words') or []
    if first.word in trendy or second.word in trendy:
        score += 5
    return max(0, min(35, score))


def _clamp(value: float) -> int:
    return max(0, min(100, round(value)))


def score_single(word: PureWord) -> Tuple[int, Dict[str, float]]:
    bonus = SINGLE_SYLLABLE_BONUS.get(word.syllables, 0)
    modernity = word.modernity * SINGLE_MODERNITY_FACTOR
    raw = SINGLE_BASE + bonus + modernity
    return _clamp(raw), {'base': SINGLE_BASE, 'syllable_bonus': bonus, 'modernity': modernity, 'raw': raw}


def score_combination(first: PureWord, second: PureWord) -> Tuple[int, Dict[str, float]]:
    meaning = meaning_harmony(first, second)
    sound = sound_beauty(first, second)
    harmony = harmony_bonus(first, second)
    modernity = combo_modernity(first, second)

    base = COMBO_BASE
    length = first.syllables + second.syllables
    if length == 3 and not (first.modernity >= 8 and second.modernity >= 8 and meaning >= 35):
        base -= 25
    elif length == 4 and not (first.modernity >= 10 and second.modernity >= 10 and meaning >= 38):
        base -= 30

    raw = base + meaning + sound + harmony + modernity
    return _clamp(raw / COMBO_RAW_MAX * 100), {
        'base': base,
        'meaning': meaning,
        'sound': sound,
        'harmony': harmony,
        'modernity': modernity,
        'raw': raw,
    }


# =============================================================================
# Generator
# =============================================================================

class PureKoreanGenerator:
    """
    Usage:
        names = PureKoreanGenerator().generate('김', gender='F', limit=10)
    """

    def __init__(self, words: Optional[List[PureWord]] = None):
        self.words = list(words) if words is not None else load_words()

    def _pool(self, gender: Optional[str]) -> List[PureWord]:
        if gender is None:
            return list(self.words)
        if gender not in GENDER_FIT:
            raise ValueError(f"gender must be one of {tuple(GENDER_FIT)} or None")
        return [w for w in self.words if w.gender_fit in GENDER_FIT[gender]]

    def generate(self, surname: str, gender: Optional[str] = None,
                 limit: Optional[int] = 20) -> List[PureKoreanName]:
        pool = self._pool(gender)
        results: List[PureKoreanName] = []

        for word in pool:
            if word.position == 'last' or surname_clash(surname, word.word) or is_awkward_single(word):
                continue
            score, breakdown = score_single(word)
            results.append(PureKoreanName(surname, (word,), score, breakdown))

        seen = set()
        firsts = [w for w in pool if w.position != 'last' and not surname_clash(surname, w.word)]
        seconds = [w for w in pool if w.position != 'first']
        for first in firsts:
            for second in seconds:
                if first.word == second.word:
                    continue
                if first.syllables + second.syllables > MAX_COMBO_LENGTH:
                    continue
                pair = tuple(sorted((first.word, second.word)))
                if pair in seen:
                    continue
                seen.add(pair)
                if _initials_match(first, second):
                    continue
                score, breakdown = score_combination(first, second)
                results.append(PureKoreanName(surname, (first, second), score, breakdown))

        results.sort(key=lambda n: (-n.score, n.hangul))
        return results[:limit] if limit is not None else results

    def stats(self) -> Dict[str, Any]:
        return {
            'words': len(self.words),
            'by_imagery': {
                imagery: sum(1 for w in self.words if w.imagery == imagery)
                for imagery in sorted({w.imagery for w in self.words})
            },
        }
