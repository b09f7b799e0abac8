#!/usr/bin/env python3
"""
Phonetic Filters and Flow Scoring
=================================
Sound-level checks on a two-syllable given name (h1, h2) and its
surname. Filters return a short reason string when the pair must be
dropped and None when it passes. Scoring functions return points.

Rule tables live in ``data/phonetics.yaml``.
"""

from typing import List, Optional

from jakmyeong.elements import CONSONANT_ELEMENTS, GENERATES
from jakmyeong.hangul import ASPIRATED, ROUND_VOWELS, TENSE, Jamo, decompose
from jakmyeong.tables import load_phonetics


def _pair(h1: str, h2: str):
    return decompose(h1), decompose(h2)


# =============================================================================
# Filters
# =============================================================================

def syllable_block(h1: str, h2: str) -> Optional[str]:
    """Configured first/second syllable blocks and specific pair blocks."""
    blocked = load_phonetics().get('blocked_syllables', {}) or {}

    first = blocked.get('first_position', {}) or {}
    if h1 in (first.get('block_all') or []):
        return f"'{h1}' 첫 글자 차단"
    rule = (first.get('block_with_exceptions') or {}).get(h1)
    if rule:
        allowed = rule.get('allowed_second')
        if allowed is not None and h2 not in allowed:
            return f"'{h1}' 뒤에 '{h2}' 불가"
        if h2 in (rule.get('blocked_second') or []):
            return f"'{h1}' 뒤에 '{h2}' 불가"

    second = blocked.get('second_position', {}) or {}
    if h2 in (second.get('block_all') or []):
        return f"'{h2}' 끝 글자 차단"
    rule = (second.get('block_with_exceptions') or {}).get(h2)
    if rule:
        allowed = rule.get('allowed_first')
        if allowed is not None and h1 not in allowed:
            return f"'{h1}' 뒤에 '{h2}' 불가"
        if h1 in (rule.get('blocked_first') or []):
            return f"'{h1}' 뒤에 '{h2}' 불가"

    for first_syl, second_syl in blocked.get('specific_pairs') or []:
        if h1 == first_syl and h2 == second_syl:
            return f"'{h1}{h2}' 조합 차단"

    d1 = decompose(h1)
    for syllable, jongs in (blocked.get('jongseong_rules') or {}).items():
        if h2 == syllable and d1 and d1.jong in jongs:
            return f"받침 '{d1.jong}' 뒤 '{h2}' 차단"

    return None


def awkward_phonetics(h1: str, h2: str) -> Optional[str]:
    """Clashes between the two given-name syllables."""
    d1, d2 = _pair(h1, h2)
    if not d1 or not d2:
        return None
    rules = load_phonetics()

    soft = rules.get('soft_consonants') or []
    if d1.cho == d2.cho and d1.cho != 'ㅇ' and d1.cho not in soft:
        return f"초성 '{d1.cho}' 반복"

    if d1.jong == 'ㄴ' and d2.cho == 'ㄹ':
        return "받침 ㄴ + 초성 ㄹ"
    if d1.jong == 'ㄹ' and d2.cho == 'ㄴ':
        return "받침 ㄹ + 초성 ㄴ"
    if d1.jong == 'ㄴ' and d2.jong == 'ㄴ':
        return "받침 ㄴ 연속"

    if d1.jong == 'ㅇ' and d2.cho == 'ㅇ':
        return "받침 ㅇ + 초성 ㅇ"

    if d2.cho == 'ㄹ':
        if d1.jong in ('ㅇ', 'ㄴ'):
            return f"받침 {d1.jong} + 초성 ㄹ"
        if not d1.jong and d1.cho == 'ㅇ':
            return "ㅇ 음절 + 초성 ㄹ"

    allowed_jong = rules.get('allowed_jong_with_ah') or ['ㅁ', 'ㄴ']
    if d1.jong and d2.cho == 'ㅇ' and d2.jung in ('ㅏ', 'ㅓ'):
        if d1.jong not in allowed_jong:
            return f"받침 {d1.jong} + '{h2}' 연음"

    difficult = rules.get('difficult_jongseong') or []
    if d1.jong in difficult or d2.jong in difficult:
        return "어려운 겹받침"

    if d1.jung == 'ㅜ' and d2.jung == 'ㅣ':
        return "ㅜ + ㅣ 모음"

    return None


def initial_repetition(surname: str, h1: str, h2: str) -> Optional[str]:
    ds, d1, d2 = decompose(surname), decompose(h1), decompose(h2)
    if not ds or not d1 or not d2:
        return None
    if d1.cho == 'ㅇ' and d2.cho == 'ㅇ':
        return None
    if d1.cho == d2.cho:
        return f"초성 반복 ({d1.cho}-{d2.cho})"
    if ds.cho == d1.cho == d2.cho:
        return f"성씨 포함 초성 반복 ({ds.cho})"
    return None


def round_vowel_conflict(h1: str, h2: str) -> Optional[str]:
    d1, d2 = _pair(h1, h2)
    if not d1 or not d2:
        return None
    if d1.jung in ROUND_VOWELS and d2.jung in ROUND_VOWELS:
        return f"원순모음 충돌 ({d1.jung}-{d2.jung})"
    return None


def jong_cho_conflict(a: str, b: str) -> Optional[str]:
    """ㄴ/ㄹ clusters across the syllable seam a|b."""
    da, db = _pair(a, b)
    if not da or not db:
        return None
    if (da.jong, db.cho) in (('ㄴ', 'ㄹ'), ('ㄹ', 'ㄴ')):
        return f"종성-초성 충돌 ({a}{b}: {da.jong}-{db.cho})"
    return None


def aspirated_block(h1: str, h2: str) -> Optional[str]:
    """ㅋㅌㅍㅊ initials outside the popular exception lists."""
    d1, d2 = _pair(h1, h2)
    if not d1 or not d2:
        return None
    lists = load_phonetics().get('aspirated', {}) or {}
    if d2.cho in ASPIRATED and h2 not in (lists.get('popular_second') or []):
        return f"둘째 글자 격음 '{h2}'"
    if d1.cho in ASPIRATED and h1 not in (lists.get('popular_first') or []):
        return f"첫 글자 격음 '{h1}'"
    return None


# =============================================================================
# Scoring
# =============================================================================

def phonetic_flow_score(h1: str, h2: str) -> int:
    """Vowel harmony, seam smoothness and final-consonant balance."""
    d1, d2 = _pair(h1, h2)
    if not d1 or not d2:
        return 0
    rules = load_phonetics()
    flow = rules.get('flow', {}) or {}
    yang = flow.get('yang_vowels') or []
    eum = flow.get('eum_vowels') or []
    score = 0

    if (d1.jung in yang and d2.jung in yang) or (d1.jung in eum and d2.jung in eum):
        score += 5
    if (d1.jung in yang and d2.jung in eum) or (d1.jung in eum and d2.jung in yang):
        score -= 3

    smooth = flow.get('smooth_transitions') or {}
    if d2.cho in (smooth.get(d1.jong or 'open') or []):
        score += 5

    if d1.jong and not d2.jong:
        score += 3
    if not d1.jong and not d2.jong:
        score -= 5
    if d1.jong and d2.jong:
        score += 1

    if d1.jung == 'ㅣ' and d2.jung == 'ㅣ':
        score -= 8
    if d1.jung == 'ㅓ' and d2.jung in ('ㅣ', 'ㅡ'):
        score -= 5

    aspirated = rules.get('aspirated', {}) or {}
    popular_first = aspirated.get('popular_first') or []
    popular_second = aspirated.get('popular_second') or []
    if d1.cho in ASPIRATED and h1 not in popular_first:
        score -= 15
    if d2.cho in ASPIRATED and h2 not in popular_second:
        score -= 25
    if d1.cho in ASPIRATED and d2.cho in ASPIRATED:
        if h1 not in popular_first or h2 not in popular_second:
            score -= 35

    if d1.cho in TENSE or d2.cho in TENSE:
        score -= 20

    if (not d1.jong and d2.cho in (flow.get('soft_initials') or [])
            and d2.jong in (flow.get('clean_endings') or [])):
        score += 15
    if d2.cho == 'ㄹ' and d2.jong == 'ㄴ':
        score += 5
    if d1.cho in (flow.get('soft_start') or []):
        score += 3

    return score


def surname_harmony(surname: str, h1: str, h2: str) -> int:
    """발음오행 harmony from the surname initial through both syllables."""
    ds, d1, d2 = decompose(surname), decompose(h1), decompose(h2)
    if not ds or not d1 or not d2:
        return 0
    surname_el = CONSONANT_ELEMENTS.get(ds.cho)
    el1 = CONSONANT_ELEMENTS.get(d1.cho)
    el2 = CONSONANT_ELEMENTS.get(d2.cho)
    score = 0
    if surname_el and el1:
        if GENERATES.get(surname_el) == el1:
            score += 15
        elif surname_el == el1:
            score += 5
    if el1 and el2 and GENERATES.get(el1) == el2:
        score += 10
    return score


def surname_flow(surname: str, h1: str) -> int:
    """Seam penalties between the surname and the first syllable (<= 0)."""
    ds, d1 = decompose(surname), decompose(h1)
    if not ds or not d1:
        return 0
    penalty = 0
    if ds.jong and d1.jong:
        penalty -= 3
    if ds.jong == 'ㅇ' and d1.cho in ('ㅅ', 'ㅈ', 'ㅊ', 'ㅆ') and d1.jong:
        penalty -= 4
    if ds.cho == d1.cho and ds.cho != 'ㅇ':
        penalty -= 5
    return penalty


def _coda_onset_score(surname: str, h1: str) -> float:
    ds, d1 = decompose(surname), decompose(h1)
    if not ds or not d1:
        return 0
    for pattern in load_phonetics().get('surname_coda_onset') or []:
        if pattern.get('surname_coda', '') == ds.jong and pattern.get('onset') == d1.cho:
            return pattern.get('bonus') or -(pattern.get('penalty') or 0)
    return 0


def syllable_structure(jamo: Jamo) -> str:
    """CV, CVNG, CVN or CVC."""
    if jamo.jong == 'ㄴ':
        return 'CVN'
    if jamo.jong == 'ㅇ':
        return 'CVNG'
    if jamo.jong:
        return 'CVC'
    return 'CV'


def _three_syllable_score(surname: str, h1: str, h2: str) -> float:
    parts = [decompose(s) for s in (surname, h1, h2)]
    if not all(parts):
        return 0
    pattern = '-'.join(syllable_structure(p) for p in parts)
    rules = load_phonetics().get('three_syllable_patterns', {}) or {}
    for p in rules.get('preferred') or []:
        if p['pattern'] == pattern:
            return p.get('bonus', 0)
    for p in rules.get('avoided') or []:
        if p['pattern'] == pattern:
            return -p.get('penalty', 0)
    return 0


def _romanization_score(h1: str, h2: str) -> float:
    rules = load_phonetics().get('romanization', {}) or {}
    easy = rules.get('easy', {}) or {}
    difficult = rules.get('difficult', {}) or {}
    score = 0
    for syllable in (h1, h2):
        if syllable in (easy.get('syllables') or []):
            score += easy.get('bonus', 0)
        if syllable in (difficult.get('syllables') or []):
            score -= difficult.get('penalty', 0)
    return score


def rhythm_type(h1: str, h2: str) -> str:
    """rising, falling, heavy or balanced."""
    rhythm = load_phonetics().get('rhythm', {}) or {}
    light = rhythm.get('light') or []
    heavy = rhythm.get('heavy') or []

    def weight(syllable: str) -> str:
        if syllable in light:
            return 'light'
        if syllable in heavy:
            return 'heavy'
        return 'medium'

    w1, w2 = weight(h1), weight(h2)
    if w1 == 'light' and w2 == 'heavy':
        return 'rising'
    if w1 == 'heavy' and w2 == 'light':
        return 'falling'
    if w1 == 'heavy' and w2 == 'heavy':
        return 'heavy'
    return 'balanced'


def _rhythm_score(h1: str, h2: str) -> float:
    kind = rhythm_type(h1, h2)
    for p in load_phonetics().get('rhythm', {}).get('patterns') or []:
        if p['type'] == kind:
            return p.get('bonus') or -(p.get('penalty') or 0)
    return 0


def _difficulty_score(h1: str, h2: str) -> float:
    d1, d2 = _pair(h1, h2)
    if not d1 or not d2:
        return 0
    rules = load_phonetics().get('pronunciation_difficulty', {}) or {}
    friendly = rules.get('child_friendly', {}) or {}
    difficult = rules.get('difficult_onsets', {}) or {}
    score = 0
    for jamo in (d1, d2):
        if jamo.cho in (friendly.get('onsets') or []):
            score += friendly.get('bonus', 0) / 2
        if jamo.cho in (difficult.get('onsets') or []):
            score -= difficult.get('penalty', 0)
    return score


def advanced_phonetic_score(surname: str, h1: str, h2: str) -> float:
    """Surname coda/onset, syllable structure, romanization, rhythm, difficulty."""
    return (
        _coda_onset_score(surname, h1)
        + _three_syllable_score(surname, h1, h2)
        + _romanization_score(h1, h2)
        + _rhythm_score(h1, h2)
        + _difficulty_score(h1, h2)
    )


def phonetic_filters(surname: str, h1: str, h2: str) -> List[str]:
    """Every hard phonetic reason that applies to a name, in filter order."""
    checks = [
        aspirated_block(h1, h2),
        syllable_block(h1, h2),
        awkward_phonetics(h1, h2),
        initial_repetition(surname, h1, h2),
        round_vowel_conflict(h1, h2),
        jong_cho_conflict(surname, h1),
        jong_cho_conflict(h1, h2),
    ]
    return [reason for reason in checks if reason]
