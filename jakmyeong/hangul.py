#!/usr/bin/env python3
"""
Hangul Utilities
================
Syllable decomposition and romanization for Korean names.

A precomposed Hangul syllable (U+AC00..U+D7A3) is split into its
initial (초성), medial (중성) and final (종성) jamo:

    offset = code - 0xAC00
    cho    = offset // 588
    jung   = (offset % 588) // 28
    jong   = offset % 28

Romanization follows the Revised Romanization of Korean applied one
syllable at a time, without sound-change rules across syllables.
"""

from dataclasses import dataclass
from typing import List, Optional

HANGUL_BASE = 0xAC00
HANGUL_LAST = 0xD7A3

CHO = ['ㄱ', 'ㄲ', 'ㄴ', 'ㄷ', 'ㄸ', 'ㄹ', 'ㅁ', 'ㅂ', 'ㅃ', 'ㅅ',
       'ㅆ', 'ㅇ', 'ㅈ', 'ㅉ', 'ㅊ', 'ㅋ', 'ㅌ', 'ㅍ', 'ㅎ']
JUNG = ['ㅏ', 'ㅐ', 'ㅑ', 'ㅒ', 'ㅓ', 'ㅔ', 'ㅕ', 'ㅖ', 'ㅗ', 'ㅘ',
        'ㅙ', 'ㅚ', 'ㅛ', 'ㅜ', 'ㅝ', 'ㅞ', 'ㅟ', 'ㅠ', 'ㅡ', 'ㅢ', 'ㅣ']
JONG = ['', 'ㄱ', 'ㄲ', 'ㄳ', 'ㄴ', 'ㄵ', 'ㄶ', 'ㄷ', 'ㄹ', 'ㄺ',
        'ㄻ', 'ㄼ', 'ㄽ', 'ㄾ', 'ㄿ', 'ㅀ', 'ㅁ', 'ㅂ', 'ㅄ', 'ㅅ',
        'ㅆ', 'ㅇ', 'ㅈ', 'ㅊ', 'ㅋ', 'ㅌ', 'ㅍ', 'ㅎ']

ROUND_VOWELS = frozenset(['ㅗ', 'ㅘ', 'ㅙ', 'ㅚ', 'ㅛ', 'ㅜ', 'ㅝ', 'ㅞ', 'ㅟ', 'ㅠ'])
ASPIRATED = frozenset(['ㅋ', 'ㅌ', 'ㅍ', 'ㅊ'])
TENSE = frozenset(['ㄲ', 'ㄸ', 'ㅃ', 'ㅆ', 'ㅉ'])

ROMAN_INITIAL = {
    'ㄱ': 'g', 'ㄲ': 'kk', 'ㄴ': 'n', 'ㄷ': 'd', 'ㄸ': 'tt',
    'ㄹ': 'r', 'ㅁ': 'm', 'ㅂ': 'b', 'ㅃ': 'pp', 'ㅅ': 's',
    'ㅆ': 'ss', 'ㅇ': '', 'ㅈ': 'j', 'ㅉ': 'jj', 'ㅊ': 'ch',
    'ㅋ': 'k', 'ㅌ': 't', 'ㅍ': 'p', 'ㅎ': 'h',
}

ROMAN_VOWEL = {
    'ㅏ': 'a', 'ㅐ': 'ae', 'ㅑ': 'ya', 'ㅒ': 'yae', 'ㅓ': 'eo',
    'ㅔ': 'e', 'ㅕ': 'yeo', 'ㅖ': 'ye', 'ㅗ': 'o', 'ㅘ': 'wa',
    'ㅙ': 'wae', 'ㅚ': 'oe', 'ㅛ': 'yo', 'ㅜ': 'u', 'ㅝ': 'wo',
    'ㅞ': 'we', 'ㅟ': 'wi', 'ㅠ': 'yu', 'ㅡ': 'eu', 'ㅢ': 'ui', 'ㅣ': 'i',
}

# Representative sounds of final consonants
ROMAN_FINAL = {
    'ㄱ': 'k', 'ㄲ': 'k', 'ㄳ': 'k', 'ㄺ': 'k', 'ㅋ': 'k',
    'ㄴ': 'n', 'ㄵ': 'n', 'ㄶ': 'n',
    'ㄷ': 't', 'ㅅ': 't', 'ㅆ': 't', 'ㅈ': 't', 'ㅊ': 't', 'ㅌ': 't', 'ㅎ': 't',
    'ㄹ': 'l', 'ㄼ': 'l', 'ㄽ': 'l', 'ㄾ': 'l', 'ㅀ': 'l',
    'ㄻ': 'm', 'ㅁ': 'm',
    'ㄿ': 'p', 'ㅂ': 'p', 'ㅄ': 'p', 'ㅍ': 'p',
    'ㅇ': 'ng',
}


@dataclass(frozen=True)
class Jamo:
    """Decomposed Hangul syllable. ``jong`` is '' for open syllables."""
    cho: str
    jung: str
    jong: str


def is_hangul(char: str) -> bool:
    """True for a single precomposed Hangul syllable."""
    if not char or len(char) != 1:
        return False
    return HANGUL_BASE <= ord(char) <= HANGUL_LAST


def decompose(char: str) -> Optional[Jamo]:
    """Split a Hangul syllable into jamo, or None for anything else."""
    if not is_hangul(char):
        return None
    offset = ord(char) - HANGUL_BASE
    return Jamo(
        cho=CHO[offset // 588],
        jung=JUNG[(offset % 588) // 28],
        jong=JONG[offset % 28],
    )


def compose(cho: str, jung: str, jong: str = '') -> str:
    """Build a syllable from jamo (inverse of ``decompose``)."""
    code = HANGUL_BASE + CHO.index(cho) * 588 + JUNG.index(jung) * 28 + JONG.index(jong)
    return chr(code)


def initial_sound(char: str) -> str:
    """Initial consonant of a syllable; non-Hangul characters pass through."""
    jamo = decompose(char)
    return jamo.cho if jamo else char


def has_jong(char: str) -> bool:
    jamo = decompose(char)
    return bool(jamo and jamo.jong)


def is_round_vowel(char: str) -> bool:
    """True when the syllable's medial is a rounded vowel (ㅗ/ㅜ family)."""
    jamo = decompose(char)
    return bool(jamo and jamo.jung in ROUND_VOWELS)


def romanize(text: str) -> str:
    """Romanize Hangul syllable by syllable, lowercase, no separators."""
    parts = []
    for char in text:
        jamo = decompose(char)
        if jamo is None:
            parts.append(char)
            continue
        parts.append(ROMAN_INITIAL.get(jamo.cho, ''))
        parts.append(ROMAN_VOWEL.get(jamo.jung, ''))
        if jamo.jong:
            parts.append(ROMAN_FINAL.get(jamo.jong, ''))
    return ''.join(parts).lower()


def romanization_variants(text: str) -> List[str]:
    """
    Romanized spellings a foreign reader is likely to produce.

    The official romanization comes first, followed by simplified
    spellings (eo→o, eu→u, ae→e, wo→o). Duplicates are dropped while
    keeping order.
    """
    base = romanize(text)
    candidates = [
        base,
        base.replace('eo', 'o').replace('eu', 'u'),
        base.replace('ae', 'e'),
        base.replace('wo', 'o'),
    ]
    seen = []
    for item in candidates:
        if item not in seen:
            seen.append(item)
    return seen
